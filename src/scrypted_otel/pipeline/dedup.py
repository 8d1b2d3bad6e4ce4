"""
Per-Session Deduplicator
"""


class SessionDeduplicator:
    """
    Tracks class names already emitted within one detection session.

    Create one per session; nothing carries over between sessions. The first
    occurrence of a class wins, so later duplicates are dropped even if they
    score higher.
    """

    def __init__(self):
        self._emitted: set[str] = set()

    def should_emit(self, class_name: str) -> bool:
        """Return True (and remember the class) the first time it is seen."""
        if class_name in self._emitted:
            return False
        self._emitted.add(class_name)
        return True

    @property
    def emitted(self) -> frozenset[str]:
        return frozenset(self._emitted)
