"""
Class Filter - case-insensitive substring denylist.

Substring matching is deliberate: one entry such as "motion" suppresses
every class whose name contains it.
"""

from collections.abc import Iterable


def should_skip_class(class_name: str, denylist: Iterable[str]) -> bool:
    """
    Check whether a detected class is denylisted.

    Args:
        class_name: Detected object class
        denylist: Lower-case substrings (empty = nothing filtered)

    Returns:
        True if the class contains any denylist entry
    """
    lowered = class_name.lower()
    return any(entry in lowered for entry in denylist)
