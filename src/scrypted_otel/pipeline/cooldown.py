"""
Device Cooldown Gate

Tracks when each device last produced a metric and suppresses whole sessions
that arrive inside the cooldown window.
"""

import logging
import math
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class CooldownState:
    """
    Last-emission timestamps keyed by device id.

    One instance lives as long as one pipeline; reinitializing the pipeline
    creates a fresh state. Each device gets its own lock so a check-then-update
    for one device never races another session for the same device, while
    different devices never contend.
    """

    def __init__(self):
        self._last_emission: dict[str, float] = {}
        self._device_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lock_for(self, device_id: str) -> threading.Lock:
        """Return the lock serializing sessions for one device."""
        with self._locks_guard:
            lock = self._device_locks.get(device_id)
            if lock is None:
                lock = threading.Lock()
                self._device_locks[device_id] = lock
            return lock

    def last_emission(self, device_id: str) -> float | None:
        return self._last_emission.get(device_id)

    def mark_emitted(self, device_id: str, now: float) -> None:
        self._last_emission[device_id] = now

    def clear(self) -> None:
        """Forget all emission times. Device locks are kept so holders stay exclusive."""
        with self._locks_guard:
            self._last_emission.clear()

    def __contains__(self, device_id: str) -> bool:
        return device_id in self._last_emission

    def __len__(self) -> int:
        return len(self._last_emission)


class CooldownGate:
    """
    Per-device rate limit applied to whole detection sessions.

    The gate never updates state on its own: callers hold the device lock,
    check(), do their work, and call record_emission() only if something was
    actually emitted.
    """

    def __init__(self, state: CooldownState, cooldown_seconds: float):
        self.state = state
        self.cooldown_seconds = cooldown_seconds

    @contextmanager
    def hold(self, device_id: str) -> Iterator[None]:
        """Serialize the check/update sequence for one device."""
        with self.state.lock_for(device_id):
            yield

    def elapsed(self, device_id: str, now: float) -> float | None:
        last = self.state.last_emission(device_id)
        if last is None:
            return None
        return now - last

    def check(self, device_id: str, now: float) -> bool:
        """
        Check whether a session for this device may proceed.

        Args:
            device_id: Device the session belongs to
            now: Wall-clock receipt time (seconds)

        Returns:
            True if the device is outside its cooldown window
        """
        elapsed = self.elapsed(device_id, now)
        if elapsed is None or elapsed >= self.cooldown_seconds:
            return True
        logger.debug(
            f"Device {device_id} in cooldown, {self.remaining(device_id, now)}s remaining"
        )
        return False

    def remaining(self, device_id: str, now: float) -> int:
        """Whole seconds left in the cooldown window (0 if none)."""
        elapsed = self.elapsed(device_id, now)
        if elapsed is None or elapsed >= self.cooldown_seconds:
            return 0
        return math.ceil(self.cooldown_seconds - elapsed)

    def record_emission(self, device_id: str, now: float) -> None:
        """Start a new cooldown window for the device."""
        self.state.mark_emitted(device_id, now)
