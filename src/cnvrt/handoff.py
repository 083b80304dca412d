"""Take-once handoff of the file path the process was launched with."""

from __future__ import annotations

import threading


class HandoffError(RuntimeError):
    """Handoff was set twice."""


class InitialPathHandoff:
    """Holds the startup file path until someone consumes it.

    ``set`` may be called once; ``take`` returns the value the first time
    and None afterwards.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: str | None = None
        self._assigned = False
        self._taken = False

    def set(self, path: str) -> None:
        with self._lock:
            if self._assigned:
                raise HandoffError("initial path already set")
            self._assigned = True
            self._value = path

    def take(self) -> str | None:
        with self._lock:
            if self._taken:
                return None
            self._taken = True
            value, self._value = self._value, None
            return value

    @property
    def pending(self) -> bool:
        """Check if a value is set and not yet taken."""
        with self._lock:
            return self._assigned and not self._taken
