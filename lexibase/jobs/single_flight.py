"""Skip-if-busy execution guard for periodic jobs."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class SingleFlightGuard:
    """Allows at most one holder at a time; other callers are turned away, not queued."""

    def __init__(self, name: str = "job") -> None:
        self.name = name
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @contextmanager
    def attempt(self) -> Iterator[bool]:
        """Yield True when the guard was acquired for the duration of the block."""

        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()


__all__ = ["SingleFlightGuard"]
