"""Guard preventing overlapping mutations of the same in-memory state."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generator

from chefmate.errors import BatchInProgressError


class InFlightGuard:
    """Non-blocking lock held for the whole duration of a user action."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Generator[None, None, None]:
        if not self._lock.acquire(blocking=False):
            raise BatchInProgressError(f"Another {self._name} change is still in progress")
        try:
            yield
        finally:
            self._lock.release()


__all__ = ["InFlightGuard"]
