"""In-process guard that keeps at most one sync run per entry."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class EntryGuard:
    """Map of primary-catalog IDs with a run in progress.

    Check-and-set happens under one lock; a second caller for the same key is told to back
    off instead of waiting. Cross-process races are left to the conditional state update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_progress: set[int] = set()

    def try_acquire(self, key: int) -> bool:
        with self._lock:
            if key in self._in_progress:
                return False
            self._in_progress.add(key)
            return True

    def release(self, key: int) -> None:
        with self._lock:
            self._in_progress.discard(key)

    def is_held(self, key: int) -> bool:
        with self._lock:
            return key in self._in_progress

    @contextmanager
    def hold(self, key: int) -> Iterator[bool]:
        acquired = self.try_acquire(key)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(key)
