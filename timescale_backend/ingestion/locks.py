"""
Per-file-name locks.

Serializes ingestions of the same file name within one process. Different
file names never block each other.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class FileNameLockRegistry:
    """Reference-counted registry of one lock per file name."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @contextmanager
    def hold(self, file_name: str) -> Iterator[None]:
        """Hold the lock for file_name for the duration of the block."""
        with self._guard:
            lock = self._locks.setdefault(file_name, threading.Lock())
            self._waiters[file_name] = self._waiters.get(file_name, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[file_name] -= 1
                if self._waiters[file_name] == 0:
                    del self._waiters[file_name]
                    del self._locks[file_name]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
