"""
Per-application advisory locks.

Both bot schedulers and the manual tool calls mutate application records.
Every read-modify-write of one application happens while holding that
application's lock, and the record is re-read inside the lock.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class ApplicationLocks:
    """
    Registry of one ``threading.Lock`` per application id.

    A lock lives only while some thread holds or waits for it; the last
    holder to leave removes it, so the registry does not grow with every
    application ever touched.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}
        self._holders: Dict[int, int] = {}

    def _acquire_entry(self, application_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(application_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[application_id] = lock
            self._holders[application_id] = self._holders.get(application_id, 0) + 1
            return lock

    def _release_entry(self, application_id: int) -> None:
        with self._guard:
            remaining = self._holders[application_id] - 1
            if remaining:
                self._holders[application_id] = remaining
            else:
                del self._holders[application_id]
                del self._locks[application_id]

    @contextmanager
    def hold(self, application_id: int) -> Iterator[None]:
        """Hold the lock for ``application_id`` for the duration of the block."""
        lock = self._acquire_entry(application_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(application_id)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
