"""Per-key mutual exclusion for the alert dedup check and insert.

The dedup query and the alert insert are two statements; two requests for
the same (station, variable) pair could both see "no open alert" and both
insert. Holding a lock keyed on the pair from the check until commit
serialises them without blocking unrelated pairs.
"""

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class KeyedLock:
    """A pool of mutexes, one per key, created on demand and dropped when idle."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        """Number of keys currently held or awaited."""
        with self._guard:
            return len(self._locks)
