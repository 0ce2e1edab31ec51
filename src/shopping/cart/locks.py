"""Per-owner mutual exclusion for cart commands.

Locks are process-local and are held around a whole command, commit included.
Across processes the aggregate version check is what keeps writes from being
lost; the lock only saves those retries when one process serves the same
owner twice at once.
"""

import threading
from contextlib import ExitStack, contextmanager


class OwnerLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, *keys):
        """Hold the lock of every owner key given.

        Locks are taken in sorted key order so two holders of overlapping
        owner sets cannot deadlock.
        """
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._locked(key))
            yield

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def _locked(self, key):
        lock = self._acquire_ref(key)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            self._release_ref(key)

    def _acquire_ref(self, key):
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    def _release_ref(self, key):
        with self._guard:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]
