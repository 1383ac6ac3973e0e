"""
Per-key mutual exclusion.

Request handlers run concurrently in the server threadpool. Read-then-write
sequences that must not interleave for the same table (order creation,
settlement, status changes) take the table's lock first:

    with table_locks.hold(table_id):
        ...

LOCK ORDERING CONSTRAINTS:
- _meta_lock only guards the dictionaries; it is never held while waiting
  on a key lock, so acquiring two different keys cannot deadlock on it.
- Key locks are NOT reentrant. Code holding a table lock must not call a
  service method that takes the same table lock again.

Locks are reference counted and dropped when no thread holds or waits on
them, so the registry does not grow with the number of tables ever touched.
This only serializes callers within one process; the services also lock the
table row (SELECT ... FOR UPDATE) for multi-process deployments.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from pos_shared.config.logging import get_logger

logger = get_logger(__name__)


class KeyedLockRegistry:
    """Hands out one threading.Lock per key."""

    def __init__(self, name: str):
        self.name = name
        self._meta_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._refcounts: dict[str, int] = {}

    @property
    def lock_count(self) -> int:
        """Number of locks currently cached."""
        with self._meta_lock:
            return len(self._locks)

    def _acquire_ref(self, key: str) -> threading.Lock:
        with self._meta_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
                self._refcounts[key] = 0
            self._refcounts[key] += 1
            return lock

    def _release_ref(self, key: str) -> None:
        with self._meta_lock:
            self._refcounts[key] -= 1
            if self._refcounts[key] == 0:
                del self._refcounts[key]
                del self._locks[key]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for `key` for the duration of the block."""
        lock = self._acquire_ref(key)
        try:
            with lock:
                yield
        finally:
            self._release_ref(key)


# Serializes order creation, settlement and status changes per table
table_locks = KeyedLockRegistry("table")
