# backend/bookly/services/slots/locks.py
"""
Per (room_id, date) locks guarding the reservation check-and-insert.

Key format: lock:reserve:{room_id}:{date}

Two registries:
- LocalLockRegistry: threading locks, one process
- RedisLockRegistry: redis-py Lock, shared across workers

Several keys are always acquired in sorted order (recurring bookings).
Acquisition is bounded by a timeout; timeout → ConflictError.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterable, Iterator, Protocol

from redis import Redis
from redis.exceptions import LockError, RedisError

from ...errors import ConflictError, StorageError

logger = logging.getLogger(__name__)

LockKey = tuple[str, str]


def _sorted_unique(keys: Iterable[LockKey]) -> list[LockKey]:
    return sorted(set(keys))


class ReservationLocks(Protocol):
    def hold(self, keys: Iterable[LockKey]) -> Iterator[None]:
        ...


class LocalLockRegistry:
    """
    In-process lock per (room_id, date), created lazily.

    Entries are weak: a lock disappears once no holder or waiter references it.
    """

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds
        self._locks: "weakref.WeakValueDictionary[LockKey, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: LockKey) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, keys: Iterable[LockKey]) -> Iterator[None]:
        acquired: list[threading.Lock] = []
        try:
            for key in _sorted_unique(keys):
                lock = self._lock_for(key)
                if not lock.acquire(timeout=self.timeout_seconds):
                    logger.warning(f"Reservation lock timeout for {key}")
                    raise ConflictError("Room is busy, please retry.")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


class RedisLockRegistry:
    """Redis-backed lock per (room_id, date)."""

    KEY_PREFIX = "lock:reserve"

    def __init__(
        self,
        redis: Redis,
        timeout_seconds: float = 5.0,
        lease_seconds: float = 30.0,
    ):
        self.redis = redis
        self.timeout_seconds = timeout_seconds
        self.lease_seconds = lease_seconds

    def _key(self, key: LockKey) -> str:
        room_id, day = key
        return f"{self.KEY_PREFIX}:{room_id}:{day}"

    @contextmanager
    def hold(self, keys: Iterable[LockKey]) -> Iterator[None]:
        acquired = []
        try:
            for key in _sorted_unique(keys):
                lock = self.redis.lock(
                    self._key(key),
                    timeout=self.lease_seconds,
                    blocking_timeout=self.timeout_seconds,
                )
                try:
                    ok = lock.acquire()
                except RedisError as e:
                    raise StorageError(f"Lock backend unavailable: {e}") from e
                if not ok:
                    logger.warning(f"Reservation lock timeout for {key}")
                    raise ConflictError("Room is busy, please retry.")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                try:
                    lock.release()
                except (LockError, RedisError) as e:
                    # Lease expired or connection lost; key expires on its own
                    logger.error(f"Failed to release reservation lock {lock.name}: {e}")
