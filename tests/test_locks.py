import gc
import threading
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockNotOwnedError

from bookly import deps
from bookly.config import Settings
from bookly.errors import ConflictError, StorageError
from bookly.services.slots.locks import LocalLockRegistry, RedisLockRegistry


def fake_redis(acquire_results):
    redis = MagicMock()
    locks = []

    def make_lock(name, **kwargs):
        lock = MagicMock(name=name)
        lock.name = name
        lock.acquire.side_effect = [acquire_results.pop(0)] if acquire_results else [True]
        locks.append(lock)
        return lock

    redis.lock.side_effect = make_lock
    return redis, locks


def test_redis_locks_acquired_in_sorted_order_and_released():
    redis, locks = fake_redis([True, True])
    registry = RedisLockRegistry(redis, timeout_seconds=2)

    with registry.hold([("room-2", "2026-10-20"), ("room-1", "2026-10-27")]):
        assert all(not lock.release.called for lock in locks)

    assert [lock.name for lock in locks] == [
        "lock:reserve:room-1:2026-10-27",
        "lock:reserve:room-2:2026-10-20",
    ]
    assert all(lock.release.call_count == 1 for lock in locks)
    _, kwargs = redis.lock.call_args
    assert kwargs["blocking_timeout"] == 2


def test_redis_lock_timeout_is_conflict_and_releases_held_keys():
    redis, locks = fake_redis([True, False])
    registry = RedisLockRegistry(redis)

    with pytest.raises(ConflictError):
        with registry.hold([("room-1", "2026-10-20"), ("room-1", "2026-10-21")]):
            pytest.fail("body must not run without every lock")

    assert locks[0].release.call_count == 1
    assert not locks[1].release.called


def test_redis_unreachable_is_storage_error():
    redis = MagicMock()
    redis.lock.return_value.acquire.side_effect = RedisConnectionError("refused")

    with pytest.raises(StorageError):
        with RedisLockRegistry(redis).hold([("room-1", "2026-10-20")]):
            pass


def test_redis_release_failure_is_logged_not_raised(caplog):
    redis, locks = fake_redis([True])
    registry = RedisLockRegistry(redis)

    with registry.hold([("room-1", "2026-10-20")]):
        locks[0].release.side_effect = LockNotOwnedError("lease expired")

    assert "Failed to release reservation lock" in caplog.text


def test_local_lock_blocks_same_key_until_timeout():
    registry = LocalLockRegistry(timeout_seconds=0.05)
    held = threading.Event()
    done = threading.Event()

    def holder():
        with registry.hold([("room-1", "2026-10-20")]):
            held.set()
            done.wait(2)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(2)
    try:
        with pytest.raises(ConflictError):
            with registry.hold([("room-1", "2026-10-20")]):
                pass
        # other keys are independent
        with registry.hold([("room-1", "2026-10-21")]):
            pass
    finally:
        done.set()
        thread.join()

    with registry.hold([("room-1", "2026-10-20")]):
        pass


def test_local_lock_released_after_exception():
    registry = LocalLockRegistry(timeout_seconds=0.05)
    with pytest.raises(RuntimeError):
        with registry.hold([("room-1", "2026-10-20"), ("room-1", "2026-10-20")]):
            raise RuntimeError("boom")

    with registry.hold([("room-1", "2026-10-20")]):
        pass


def test_local_registry_forgets_released_locks():
    registry = LocalLockRegistry(timeout_seconds=0.05)
    for day in ("2026-10-20", "2026-10-21", "2026-10-22"):
        with registry.hold([("room-1", day)]):
            assert ("room-1", day) in registry._locks
    gc.collect()

    assert len(registry._locks) == 0


def test_redis_lease_comes_from_settings(monkeypatch):
    redis = MagicMock()
    monkeypatch.setattr(deps, "redis_client", redis)
    monkeypatch.setattr(
        deps,
        "get_settings",
        lambda: Settings(reservation_lock_timeout_seconds=2, reservation_lock_lease_seconds=90),
    )

    registry = deps.get_locks.__wrapped__()
    with registry.hold([("room-1", "2026-10-20")]):
        pass

    _, kwargs = redis.lock.call_args
    assert kwargs == {"timeout": 90, "blocking_timeout": 2}
