# backend/bookly/deps.py
"""
FastAPI dependencies wiring the store, lock registry and engine.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db
from .redis_client import redis_client
from .services.booking_engine import BookingEngine
from .services.slots.locks import LocalLockRegistry, RedisLockRegistry, ReservationLocks
from .services.store import SqlBookingStore


@dataclass(frozen=True)
class Identity:
    is_authenticated: bool
    email: Optional[str] = None


@lru_cache
def get_locks() -> ReservationLocks:
    """One registry per process; Redis-backed when REDIS_URL is set."""
    settings = get_settings()
    timeout = settings.reservation_lock_timeout_seconds
    if redis_client is not None:
        return RedisLockRegistry(
            redis_client,
            timeout_seconds=timeout,
            lease_seconds=settings.reservation_lock_lease_seconds,
        )
    return LocalLockRegistry(timeout_seconds=timeout)


def get_store(db: Session = Depends(get_db)) -> SqlBookingStore:
    return SqlBookingStore(db)


def get_engine(
    store: SqlBookingStore = Depends(get_store),
    locks: ReservationLocks = Depends(get_locks),
) -> BookingEngine:
    return BookingEngine(store, locks)


def get_identity(
    x_authenticated: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
) -> Identity:
    """Identity is resolved upstream; we only read the forwarded headers."""
    authenticated = (x_authenticated or "").strip().lower() in ("1", "true", "yes")
    return Identity(is_authenticated=authenticated, email=x_user_email)
