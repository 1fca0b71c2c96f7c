# backend/bookly/services/store.py
"""
Booking store abstraction.

The engine never touches a global collection; it receives a store:
- SqlBookingStore: SQLAlchemy session (production)
- MemoryBookingStore: instance-scoped dicts (tests, embedding)

Write methods commit on their own unless called inside `transaction()`,
in which case everything commits (or rolls back) together.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain import Booking, Room, TimeRange
from ..errors import StorageError
from ..models import AppConfig as DBAppConfig
from ..models import Bookings as DBBookings
from ..models import Rooms as DBRooms
from .slots.config import DaySchedule, default_day_schedule

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_KEYS = ("slot_duration_minutes", "start_of_day", "end_of_day")


class BookingStore(Protocol):
    def transaction(self) -> Iterator[None]: ...

    # Configuration
    def get_configuration(self) -> DaySchedule: ...
    def save_configuration(self, schedule: DaySchedule) -> None: ...

    # Rooms
    def get_rooms(self) -> list[Room]: ...
    def get_room(self, room_id: str) -> Optional[Room]: ...
    def save_room(self, room: Room) -> None: ...
    def delete_room(self, room_id: str) -> None: ...
    def replace_all_rooms(self, rooms: list[Room]) -> None: ...

    # Bookings
    def get_bookings_for_room_and_date(self, room_id: str, day: str) -> list[Booking]: ...
    def get_all_bookings(self) -> list[Booking]: ...
    def get_booking(self, booking_id: str) -> Optional[Booking]: ...
    def persist_booking(self, booking: Booking) -> None: ...
    def update_booking(self, booking: Booking) -> None: ...
    def delete_booking(self, booking_id: str) -> None: ...
    def delete_bookings_for_room(self, room_id: str) -> int: ...
    def replace_all_bookings(self, bookings: list[Booking]) -> None: ...


def _schedule_from_values(values: dict) -> DaySchedule:
    """Merge stored values over defaults; fall back to defaults on bad data."""
    base = default_day_schedule().to_dict()
    for key in CONFIG_KEYS:
        if values.get(key) is not None:
            base[key] = values[key]
    try:
        return DaySchedule(
            slot_duration_minutes=int(base["slot_duration_minutes"]),
            start_of_day=str(base["start_of_day"]),
            end_of_day=str(base["end_of_day"]),
        )
    except (TypeError, ValueError) as e:
        logger.error(f"Stored configuration invalid ({e}), using defaults")
        return default_day_schedule()


# ── In-memory store ──────────────────────────────────────────────────────


class MemoryBookingStore:
    """Dict-backed store. Each instance owns its data."""

    def __init__(
        self,
        rooms: Optional[list[Room]] = None,
        bookings: Optional[list[Booking]] = None,
        schedule: Optional[DaySchedule] = None,
    ):
        self._rooms: dict[str, Room] = {r.id: r for r in rooms or []}
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings or []}
        self._config: dict = schedule.to_dict() if schedule else {}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snapshot = (
                dict(self._rooms),
                dict(self._bookings),
                copy.deepcopy(self._config),
            )
            try:
                yield
            except BaseException:
                self._rooms, self._bookings, self._config = snapshot
                raise

    def get_configuration(self) -> DaySchedule:
        with self._lock:
            return _schedule_from_values(self._config)

    def save_configuration(self, schedule: DaySchedule) -> None:
        with self._lock:
            self._config = schedule.to_dict()

    def get_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def save_room(self, room: Room) -> None:
        with self._lock:
            self._rooms[room.id] = room

    def delete_room(self, room_id: str) -> None:
        with self._lock:
            self._rooms.pop(room_id, None)

    def replace_all_rooms(self, rooms: list[Room]) -> None:
        with self._lock:
            self._rooms = {r.id: r for r in rooms}

    def get_bookings_for_room_and_date(self, room_id: str, day: str) -> list[Booking]:
        with self._lock:
            return [
                b for b in self._bookings.values()
                if b.room_id == room_id and b.date == day
            ]

    def get_all_bookings(self) -> list[Booking]:
        with self._lock:
            return list(self._bookings.values())

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            return self._bookings.get(booking_id)

    def persist_booking(self, booking: Booking) -> None:
        with self._lock:
            if booking.id in self._bookings:
                raise StorageError(f"Booking {booking.id} already exists")
            self._bookings[booking.id] = booking

    def update_booking(self, booking: Booking) -> None:
        with self._lock:
            self._bookings[booking.id] = booking

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            self._bookings.pop(booking_id, None)

    def delete_bookings_for_room(self, room_id: str) -> int:
        with self._lock:
            doomed = [b.id for b in self._bookings.values() if b.room_id == room_id]
            for booking_id in doomed:
                del self._bookings[booking_id]
            return len(doomed)

    def replace_all_bookings(self, bookings: list[Booking]) -> None:
        with self._lock:
            self._bookings = {b.id: b for b in bookings}


# ── SQLAlchemy store ─────────────────────────────────────────────────────


def _room_from_row(row: DBRooms) -> Room:
    return Room(id=row.id, name=row.name, capacity=row.capacity)


def _booking_from_row(row: DBBookings) -> Booking:
    return Booking(
        id=row.id,
        room_id=row.room_id,
        room_name=row.room_name,
        date=row.date,
        time_range=TimeRange.from_times(row.start_time, row.end_time),
        title=row.title,
        user_name=row.user_name,
        user_email=row.user_email,
    )


def _booking_to_row(booking: Booking) -> DBBookings:
    return DBBookings(
        id=booking.id,
        room_id=booking.room_id,
        room_name=booking.room_name,
        date=booking.date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        title=booking.title,
        user_name=booking.user_name,
        user_email=booking.user_email,
    )


class SqlBookingStore:
    """Store over a SQLAlchemy session. All queries go through the ORM."""

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    # ── Transactions ─────────────────────────────────────────────────────

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth == 0 and self.db.in_transaction():
            # End any read-only transaction so reads below see fresh data
            self._commit()
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self.db.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self._commit()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Store commit failed")
            raise StorageError("Failed to write to the booking store.") from e

    def _write(self, fn: Callable[[], T]) -> T:
        """Run `fn`, then flush inside a transaction or commit outside one."""
        try:
            result = fn()
            if self._depth:
                self.db.flush()
            else:
                self.db.commit()
            return result
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Store write failed")
            raise StorageError("Failed to write to the booking store.") from e

    def _read(self, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as e:
            logger.exception("Store read failed")
            raise StorageError("Failed to read from the booking store.") from e

    # ── Configuration ────────────────────────────────────────────────────

    def get_configuration(self) -> DaySchedule:
        rows = self._read(lambda: self.db.query(DBAppConfig).populate_existing().all())
        return _schedule_from_values({row.key: row.value for row in rows})

    def save_configuration(self, schedule: DaySchedule) -> None:
        def apply():
            for key, value in schedule.to_dict().items():
                self.db.merge(DBAppConfig(key=key, value=str(value)))

        self._write(apply)

    # ── Rooms ────────────────────────────────────────────────────────────

    def get_rooms(self) -> list[Room]:
        rows = self._read(
            lambda: self.db.query(DBRooms).order_by(DBRooms.name).populate_existing().all()
        )
        return [_room_from_row(row) for row in rows]

    def get_room(self, room_id: str) -> Optional[Room]:
        row = self._read(lambda: self.db.get(DBRooms, room_id, populate_existing=True))
        return _room_from_row(row) if row else None

    def save_room(self, room: Room) -> None:
        self._write(
            lambda: self.db.merge(DBRooms(id=room.id, name=room.name, capacity=room.capacity))
        )

    def delete_room(self, room_id: str) -> None:
        self._write(lambda: self.db.query(DBRooms).filter(DBRooms.id == room_id).delete())

    def replace_all_rooms(self, rooms: list[Room]) -> None:
        def apply():
            self.db.query(DBRooms).delete()
            self.db.flush()
            self.db.add_all(
                DBRooms(id=room.id, name=room.name, capacity=room.capacity) for room in rooms
            )

        self._write(apply)

    # ── Bookings ─────────────────────────────────────────────────────────

    def get_bookings_for_room_and_date(self, room_id: str, day: str) -> list[Booking]:
        rows = self._read(
            lambda: self.db.query(DBBookings)
            .filter(DBBookings.room_id == room_id, DBBookings.date == day)
            .populate_existing()
            .all()
        )
        return [_booking_from_row(row) for row in rows]

    def get_all_bookings(self) -> list[Booking]:
        rows = self._read(lambda: self.db.query(DBBookings).populate_existing().all())
        return [_booking_from_row(row) for row in rows]

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        row = self._read(lambda: self.db.get(DBBookings, booking_id, populate_existing=True))
        return _booking_from_row(row) if row else None

    def persist_booking(self, booking: Booking) -> None:
        self._write(lambda: self.db.add(_booking_to_row(booking)))

    def update_booking(self, booking: Booking) -> None:
        def apply():
            row = self.db.get(DBBookings, booking.id)
            if row is None:
                raise StorageError(f"Booking {booking.id} vanished during update")
            row.title = booking.title
            row.user_name = booking.user_name
            row.user_email = booking.user_email

        self._write(apply)

    def delete_booking(self, booking_id: str) -> None:
        self._write(
            lambda: self.db.query(DBBookings).filter(DBBookings.id == booking_id).delete()
        )

    def delete_bookings_for_room(self, room_id: str) -> int:
        return self._write(
            lambda: self.db.query(DBBookings).filter(DBBookings.room_id == room_id).delete()
        )

    def replace_all_bookings(self, bookings: list[Booking]) -> None:
        def apply():
            self.db.query(DBBookings).delete()
            self.db.flush()
            self.db.add_all(_booking_to_row(booking) for booking in bookings)

        self._write(apply)
