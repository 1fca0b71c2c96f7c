# backend/bookly/services/admin.py
"""
Administrative operations around the engine.

- Rooms: create / update / delete (cascade, single transaction)
- Configuration: slot duration, work-day hours
- Bookings: edit title/user fields, delete (with permission check)
- Dataset: export / import (single transaction)
"""

import logging
import uuid
from typing import Optional

from ..domain import Booking, Dataset, Room, TimeRange
from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from .booking_engine import check_booking_details, parse_date
from .slots.config import DaySchedule
from .store import BookingStore

logger = logging.getLogger(__name__)

ROOM_NAME_MIN = 3


def _room_errors(name: Optional[str], capacity: Optional[int]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if name is not None and len(name.strip()) < ROOM_NAME_MIN:
        errors["name"] = [f"Room name must be at least {ROOM_NAME_MIN} characters long."]
    if capacity is not None and (isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1):
        errors["capacity"] = ["Capacity must be a positive whole number."]
    return errors


def _schedule_or_error(**values) -> DaySchedule:
    try:
        return DaySchedule(**values)
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e), {"config": [str(e)]}) from e


# ── Rooms ────────────────────────────────────────────────────────────────


def create_room(store: BookingStore, name: str, capacity: int, room_id: Optional[str] = None) -> Room:
    errors = _room_errors(name, capacity)
    if errors:
        raise ValidationError("Validation failed", errors)

    room_id = room_id or f"room-{uuid.uuid4().hex[:8]}"
    if store.get_room(room_id) is not None:
        raise ValidationError("Validation failed", {"id": [f"Room {room_id} already exists."]})

    room = Room(id=room_id, name=name.strip(), capacity=capacity)
    store.save_room(room)
    logger.info(f"Room created: {room.id} ({room.name})")
    return room


def update_room(
    store: BookingStore,
    room_id: str,
    name: Optional[str] = None,
    capacity: Optional[int] = None,
) -> Room:
    room = store.get_room(room_id)
    if room is None:
        raise NotFoundError("Room not found.")
    errors = _room_errors(name, capacity)
    if errors:
        raise ValidationError("Validation failed", errors)

    updated = Room(
        id=room.id,
        name=name.strip() if name is not None else room.name,
        capacity=capacity if capacity is not None else room.capacity,
    )
    store.save_room(updated)
    return updated


def delete_room(store: BookingStore, room_id: str) -> int:
    """
    Delete a room and every booking referencing it.

    Returns:
        Number of bookings removed.
    """
    with store.transaction():
        if store.get_room(room_id) is None:
            raise NotFoundError("Room not found.")
        removed = store.delete_bookings_for_room(room_id)
        store.delete_room(room_id)

    logger.info(f"Room deleted: {room_id}, cascaded {removed} bookings")
    return removed


# ── Configuration ────────────────────────────────────────────────────────


def update_slot_duration(store: BookingStore, minutes: int) -> DaySchedule:
    current = store.get_configuration()
    schedule = _schedule_or_error(
        slot_duration_minutes=minutes,
        start_of_day=current.start_of_day,
        end_of_day=current.end_of_day,
    )
    store.save_configuration(schedule)
    logger.info(f"System slot duration updated to: {minutes} minutes.")
    return schedule


def update_workday_hours(store: BookingStore, start_of_day: str, end_of_day: str) -> DaySchedule:
    current = store.get_configuration()
    schedule = _schedule_or_error(
        slot_duration_minutes=current.slot_duration_minutes,
        start_of_day=start_of_day,
        end_of_day=end_of_day,
    )
    store.save_configuration(schedule)
    logger.info(f"System workday hours updated to: {start_of_day} - {end_of_day}.")
    return schedule


# ── Bookings ─────────────────────────────────────────────────────────────


def _get_modifiable_booking(
    store: BookingStore,
    booking_id: str,
    is_authenticated: bool,
    caller_email: Optional[str],
) -> Booking:
    booking = store.get_booking(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found.")
    if not is_authenticated and (
        not caller_email or caller_email.strip().lower() != booking.user_email.lower()
    ):
        raise PermissionDeniedError("You are not allowed to modify this booking.")
    return booking


def update_booking(
    store: BookingStore,
    booking_id: str,
    title: Optional[str] = None,
    user_name: Optional[str] = None,
    user_email: Optional[str] = None,
    is_authenticated: bool = False,
    caller_email: Optional[str] = None,
) -> Booking:
    """Edit the descriptive fields of a booking. The time range never changes."""
    errors: dict[str, list[str]] = {}
    check_booking_details(title, user_name, user_email, errors)
    if errors:
        raise ValidationError("Validation failed", errors)

    booking = _get_modifiable_booking(store, booking_id, is_authenticated, caller_email)
    changes = {
        key: value.strip()
        for key, value in (("title", title), ("user_name", user_name), ("user_email", user_email))
        if value is not None
    }
    updated = booking.with_details(**changes)
    store.update_booking(updated)
    return updated


def delete_booking(
    store: BookingStore,
    booking_id: str,
    is_authenticated: bool = False,
    caller_email: Optional[str] = None,
) -> None:
    _get_modifiable_booking(store, booking_id, is_authenticated, caller_email)
    store.delete_booking(booking_id)
    logger.info(f"Booking deleted: {booking_id}")


# ── Dataset ──────────────────────────────────────────────────────────────


def export_dataset(store: BookingStore) -> Dataset:
    return Dataset(
        rooms=sorted(store.get_rooms(), key=lambda r: r.id),
        config=store.get_configuration().to_dict(),
        bookings=sorted(store.get_all_bookings(), key=lambda b: b.id),
    )


def _check_dataset(dataset: Dataset) -> DaySchedule:
    schedule = _schedule_or_error(**dataset.config)
    errors: dict[str, list[str]] = {}

    room_ids = [r.id for r in dataset.rooms]
    if len(room_ids) != len(set(room_ids)):
        errors.setdefault("rooms", []).append("Room ids must be unique.")
    for room in dataset.rooms:
        for messages in _room_errors(room.name, room.capacity).values():
            errors.setdefault("rooms", []).extend(f"{room.id}: {m}" for m in messages)

    known = set(room_ids)
    seen: dict[tuple[str, str], list[TimeRange]] = {}
    booking_ids: set[str] = set()
    for booking in dataset.bookings:
        if booking.id in booking_ids:
            errors.setdefault("bookings", []).append(f"{booking.id}: duplicate id.")
        booking_ids.add(booking.id)
        if booking.room_id not in known:
            errors.setdefault("bookings", []).append(f"{booking.id}: unknown room {booking.room_id}.")
        try:
            parse_date(booking.date)
        except ValidationError:
            errors.setdefault("bookings", []).append(f"{booking.id}: invalid date {booking.date!r}.")
        rng = booking.time_range
        if rng.start >= rng.end:
            errors.setdefault("bookings", []).append(f"{booking.id}: end time must be after start time.")
        key = (booking.room_id, booking.date)
        if any(rng.overlaps(other) for other in seen.get(key, [])):
            errors.setdefault("bookings", []).append(f"{booking.id}: overlaps another booking.")
        seen.setdefault(key, []).append(rng)

    if errors:
        raise ValidationError("Invalid dataset", errors)
    return schedule


def import_dataset(store: BookingStore, dataset: Dataset) -> None:
    """Replace rooms, configuration and bookings in one transaction."""
    schedule = _check_dataset(dataset)
    with store.transaction():
        store.replace_all_bookings([])
        store.replace_all_rooms(dataset.rooms)
        store.save_configuration(schedule)
        store.replace_all_bookings(dataset.bookings)

    logger.info(
        f"Dataset imported: {len(dataset.rooms)} rooms, {len(dataset.bookings)} bookings"
    )
