# backend/bookly/services/booking_engine.py
"""
Availability / reservation engine.

Exposed operations:
- list_available_slots(room_id, date)
- list_end_times(room_id, date, start)
- reserve_range(room_id, date, start, end, details)
- reserve_recurring(..., frequency, interval, count)
- get_daily_usage(room_ids, window_days)

Reservation steps (all inside lock + store transaction):
1. Read configuration and room/date bookings fresh
2. Compute free atomic slots
3. Walk the slot chain from start; it must land exactly on end
4. Insert the booking
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from email_validator import EmailNotValidError, validate_email

from ..config import get_settings
from ..domain import Booking, Room, TimeRange, is_time_str, minutes_to_time_str, time_str_to_minutes
from ..errors import ConflictError, NotFoundError, ValidationError
from .slots.availability import available_slots, covering_slots, valid_end_times
from .slots.calculator import AtomicSlot
from .slots.locks import LocalLockRegistry, ReservationLocks
from .slots.usage import RoomUsage, daily_usage, upcoming_workdays
from .store import BookingStore
from .suggestions import Suggestions, suggest_alternatives

logger = logging.getLogger(__name__)

TITLE_MIN, TITLE_MAX = 3, 100
NAME_MIN, NAME_MAX = 2, 50

REPEAT_FREQUENCIES = ("none", "daily", "weekly")
REPEAT_INTERVAL_MAX = 52
REPEAT_COUNT_MAX = 20


@dataclass(frozen=True)
class BookingDetails:
    title: str
    user_name: str
    user_email: str


@dataclass
class Reservation:
    bookings: list[Booking]
    suggestions: Optional[Suggestions] = None

    @property
    def booking(self) -> Booking:
        return self.bookings[0]


# ── Validation ───────────────────────────────────────────────────────────


def parse_date(value: str) -> date:
    """
    Strict YYYY-MM-DD. Dates are store keys, so "2030-1-7" is rejected
    rather than treated as a second spelling of 2030-01-07.
    """
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        parsed = None
    if parsed is None or parsed.isoformat() != value:
        raise ValidationError(
            "Invalid date format provided.",
            {"date": ["Date must be in YYYY-MM-DD format."]},
        )
    return parsed


def _add(errors: dict[str, list[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def check_booking_details(
    title: Optional[str],
    user_name: Optional[str],
    user_email: Optional[str],
    errors: dict[str, list[str]],
) -> None:
    """Collect field errors; None means "field not supplied" and is skipped."""
    if title is not None:
        length = len(title.strip())
        if length < TITLE_MIN:
            _add(errors, "title", f"Title must be at least {TITLE_MIN} characters.")
        elif length > TITLE_MAX:
            _add(errors, "title", f"Title must be {TITLE_MAX} characters or less.")

    if user_name is not None:
        length = len(user_name.strip())
        if length < NAME_MIN:
            _add(errors, "user_name", f"Name must be at least {NAME_MIN} characters.")
        elif length > NAME_MAX:
            _add(errors, "user_name", f"Name must be {NAME_MAX} characters or less.")

    if user_email is not None:
        try:
            validate_email(user_email, check_deliverability=False)
        except EmailNotValidError:
            _add(errors, "user_email", "Please enter a valid email address.")


def _validate_request(
    room_id: str,
    day: str,
    start_time: str,
    end_time: str,
    details: BookingDetails,
) -> TimeRange:
    errors: dict[str, list[str]] = {}

    if not room_id:
        _add(errors, "room_id", "Please select a room.")
    try:
        parse_date(day)
    except ValidationError as e:
        errors.update(e.field_errors)
    if not is_time_str(start_time):
        _add(errors, "start_time", "Invalid time format. Use HH:MM.")
    if not is_time_str(end_time):
        _add(errors, "end_time", "Invalid time format. Use HH:MM.")
    elif is_time_str(start_time) and time_str_to_minutes(start_time) >= time_str_to_minutes(end_time):
        _add(errors, "end_time", "End time must be after start time.")

    check_booking_details(details.title, details.user_name, details.user_email, errors)

    if errors:
        raise ValidationError("Validation failed", errors)

    return TimeRange.from_times(start_time, end_time)


def recurrence_dates(
    first: date,
    frequency: str,
    interval: int,
    count: int,
) -> list[date]:
    """Occurrence dates of a repeating booking (first date included)."""
    errors: dict[str, list[str]] = {}
    if frequency not in REPEAT_FREQUENCIES:
        _add(errors, "repeat_frequency", "Repeat frequency must be none, daily or weekly.")
    if not 1 <= interval <= REPEAT_INTERVAL_MAX:
        _add(errors, "repeat_interval", f"Repeat interval must be between 1 and {REPEAT_INTERVAL_MAX}.")
    if not 1 <= count <= REPEAT_COUNT_MAX:
        _add(errors, "repeat_count", f"Repeat count must be between 1 and {REPEAT_COUNT_MAX}.")
    if frequency == "none":
        if count != 1:
            _add(errors, "repeat_count", "Repeat count must be 1 when no repetition is selected.")
        if interval != 1:
            _add(errors, "repeat_interval", "Repeat interval must be 1 when no repetition is selected.")
    elif frequency in REPEAT_FREQUENCIES and count < 2:
        _add(errors, "repeat_count", "Repeat count must be at least 2 for repeating bookings.")
    if errors:
        raise ValidationError("Validation failed", errors)

    if frequency == "none":
        return [first]
    step = timedelta(days=interval) if frequency == "daily" else timedelta(weeks=interval)
    return [first + step * k for k in range(count)]


def new_booking_id() -> str:
    return f"booking-{uuid.uuid4().hex}"


# ── Engine ───────────────────────────────────────────────────────────────


class BookingEngine:
    """Slot allocation over an injected store and lock registry."""

    def __init__(
        self,
        store: BookingStore,
        locks: Optional[ReservationLocks] = None,
    ):
        self.store = store
        self.locks = locks or LocalLockRegistry(get_settings().reservation_lock_timeout_seconds)

    # ── Reads ────────────────────────────────────────────────────────────

    def _require_room(self, room_id: str) -> Room:
        room = self.store.get_room(room_id)
        if room is None:
            raise NotFoundError("Selected room not found.")
        return room

    def _free_slots(self, room_id: str, day: str) -> list[AtomicSlot]:
        schedule = self.store.get_configuration()
        bookings = self.store.get_bookings_for_room_and_date(room_id, day)
        return available_slots(schedule, (b.time_range for b in bookings))

    def list_available_slots(self, room_id: str, day: str) -> list[AtomicSlot]:
        if not room_id:
            raise ValidationError("Room and date are required.", {"room_id": ["Please select a room."]})
        parse_date(day)
        self._require_room(room_id)
        return self._free_slots(room_id, day)

    def list_end_times(self, room_id: str, day: str, start_time: str) -> list[str]:
        if not is_time_str(start_time):
            raise ValidationError("Validation failed", {"start_time": ["Invalid time format. Use HH:MM."]})
        slots = self.list_available_slots(room_id, day)
        start = time_str_to_minutes(start_time)
        return [minutes_to_time_str(end) for end in valid_end_times(slots, start)]

    def list_bookings_for_room_and_date(self, room_id: str, day: str) -> list[Booking]:
        parse_date(day)
        self._require_room(room_id)
        bookings = self.store.get_bookings_for_room_and_date(room_id, day)
        return sorted(bookings, key=lambda b: b.time_range.start)

    def list_all_bookings(self) -> list[Booking]:
        return sorted(
            self.store.get_all_bookings(),
            key=lambda b: (b.date, b.time_range.start),
        )

    # ── Reservation ──────────────────────────────────────────────────────

    def _conflict(self, room: Room, day: str, requested: TimeRange, details: BookingDetails,
                  free: list[AtomicSlot]) -> ConflictError:
        suggestions = suggest_alternatives(
            room, day, requested, details.user_name,
            self.store.get_rooms(), self.store.get_all_bookings(), free,
            succeeded=False,
        )
        logger.warning(
            f"Reservation rejected: room={room.id} date={day} range={requested.display}"
        )
        return ConflictError(
            f"Sorry, {requested.display} on {day} is no longer available or is misaligned "
            f"to the slot grid. Please refresh and try again.",
            suggestions=suggestions,
        )

    def _reserve_locked(
        self,
        room: Room,
        day: str,
        requested: TimeRange,
        details: BookingDetails,
    ) -> Booking:
        """Check-and-insert for one date. Caller holds the lock and the transaction."""
        free = self._free_slots(room.id, day)
        if covering_slots(free, requested) is None:
            raise self._conflict(room, day, requested, details, free)

        booking = Booking(
            id=new_booking_id(),
            room_id=room.id,
            room_name=room.name,
            date=day,
            time_range=requested,
            title=details.title.strip(),
            user_name=details.user_name.strip(),
            user_email=details.user_email.strip(),
        )
        self.store.persist_booking(booking)
        return booking

    def reserve_range(
        self,
        room_id: str,
        day: str,
        start_time: str,
        end_time: str,
        details: BookingDetails,
    ) -> Booking:
        """Reserve a contiguous range of whole atomic slots on one date."""
        return self.reserve_recurring(room_id, day, start_time, end_time, details).booking

    def reserve_recurring(
        self,
        room_id: str,
        day: str,
        start_time: str,
        end_time: str,
        details: BookingDetails,
        frequency: str = "none",
        interval: int = 1,
        count: int = 1,
    ) -> Reservation:
        """
        Reserve one range on every occurrence date, all-or-nothing.

        Raises:
            ValidationError, NotFoundError, ConflictError, StorageError
        """
        requested = _validate_request(room_id, day, start_time, end_time, details)
        dates = [d.isoformat() for d in recurrence_dates(parse_date(day), frequency, interval, count)]
        room = self._require_room(room_id)

        with self.locks.hold((room_id, d) for d in dates):
            with self.store.transaction():
                # Room may have been deleted while we waited for the lock
                room = self._require_room(room_id)
                created = [self._reserve_locked(room, d, requested, details) for d in dates]

        logger.info(
            f"Reserved room={room_id} range={requested.display} dates={','.join(dates)} "
            f"ids={','.join(b.id for b in created)}"
        )

        suggestions = suggest_alternatives(
            room, dates[0], requested, details.user_name,
            self.store.get_rooms(), self.store.get_all_bookings(),
            self._free_slots(room_id, dates[0]),
            succeeded=True,
        )
        return Reservation(bookings=created, suggestions=suggestions)

    # ── Dashboard ────────────────────────────────────────────────────────

    def get_daily_usage(
        self,
        room_ids: Optional[Iterable[str]] = None,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
        include_weekends: bool = False,
    ) -> list[RoomUsage]:
        if window_days is None:
            window_days = get_settings().usage_window_days
        if window_days < 1:
            raise ValidationError("Validation failed", {"days": ["Window must be at least one day."]})

        rooms = self.store.get_rooms()
        if room_ids is not None:
            wanted = set(room_ids)
            missing = wanted - {r.id for r in rooms}
            if missing:
                raise NotFoundError(f"Room not found: {', '.join(sorted(missing))}")
            rooms = [r for r in rooms if r.id in wanted]

        days = upcoming_workdays(today or date.today(), window_days, include_weekends)
        return daily_usage(rooms, self.store.get_all_bookings(), self.store.get_configuration(), days)
