# backend/bookly/services/slots/usage.py
"""
Occupancy aggregation for the dashboard.

For every room × working day:
  generated day slots → SlotStatus (booked/free + booking metadata)

Bookings are painted by stepping from the booking's own start in
slot-duration increments. A slot is marked only when its start equals
a step cursor, so a booking made under an older grid may leave some
slots unmarked.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from ...domain import Booking, Room
from .calculator import AtomicSlot, generate_day_slots
from .config import DaySchedule, minutes_to_time_str

logger = logging.getLogger(__name__)

WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


@dataclass
class SlotStatus:
    slot: AtomicSlot
    is_booked: bool = False
    title: Optional[str] = None
    user_name: Optional[str] = None
    booking_id: Optional[str] = None

    @property
    def start_time(self) -> str:
        return self.slot.start_time

    @property
    def end_time(self) -> str:
        return self.slot.end_time


@dataclass
class DayUsage:
    date: str
    slots: list[SlotStatus] = field(default_factory=list)

    @property
    def booked_count(self) -> int:
        return sum(1 for s in self.slots if s.is_booked)


@dataclass
class RoomUsage:
    room: Room
    days: list[DayUsage] = field(default_factory=list)


def upcoming_workdays(
    today: date,
    count: int,
    include_weekends: bool = False,
) -> list[date]:
    """
    Next `count` days starting from and including `today`.

    Saturdays and Sundays are skipped unless include_weekends is set.
    """
    days: list[date] = []
    current = today
    while len(days) < count:
        if include_weekends or current.weekday() not in WEEKEND_DAYS:
            days.append(current)
        current += timedelta(days=1)
    return days


def _paint_booking(
    statuses: dict[int, SlotStatus],
    booking: Booking,
    step: int,
) -> None:
    t = booking.time_range.start
    while t < booking.time_range.end:
        status = statuses.get(t)
        if status is not None:
            if status.is_booked and status.booking_id != booking.id:
                logger.warning(
                    f"Slot {minutes_to_time_str(t)} on {booking.date} in room {booking.room_id} "
                    f"double-assigned: {status.booking_id} overwritten by {booking.id}"
                )
            status.is_booked = True
            status.title = booking.title
            status.user_name = booking.user_name
            status.booking_id = booking.id
        t += step


def day_usage(
    schedule: DaySchedule,
    bookings: Iterable[Booking],
    day: str,
) -> DayUsage:
    """Slot statuses for one room/day. `bookings` must already be filtered to that room/day."""
    statuses = {slot.start: SlotStatus(slot=slot) for slot in generate_day_slots(schedule)}
    for booking in bookings:
        _paint_booking(statuses, booking, schedule.slot_duration_minutes)
    return DayUsage(date=day, slots=list(statuses.values()))


def daily_usage(
    rooms: Iterable[Room],
    bookings: Iterable[Booking],
    schedule: DaySchedule,
    days: list[date],
) -> list[RoomUsage]:
    """
    Per-room occupancy grid over `days`.

    Returns:
        List of RoomUsage in room order, days in the given order.
    """
    day_keys = [d.isoformat() for d in days]
    wanted = set(day_keys)

    # Bucket once: (room_id, date) → bookings in store order
    buckets: dict[tuple[str, str], list[Booking]] = {}
    for booking in bookings:
        if booking.date in wanted:
            buckets.setdefault((booking.room_id, booking.date), []).append(booking)

    result = []
    for room in rooms:
        usage = RoomUsage(room=room)
        for key in day_keys:
            usage.days.append(day_usage(schedule, buckets.get((room.id, key), []), key))
        result.append(usage)

    return result
