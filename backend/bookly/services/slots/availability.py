# backend/bookly/services/slots/availability.py
"""
Availability calculation.

Free slots = generated day slots minus every slot that overlaps
(open-interval) any existing booking of the room/date.
"""

from typing import Iterable, Optional

from ...domain import TimeRange
from .calculator import AtomicSlot, generate_day_slots
from .config import DaySchedule


def available_slots(
    schedule: DaySchedule,
    booked_ranges: Iterable[TimeRange],
) -> list[AtomicSlot]:
    """
    Free atomic slots for one room/date.

    Args:
        schedule: Configuration in effect for this call
        booked_ranges: Time ranges of existing bookings (room/date already filtered)
    """
    booked = list(booked_ranges)
    return [
        slot for slot in generate_day_slots(schedule)
        if not any(slot.overlaps(rng) for rng in booked)
    ]


def slot_chain(slots: list[AtomicSlot], start: int) -> list[AtomicSlot]:
    """
    Contiguous run of free slots beginning exactly at `start`.

    Empty list if no free slot starts at `start`.
    """
    by_start = {slot.start: slot for slot in slots}
    chain: list[AtomicSlot] = []
    cursor = start
    while cursor in by_start:
        slot = by_start[cursor]
        chain.append(slot)
        cursor = slot.end
    return chain


def valid_end_times(slots: list[AtomicSlot], start: int) -> list[int]:
    """End times (minutes) selectable for a range starting at `start`."""
    return [slot.end for slot in slot_chain(slots, start)]


def covering_slots(slots: list[AtomicSlot], requested: TimeRange) -> Optional[list[AtomicSlot]]:
    """
    Walk free slots from requested.start until the cursor lands on requested.end.

    Returns the covering slots, or None when a slot is missing at the cursor
    or the walk overshoots requested.end.
    """
    if requested.end <= requested.start:
        return None

    by_start = {slot.start: slot for slot in slots}
    covered: list[AtomicSlot] = []
    cursor = requested.start
    while cursor < requested.end:
        slot = by_start.get(cursor)
        if slot is None:
            return None
        covered.append(slot)
        cursor = slot.end

    if cursor != requested.end:
        return None
    return covered
