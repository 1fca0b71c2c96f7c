# backend/bookly/services/slots/calculator.py
"""
Slot generation.

Produces the ordered atomic slots of one work day:
  [start_of_day, start_of_day + step), [.., .. + step), ...

A slot is emitted only if it fits entirely inside the window;
a partial trailing slot is dropped, never truncated.
"""

from ...domain import TimeRange
from .config import DaySchedule

# Atomic slots and booking ranges share the same shape
AtomicSlot = TimeRange


def generate_slots(start_min: int, end_min: int, step: int) -> list[AtomicSlot]:
    """
    Walk the window in `step` minute increments.

    Returns empty list for an empty/inverted window or non-positive step.
    """
    if step <= 0 or end_min <= start_min:
        return []

    slots: list[AtomicSlot] = []
    t = start_min
    while t < end_min:
        slot_end = t + step
        if slot_end > end_min:
            break
        slots.append(AtomicSlot(t, slot_end))
        t = slot_end

    return slots


def generate_day_slots(schedule: DaySchedule) -> list[AtomicSlot]:
    """Ordered atomic slots for one day under `schedule`."""
    return generate_slots(
        schedule.start_minutes,
        schedule.end_minutes,
        schedule.slot_duration_minutes,
    )
