# backend/bookly/services/suggestions.py
"""
Alternative-booking suggestions shown next to a booking attempt.

Only the interface and a deterministic baseline live here:
  1. another free slot in the same room
  2. the same time in a different room that has no overlapping booking
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..domain import Booking, Room, TimeRange
from .slots.calculator import AtomicSlot

MAX_SUGGESTIONS = 2


@dataclass
class Suggestion:
    room_id: str
    room_name: str
    date: str
    time: str
    reason: Optional[str] = None


@dataclass
class Suggestions:
    summary: str
    suggestions: list[Suggestion] = field(default_factory=list)


def suggest_alternatives(
    room: Room,
    day: str,
    requested: TimeRange,
    user_name: str,
    rooms: Iterable[Room],
    bookings: Iterable[Booking],
    available: Iterable[AtomicSlot],
    succeeded: bool,
) -> Suggestions:
    if succeeded:
        summary = (
            f"Successfully processed booking for {room.name} on {day} "
            f"at {requested.display} for {user_name}."
        )
    else:
        summary = f"{room.name} is not available on {day} at {requested.display}."

    found: list[Suggestion] = []

    same_room = next((s for s in available if s.start != requested.start), None)
    if same_room is not None:
        found.append(Suggestion(
            room_id=room.id,
            room_name=room.name,
            date=day,
            time=same_room.display,
            reason="Alternative time in the same room.",
        ))

    day_bookings = [b for b in bookings if b.date == day]
    for other in rooms:
        if other.id == room.id:
            continue
        clash = any(
            b.room_id == other.id and b.time_range.overlaps(requested)
            for b in day_bookings
        )
        if not clash:
            found.append(Suggestion(
                room_id=other.id,
                room_name=other.name,
                date=day,
                time=requested.display,
                reason="Same time, different room.",
            ))
            break

    return Suggestions(summary=summary, suggestions=found[:MAX_SUGGESTIONS])
