# backend/bookly/domain.py
"""
Plain domain records passed between the stores and the engine.

Times are kept as minutes since midnight; "HH:MM" and "HH:MM - HH:MM"
strings exist only at the API / storage boundary.
"""

import re
from dataclasses import dataclass, field, replace

TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
RANGE_SEPARATOR = " - "


def is_time_str(value) -> bool:
    return isinstance(value, str) and TIME_RE.match(value) is not None


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    if not is_time_str(value):
        raise ValueError(f"Invalid time format {value!r}. Use HH:MM.")
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open [start, end) interval in minutes since midnight."""
    start: int
    end: int

    @property
    def start_time(self) -> str:
        return minutes_to_time_str(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_time_str(self.end)

    @property
    def display(self) -> str:
        return f"{self.start_time}{RANGE_SEPARATOR}{self.end_time}"

    def overlaps(self, other: "TimeRange") -> bool:
        """Open-interval overlap: touching endpoints do not overlap."""
        return self.start < other.end and self.end > other.start

    @classmethod
    def from_times(cls, start_time: str, end_time: str) -> "TimeRange":
        return cls(time_str_to_minutes(start_time), time_str_to_minutes(end_time))

    @classmethod
    def parse(cls, value: str) -> "TimeRange":
        """Parse "HH:MM - HH:MM"."""
        parts = value.split(RANGE_SEPARATOR)
        if len(parts) != 2:
            raise ValueError(f"Invalid time range {value!r}. Use 'HH:MM - HH:MM'.")
        return cls.from_times(parts[0].strip(), parts[1].strip())


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    capacity: int


@dataclass(frozen=True)
class Booking:
    id: str
    room_id: str
    room_name: str
    date: str  # YYYY-MM-DD
    time_range: TimeRange
    title: str
    user_name: str
    user_email: str

    @property
    def time(self) -> str:
        return self.time_range.display

    @property
    def start_time(self) -> str:
        return self.time_range.start_time

    @property
    def end_time(self) -> str:
        return self.time_range.end_time

    def with_details(self, **changes) -> "Booking":
        return replace(self, **changes)


@dataclass
class Dataset:
    """Full exportable state."""
    rooms: list[Room] = field(default_factory=list)
    config: dict = field(default_factory=dict)
    bookings: list[Booking] = field(default_factory=list)
