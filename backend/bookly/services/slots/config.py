# backend/bookly/services/slots/config.py
"""
Work-day schedule used for slot generation.
"""

from dataclasses import dataclass

from ...config import get_settings
from ...domain import is_time_str, minutes_to_time_str, time_str_to_minutes

MIN_SLOT_DURATION = 15
MAX_SLOT_DURATION = 120
SLOT_DURATION_STEP = 15

__all__ = [
    "DaySchedule",
    "default_day_schedule",
    "is_time_str",
    "minutes_to_time_str",
    "time_str_to_minutes",
]


@dataclass(frozen=True)
class DaySchedule:
    """
    Global work-day configuration.

    Attributes:
        slot_duration_minutes: Atomic slot length (15..120, step 15)
        start_of_day: "HH:MM" when the first slot may start
        end_of_day: "HH:MM" no slot may end after this
    """
    slot_duration_minutes: int = 60
    start_of_day: str = "09:00"
    end_of_day: str = "17:00"

    def __post_init__(self):
        """Validate configuration."""
        duration = self.slot_duration_minutes
        if not MIN_SLOT_DURATION <= duration <= MAX_SLOT_DURATION:
            raise ValueError(
                f"Duration must be between {MIN_SLOT_DURATION} and {MAX_SLOT_DURATION} minutes."
            )
        if duration % SLOT_DURATION_STEP != 0:
            raise ValueError("Duration must be in multiples of 15 minutes.")
        if not is_time_str(self.start_of_day):
            raise ValueError(f"Invalid Start Time: {self.start_of_day!r}. Use HH:MM.")
        if not is_time_str(self.end_of_day):
            raise ValueError(f"Invalid End Time: {self.end_of_day!r}. Use HH:MM.")
        if self.end_minutes <= self.start_minutes:
            raise ValueError("End of day must be after start of day.")

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start_of_day)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end_of_day)

    def to_dict(self) -> dict:
        return {
            "slot_duration_minutes": self.slot_duration_minutes,
            "start_of_day": self.start_of_day,
            "end_of_day": self.end_of_day,
        }


def default_day_schedule() -> DaySchedule:
    """Schedule used when the store holds no configuration yet."""
    settings = get_settings()
    return DaySchedule(
        slot_duration_minutes=settings.default_slot_duration_minutes,
        start_of_day=settings.default_start_of_day,
        end_of_day=settings.default_end_of_day,
    )
