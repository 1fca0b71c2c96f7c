# backend/bookly/services/slots/__init__.py
"""
Slot allocation module.

Generation → availability → reservation walk → occupancy grid.
"""

from .config import DaySchedule, default_day_schedule
from .calculator import AtomicSlot, generate_day_slots
from .availability import available_slots, covering_slots, valid_end_times
from .locks import LocalLockRegistry, RedisLockRegistry, ReservationLocks
from .usage import DayUsage, RoomUsage, SlotStatus, daily_usage, upcoming_workdays

__all__ = [
    "DaySchedule",
    "default_day_schedule",
    "AtomicSlot",
    "generate_day_slots",
    "available_slots",
    "covering_slots",
    "valid_end_times",
    "LocalLockRegistry",
    "RedisLockRegistry",
    "ReservationLocks",
    "DayUsage",
    "RoomUsage",
    "SlotStatus",
    "daily_usage",
    "upcoming_workdays",
]
