# backend/bookly/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from typing import Optional
from pydantic import BaseModel, Field

from .rooms import RoomRead


class SlotRead(BaseModel):
    """A single atomic slot."""
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM"
    display: str     # "HH:MM - HH:MM"

    model_config = {"from_attributes": True}


class AvailableSlotsResponse(BaseModel):
    room_id: str
    date: str
    slots: list[SlotRead]


class EndTimesResponse(BaseModel):
    room_id: str
    date: str
    start_time: str
    end_times: list[str] = Field(description="End times reachable by contiguous free slots")


class SlotStatusRead(BaseModel):
    start_time: str
    end_time: str
    is_booked: bool
    title: Optional[str] = None
    user_name: Optional[str] = None
    booking_id: Optional[str] = None

    model_config = {"from_attributes": True}


class DayUsageRead(BaseModel):
    date: str
    booked_count: int
    slots: list[SlotStatusRead]

    model_config = {"from_attributes": True}


class RoomUsageRead(BaseModel):
    room: RoomRead
    days: list[DayUsageRead]

    model_config = {"from_attributes": True}


class UsageResponse(BaseModel):
    slot_duration_minutes: int
    rooms: list[RoomUsageRead]
