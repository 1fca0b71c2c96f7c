# backend/bookly/schemas/bookings.py

from typing import Literal, Optional
from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    room_id: str
    date: str = Field(description="Date in YYYY-MM-DD format")
    start_time: str = Field(description="Range start, HH:MM")
    end_time: str = Field(description="Range end, HH:MM")

    title: str
    user_name: str
    user_email: str

    repeat_frequency: Literal["none", "daily", "weekly"] = "none"
    repeat_interval: int = 1
    repeat_count: int = 1


class BookingUpdate(BaseModel):
    title: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class BookingRead(BaseModel):
    id: str
    room_id: str
    room_name: str
    date: str
    time: str = Field(description="HH:MM - HH:MM")
    start_time: str
    end_time: str
    title: str
    user_name: str
    user_email: str

    model_config = {"from_attributes": True}


class SuggestionRead(BaseModel):
    room_id: str
    room_name: str
    date: str
    time: str
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class SuggestionsRead(BaseModel):
    summary: str
    suggestions: list[SuggestionRead] = []

    model_config = {"from_attributes": True}


class BookingCreateResponse(BaseModel):
    bookings: list[BookingRead]
    suggestions: Optional[SuggestionsRead] = None

    model_config = {"from_attributes": True}
