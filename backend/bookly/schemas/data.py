# backend/bookly/schemas/data.py
"""
Export / import payload. Booking time ranges travel as "HH:MM - HH:MM".
"""

from pydantic import BaseModel

from .config import ScheduleRead
from .rooms import RoomRead


class BookingExport(BaseModel):
    id: str
    room_id: str
    room_name: str
    date: str
    time: str
    title: str
    user_name: str
    user_email: str

    model_config = {"from_attributes": True}


class DatasetSchema(BaseModel):
    rooms: list[RoomRead]
    config: ScheduleRead
    bookings: list[BookingExport]

    model_config = {"from_attributes": True}
