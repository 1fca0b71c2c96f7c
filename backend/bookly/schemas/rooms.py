# backend/bookly/schemas/rooms.py

from typing import Optional
from pydantic import BaseModel


class RoomCreate(BaseModel):
    id: Optional[str] = None
    name: str
    capacity: int

    model_config = {"from_attributes": True}


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = None

    model_config = {"from_attributes": True}


class RoomRead(BaseModel):
    id: str
    name: str
    capacity: int

    model_config = {"from_attributes": True}
