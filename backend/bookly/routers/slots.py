# backend/bookly/routers/slots.py
"""
Slots API endpoints.

GET /slots/available - free atomic slots for room/date
GET /slots/end-times - selectable range ends for a start time
GET /slots/usage     - occupancy grid over the next working days
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_engine
from ..schemas.slots import (
    AvailableSlotsResponse,
    EndTimesResponse,
    RoomUsageRead,
    SlotRead,
    UsageResponse,
)
from ..services.booking_engine import BookingEngine

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=AvailableSlotsResponse)
def get_available_slots(
    room_id: str,
    target_date: str = Query(..., alias="date"),
    engine: BookingEngine = Depends(get_engine),
):
    slots = engine.list_available_slots(room_id, target_date)
    return AvailableSlotsResponse(
        room_id=room_id,
        date=target_date,
        slots=[SlotRead.model_validate(s) for s in slots],
    )


@router.get("/end-times", response_model=EndTimesResponse)
def get_end_times(
    room_id: str,
    start_time: str = Query(..., alias="start"),
    target_date: str = Query(..., alias="date"),
    engine: BookingEngine = Depends(get_engine),
):
    return EndTimesResponse(
        room_id=room_id,
        date=target_date,
        start_time=start_time,
        end_times=engine.list_end_times(room_id, target_date, start_time),
    )


@router.get("/usage", response_model=UsageResponse)
def get_usage(
    days: Optional[int] = Query(None, ge=1, le=31),
    room_id: Optional[list[str]] = Query(None),
    include_weekends: bool = False,
    engine: BookingEngine = Depends(get_engine),
):
    usage = engine.get_daily_usage(
        room_ids=room_id,
        window_days=days,
        include_weekends=include_weekends,
    )
    return UsageResponse(
        slot_duration_minutes=engine.store.get_configuration().slot_duration_minutes,
        rooms=[RoomUsageRead.model_validate(u) for u in usage],
    )
