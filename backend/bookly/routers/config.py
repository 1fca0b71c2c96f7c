# backend/bookly/routers/config.py

from fastapi import APIRouter, Depends

from ..deps import get_store
from ..schemas.config import ScheduleRead, SlotDurationUpdate, WorkdayHoursUpdate
from ..services import admin
from ..services.store import SqlBookingStore

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/", response_model=ScheduleRead)
def get_config(store: SqlBookingStore = Depends(get_store)):
    return store.get_configuration()


@router.put("/slot-duration", response_model=ScheduleRead)
def set_slot_duration(
    data: SlotDurationUpdate,
    store: SqlBookingStore = Depends(get_store),
):
    return admin.update_slot_duration(store, data.slot_duration_minutes)


@router.put("/workday-hours", response_model=ScheduleRead)
def set_workday_hours(
    data: WorkdayHoursUpdate,
    store: SqlBookingStore = Depends(get_store),
):
    return admin.update_workday_hours(store, data.start_of_day, data.end_of_day)
