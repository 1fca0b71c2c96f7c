# backend/bookly/routers/data.py
# Full dataset export / import (rooms, config, bookings)

from fastapi import APIRouter, Depends, status

from ..deps import get_store
from ..domain import Booking, Dataset, Room, TimeRange
from ..errors import ValidationError
from ..schemas.config import ScheduleRead
from ..schemas.data import BookingExport, DatasetSchema
from ..schemas.rooms import RoomRead
from ..services import admin
from ..services.store import SqlBookingStore

router = APIRouter(prefix="/data", tags=["data"])


@router.get("/export", response_model=DatasetSchema)
def export_data(store: SqlBookingStore = Depends(get_store)):
    dataset = admin.export_dataset(store)
    return DatasetSchema(
        rooms=[RoomRead.model_validate(r) for r in dataset.rooms],
        config=ScheduleRead(**dataset.config),
        bookings=[BookingExport.model_validate(b) for b in dataset.bookings],
    )


def _to_booking(data: BookingExport) -> Booking:
    try:
        time_range = TimeRange.parse(data.time)
    except ValueError as e:
        raise ValidationError("Invalid dataset", {"bookings": [f"{data.id}: {e}"]}) from e
    return Booking(
        id=data.id,
        room_id=data.room_id,
        room_name=data.room_name,
        date=data.date,
        time_range=time_range,
        title=data.title,
        user_name=data.user_name,
        user_email=data.user_email,
    )


@router.post("/import", status_code=status.HTTP_204_NO_CONTENT)
def import_data(
    data: DatasetSchema,
    store: SqlBookingStore = Depends(get_store),
):
    dataset = Dataset(
        rooms=[Room(id=r.id, name=r.name, capacity=r.capacity) for r in data.rooms],
        config=data.config.model_dump(),
        bookings=[_to_booking(b) for b in data.bookings],
    )
    admin.import_dataset(store, dataset)
