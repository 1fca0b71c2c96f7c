# backend/bookly/routers/bookings.py
# PATCH edits title/user fields only; the time range is immutable

from fastapi import APIRouter, Depends, status

from ..deps import Identity, get_engine, get_identity, get_store
from ..schemas.bookings import (
    BookingCreate,
    BookingCreateResponse,
    BookingRead,
    BookingUpdate,
)
from ..services import admin
from ..services.booking_engine import BookingDetails, BookingEngine
from ..services.store import SqlBookingStore

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_bookings(engine: BookingEngine = Depends(get_engine)):
    return [BookingRead.model_validate(b) for b in engine.list_all_bookings()]


@router.get("/by-room", response_model=list[BookingRead])
def list_room_bookings(
    room_id: str,
    date: str,
    engine: BookingEngine = Depends(get_engine),
):
    return [
        BookingRead.model_validate(b)
        for b in engine.list_bookings_for_room_and_date(room_id, date)
    ]


@router.post("/", response_model=BookingCreateResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    engine: BookingEngine = Depends(get_engine),
):
    reservation = engine.reserve_recurring(
        data.room_id,
        data.date,
        data.start_time,
        data.end_time,
        BookingDetails(
            title=data.title,
            user_name=data.user_name,
            user_email=data.user_email,
        ),
        frequency=data.repeat_frequency,
        interval=data.repeat_interval,
        count=data.repeat_count,
    )
    return BookingCreateResponse.model_validate(reservation)


@router.patch("/{id}", response_model=BookingRead)
def update_booking(
    id: str,
    data: BookingUpdate,
    store: SqlBookingStore = Depends(get_store),
    identity: Identity = Depends(get_identity),
):
    booking = admin.update_booking(
        store,
        id,
        title=data.title,
        user_name=data.user_name,
        user_email=data.user_email,
        is_authenticated=identity.is_authenticated,
        caller_email=identity.email,
    )
    return BookingRead.model_validate(booking)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    id: str,
    store: SqlBookingStore = Depends(get_store),
    identity: Identity = Depends(get_identity),
):
    admin.delete_booking(
        store,
        id,
        is_authenticated=identity.is_authenticated,
        caller_email=identity.email,
    )
