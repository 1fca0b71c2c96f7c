# backend/bookly/routers/rooms.py
# DELETE cascades to the room's bookings

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_store
from ..schemas.rooms import RoomCreate, RoomRead, RoomUpdate
from ..services import admin
from ..services.store import SqlBookingStore

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("/", response_model=list[RoomRead])
def list_rooms(store: SqlBookingStore = Depends(get_store)):
    return store.get_rooms()


@router.get("/{id}", response_model=RoomRead)
def get_room(id: str, store: SqlBookingStore = Depends(get_store)):
    room = store.get_room(id)
    if not room:
        raise HTTPException(status_code=404, detail="Not found")
    return room


@router.post("/", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
def create_room(
    data: RoomCreate,
    store: SqlBookingStore = Depends(get_store),
):
    return admin.create_room(store, data.name, data.capacity, room_id=data.id)


@router.patch("/{id}", response_model=RoomRead)
def update_room(
    id: str,
    data: RoomUpdate,
    store: SqlBookingStore = Depends(get_store),
):
    return admin.update_room(store, id, name=data.name, capacity=data.capacity)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(id: str, store: SqlBookingStore = Depends(get_store)):
    admin.delete_room(store, id)
