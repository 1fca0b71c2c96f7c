# backend/bookly/seed.py
"""
Bootstrap: create tables and the default rooms on an empty database.

    python -m bookly.seed
"""

import logging

from .database import SessionLocal, init_db
from .domain import Room
from .services import admin
from .services.store import BookingStore, SqlBookingStore

logger = logging.getLogger(__name__)

DEFAULT_ROOMS = [
    Room(id="room-1", name="Conference Room Alpha", capacity=10),
    Room(id="room-2", name="Meeting Room Bravo", capacity=4),
    Room(id="room-3", name="Quiet Pod Charlie", capacity=1),
    Room(id="room-4", name="Workshop Delta", capacity=20),
]


def seed_default_rooms(store: BookingStore) -> int:
    """Insert DEFAULT_ROOMS when the store has no rooms. Returns rooms created."""
    if store.get_rooms():
        return 0
    for room in DEFAULT_ROOMS:
        admin.create_room(store, room.name, room.capacity, room_id=room.id)
    return len(DEFAULT_ROOMS)


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        created = seed_default_rooms(SqlBookingStore(db))
        logger.info(f"Seeded {created} rooms")
    finally:
        db.close()


if __name__ == "__main__":
    main()
