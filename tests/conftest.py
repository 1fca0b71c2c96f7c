import os

# Settings are read once; point them at throwaway backends before importing bookly
os.environ["BOOKLY_DATABASE_URL"] = "sqlite://"
os.environ.pop("BOOKLY_REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bookly.database import build_engine, get_db, init_db
from bookly.deps import get_locks
from bookly.domain import Booking, Room, TimeRange
from bookly.main import app
from bookly.services.booking_engine import BookingDetails, BookingEngine
from bookly.services.slots.config import DaySchedule
from bookly.services.slots.locks import LocalLockRegistry
from bookly.services.store import MemoryBookingStore, SqlBookingStore

ALPHA = Room(id="room-1", name="Conference Room Alpha", capacity=10)
BRAVO = Room(id="room-2", name="Meeting Room Bravo", capacity=4)


def make_booking(booking_id, room, day, time, title="Weekly sync", user_name="Alice", user_email="alice@acme.io"):
    return Booking(
        id=booking_id,
        room_id=room.id,
        room_name=room.name,
        date=day,
        time_range=TimeRange.parse(time),
        title=title,
        user_name=user_name,
        user_email=user_email,
    )


@pytest.fixture
def schedule():
    return DaySchedule(slot_duration_minutes=60, start_of_day="09:00", end_of_day="17:00")


@pytest.fixture
def details():
    return BookingDetails(title="Project kick-off", user_name="Alice", user_email="alice@acme.io")


@pytest.fixture
def memory_store(schedule):
    return MemoryBookingStore(rooms=[ALPHA, BRAVO], schedule=schedule)


@pytest.fixture
def engine(memory_store):
    return BookingEngine(memory_store, LocalLockRegistry(timeout_seconds=5))


@pytest.fixture
def sql_engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_session(sql_engine):
    session = sessionmaker(bind=sql_engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def sql_store(sql_session, schedule):
    store = SqlBookingStore(sql_session)
    store.save_configuration(schedule)
    store.save_room(ALPHA)
    store.save_room(BRAVO)
    return store


@pytest.fixture
def client(sql_engine, sql_store):
    Session = sessionmaker(bind=sql_engine, autoflush=False)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    locks = LocalLockRegistry(timeout_seconds=5)
    app.dependency_overrides[get_locks] = lambda: locks
    yield TestClient(app)
    app.dependency_overrides.clear()
