import threading

import pytest
from sqlalchemy.orm import sessionmaker

from conftest import ALPHA, BRAVO, make_booking

from bookly.database import build_engine, init_db
from bookly.errors import ConflictError, NotFoundError, StorageError
from bookly.services import admin
from bookly.services.booking_engine import BookingEngine
from bookly.services.slots.config import DaySchedule
from bookly.services.slots.locks import LocalLockRegistry
from bookly.services.store import SqlBookingStore

DAY = "2026-10-20"


def test_sql_store_round_trips_booking(sql_store):
    booking = make_booking("b1", ALPHA, DAY, "09:00 - 11:00")
    sql_store.persist_booking(booking)

    assert sql_store.get_booking("b1") == booking
    assert sql_store.get_bookings_for_room_and_date("room-1", DAY) == [booking]
    assert sql_store.get_bookings_for_room_and_date("room-2", DAY) == []


def test_sql_store_configuration(sql_store):
    assert sql_store.get_configuration() == DaySchedule(60, "09:00", "17:00")
    sql_store.save_configuration(DaySchedule(45, "08:00", "18:00"))
    assert sql_store.get_configuration() == DaySchedule(45, "08:00", "18:00")


def test_sql_transaction_rolls_back_every_write(sql_store):
    with pytest.raises(RuntimeError):
        with sql_store.transaction():
            sql_store.persist_booking(make_booking("b1", ALPHA, DAY, "09:00 - 10:00"))
            sql_store.persist_booking(make_booking("b2", ALPHA, DAY, "10:00 - 11:00"))
            raise RuntimeError("boom")

    assert sql_store.get_all_bookings() == []


def test_sql_duplicate_insert_is_storage_error(sql_store):
    sql_store.persist_booking(make_booking("b1", ALPHA, DAY, "09:00 - 10:00"))
    with pytest.raises(StorageError):
        sql_store.persist_booking(make_booking("b1", ALPHA, DAY, "10:00 - 11:00"))
    assert len(sql_store.get_all_bookings()) == 1


def test_memory_transaction_rolls_back(memory_store):
    with pytest.raises(RuntimeError):
        with memory_store.transaction():
            memory_store.persist_booking(make_booking("b1", ALPHA, DAY, "09:00 - 10:00"))
            memory_store.delete_room("room-2")
            raise RuntimeError("boom")

    assert memory_store.get_all_bookings() == []
    assert memory_store.get_room("room-2") == BRAVO


@pytest.mark.parametrize("store_name", ["memory_store", "sql_store"])
def test_delete_room_cascades_only_its_bookings(request, store_name):
    store = request.getfixturevalue(store_name)
    store.persist_booking(make_booking("a1", ALPHA, DAY, "09:00 - 10:00"))
    store.persist_booking(make_booking("a2", ALPHA, "2026-10-21", "09:00 - 10:00"))
    store.persist_booking(make_booking("b1", BRAVO, DAY, "09:00 - 10:00"))

    removed = admin.delete_room(store, "room-1")

    assert removed == 2
    assert store.get_room("room-1") is None
    assert [b.id for b in store.get_all_bookings()] == ["b1"]


def test_delete_unknown_room(memory_store):
    with pytest.raises(NotFoundError):
        admin.delete_room(memory_store, "room-99")


def test_sql_engine_reserve_and_conflict(sql_store, details):
    engine = BookingEngine(sql_store, LocalLockRegistry())
    engine.reserve_range("room-1", DAY, "09:00", "11:00", details)
    with pytest.raises(ConflictError):
        engine.reserve_range("room-1", DAY, "10:00", "11:00", details)
    assert len(sql_store.get_all_bookings()) == 1


def test_sql_concurrent_reservations_single_winner(tmp_path, schedule, details):
    db_engine = build_engine(f"sqlite:///{tmp_path / 'bookly.db'}")
    init_db(db_engine)
    Session = sessionmaker(bind=db_engine, autoflush=False)

    setup = Session()
    store = SqlBookingStore(setup)
    store.save_configuration(schedule)
    store.save_room(ALPHA)
    setup.close()

    locks = LocalLockRegistry(timeout_seconds=10)
    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()

    def attempt():
        session = Session()
        try:
            engine = BookingEngine(SqlBookingStore(session), locks)
            barrier.wait()
            try:
                engine.reserve_range("room-1", DAY, "13:00", "15:00", details)
                outcome = "ok"
            except ConflictError:
                outcome = "conflict"
        finally:
            session.close()
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("conflict") == workers - 1

    check = Session()
    assert len(SqlBookingStore(check).get_bookings_for_room_and_date("room-1", DAY)) == 1
    check.close()
    db_engine.dispose()
