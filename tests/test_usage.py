import logging
from datetime import date

import pytest

from conftest import ALPHA, BRAVO, make_booking

from bookly.config import get_settings
from bookly.errors import ValidationError
from bookly.services.slots.config import DaySchedule
from bookly.services.slots.usage import daily_usage, upcoming_workdays
from bookly.services.store import MemoryBookingStore
from bookly.services.booking_engine import BookingEngine

FRIDAY = date(2026, 10, 16)


def booked_starts(day_usage):
    return [s.start_time for s in day_usage.slots if s.is_booked]


def test_workdays_skip_weekend():
    days = upcoming_workdays(FRIDAY, 5)
    assert [d.isoformat() for d in days] == [
        "2026-10-16", "2026-10-19", "2026-10-20", "2026-10-21", "2026-10-22",
    ]


def test_workdays_start_after_weekend_today():
    saturday = date(2026, 10, 17)
    assert upcoming_workdays(saturday, 1) == [date(2026, 10, 19)]


def test_workdays_with_weekends_included():
    assert len(set(upcoming_workdays(FRIDAY, 3, include_weekends=True))) == 3
    assert upcoming_workdays(FRIDAY, 3, include_weekends=True)[1] == date(2026, 10, 17)


def test_multi_slot_booking_marks_each_slot(schedule):
    bookings = [make_booking("b1", ALPHA, "2026-10-16", "10:00 - 12:00", title="Planning")]
    usage = daily_usage([ALPHA, BRAVO], bookings, schedule, upcoming_workdays(FRIDAY, 5))

    assert [u.room.id for u in usage] == ["room-1", "room-2"]
    friday = usage[0].days[0]
    assert friday.date == "2026-10-16"
    assert len(friday.slots) == 8
    assert booked_starts(friday) == ["10:00", "11:00"]
    marked = [s for s in friday.slots if s.is_booked]
    assert {(s.title, s.user_name, s.booking_id) for s in marked} == {("Planning", "Alice", "b1")}
    assert friday.booked_count == 2
    assert all(booked_starts(d) == [] for d in usage[1].days)


def test_booking_outside_window_ignored(schedule):
    bookings = [make_booking("b1", ALPHA, "2026-10-17", "10:00 - 11:00")]
    usage = daily_usage([ALPHA], bookings, schedule, upcoming_workdays(FRIDAY, 5))
    assert all(d.booked_count == 0 for d in usage[0].days)


def test_booking_from_coarser_grid_marks_stepped_slots():
    # Made on a 60-minute grid, displayed on a 30-minute grid: stepping by 30 covers all
    schedule = DaySchedule(30, "09:00", "17:00")
    bookings = [make_booking("b1", ALPHA, "2026-10-16", "09:00 - 10:00")]
    usage = daily_usage([ALPHA], bookings, schedule, [FRIDAY])
    assert booked_starts(usage[0].days[0]) == ["09:00", "09:30"]


def test_booking_off_current_grid_left_unmarked():
    # Made on a 30-minute grid, displayed on a 60-minute grid: 09:30 never hits a slot start
    schedule = DaySchedule(60, "09:00", "17:00")
    bookings = [make_booking("b1", ALPHA, "2026-10-16", "09:30 - 10:30")]
    usage = daily_usage([ALPHA], bookings, schedule, [FRIDAY])
    assert booked_starts(usage[0].days[0]) == []


def test_double_assignment_last_wins_and_warns(schedule, caplog):
    bookings = [
        make_booking("b1", ALPHA, "2026-10-16", "10:00 - 11:00", title="First"),
        make_booking("b2", ALPHA, "2026-10-16", "10:00 - 11:00", title="Second"),
    ]
    with caplog.at_level(logging.WARNING, logger="bookly.services.slots.usage"):
        usage = daily_usage([ALPHA], bookings, schedule, [FRIDAY])

    slot = next(s for s in usage[0].days[0].slots if s.is_booked)
    assert slot.title == "Second"
    assert slot.booking_id == "b2"
    assert "double-assigned" in caplog.text


def test_engine_daily_usage_filters_rooms(schedule):
    store = MemoryBookingStore(
        rooms=[ALPHA, BRAVO],
        bookings=[make_booking("b1", BRAVO, "2026-10-19", "16:00 - 17:00")],
        schedule=schedule,
    )
    engine = BookingEngine(store)
    usage = engine.get_daily_usage(room_ids=["room-2"], window_days=2, today=FRIDAY)

    assert [u.room.id for u in usage] == ["room-2"]
    assert [d.date for d in usage[0].days] == ["2026-10-16", "2026-10-19"]
    assert booked_starts(usage[0].days[1]) == ["16:00"]


def test_explicit_zero_window_rejected(schedule):
    engine = BookingEngine(MemoryBookingStore(rooms=[ALPHA], schedule=schedule))
    with pytest.raises(ValidationError) as exc:
        engine.get_daily_usage(window_days=0, today=FRIDAY)
    assert "days" in exc.value.field_errors


def test_default_window_from_settings(schedule):
    engine = BookingEngine(MemoryBookingStore(rooms=[ALPHA], schedule=schedule))
    usage = engine.get_daily_usage(today=FRIDAY)
    assert len(usage[0].days) == get_settings().usage_window_days
