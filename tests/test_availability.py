from bookly.domain import TimeRange, minutes_to_time_str
from bookly.services.slots.availability import available_slots, covering_slots, valid_end_times
from bookly.services.slots.config import DaySchedule


def starts(slots):
    return [s.start_time for s in slots]


def test_back_to_back_booking_keeps_next_slot_free(schedule):
    free = available_slots(schedule, [TimeRange.parse("10:00 - 11:00")])
    assert "10:00" not in starts(free)
    assert "09:00" in starts(free)
    assert "11:00" in starts(free)


def test_multi_slot_booking_excludes_every_covered_slot(schedule):
    free = available_slots(schedule, [TimeRange.parse("09:00 - 12:00")])
    assert starts(free) == ["12:00", "13:00", "14:00", "15:00", "16:00"]


def test_partial_overlap_excludes_slot():
    schedule = DaySchedule(60, "09:00", "17:00")
    # Booking made on an older 30-minute grid
    free = available_slots(schedule, [TimeRange.parse("10:30 - 11:30")])
    assert "10:00" not in starts(free)
    assert "11:00" not in starts(free)
    assert "12:00" in starts(free)


def test_overlapping_bookings_union_of_exclusions(schedule):
    booked = [TimeRange.parse("09:00 - 11:00"), TimeRange.parse("10:00 - 12:00")]
    free = available_slots(schedule, booked)
    assert starts(free)[0] == "12:00"


def test_end_times_follow_contiguous_chain(schedule):
    free = available_slots(schedule, [TimeRange.parse("12:00 - 13:00")])
    ends = valid_end_times(free, TimeRange.parse("09:00 - 10:00").start)
    assert [minutes_to_time_str(e) for e in ends] == ["10:00", "11:00", "12:00"]


def test_end_times_empty_when_start_not_free(schedule):
    free = available_slots(schedule, [TimeRange.parse("09:00 - 10:00")])
    assert valid_end_times(free, 9 * 60) == []


def test_covering_requires_exact_landing(schedule):
    free = available_slots(schedule, [])
    assert covering_slots(free, TimeRange.parse("09:00 - 11:00")) is not None
    assert covering_slots(free, TimeRange.parse("09:00 - 09:45")) is None
    assert covering_slots(free, TimeRange.parse("09:30 - 10:30")) is None
    assert covering_slots(free, TimeRange.parse("16:00 - 18:00")) is None


def test_covering_rejects_gap(schedule):
    free = available_slots(schedule, [TimeRange.parse("10:00 - 11:00")])
    assert covering_slots(free, TimeRange.parse("09:00 - 12:00")) is None
