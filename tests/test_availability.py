from datetime import timedelta

import pytest

from models.slot import Slot
from services.availability import check_slot_for_booking, is_slot_eligible, list_available_slots
from services.results import CAPACITY_EXCEEDED, SLOT_ERROR

from helpers import get_slot


def _ids(slots):
    return [s.slot_id for s in slots]


def test_closed_request_lists_only_empty_slots_in_time_order(make_slot, day):
    late_empty = make_slot(hour=18)
    partial = make_slot(hour=12, count=4)
    early_empty = make_slot(hour=10)
    make_slot(hour=14, count=15, type="CLOSED")

    slots = list_available_slots(day, "CLOSED", 15)

    assert _ids(slots) == [early_empty, late_empty]
    assert partial not in _ids(slots)
    assert all(s.current_bookings_count == 0 for s in slots)


def test_open_request_takes_empty_or_open_slots_with_room(make_slot, day):
    empty = make_slot(hour=10)
    roomy = make_slot(hour=11, count=10)
    tight = make_slot(hour=12, count=12)
    closed = make_slot(hour=13, count=5, type="CLOSED")

    slots = list_available_slots(day, "OPEN", 4)

    assert _ids(slots) == [empty, roomy]
    assert tight not in _ids(slots)
    assert closed not in _ids(slots)
    for s in slots:
        assert s.current_bookings_count == 0 or (
            s.session_type == "OPEN" and s.max_capacity - s.current_bookings_count >= 4
        )


def test_available_spots_are_reported(make_slot, day):
    make_slot(hour=10, count=6)

    (slot,) = list_available_slots(day, "OPEN", 2)

    assert slot.available_spots == 9
    assert slot.to_dict()["available_spots"] == 9


def test_maintenance_other_days_and_excluded_slot_are_left_out(make_slot, day):
    make_slot(hour=10, status="MAINTENANCE")
    make_slot(hour=10, on=day + timedelta(days=1))
    current = make_slot(hour=11, count=2)
    other = make_slot(hour=12)

    slots = list_available_slots(day, "OPEN", 2, exclude_slot_id=current)

    assert _ids(slots) == [other]


def test_past_days_have_nothing_to_offer(make_slot, day):
    yesterday = day - timedelta(days=8)
    make_slot(hour=10, on=yesterday)

    assert list_available_slots(yesterday, "OPEN", 1) == []


def test_invalid_request_is_rejected(app, day):
    with pytest.raises(ValueError):
        list_available_slots(day, "VIP", 2)
    with pytest.raises(ValueError):
        list_available_slots(day, "OPEN", 0)


def test_is_slot_eligible_rules():
    empty = Slot(max_capacity=15, current_bookings_count=0, type="OPEN")
    open_partial = Slot(max_capacity=15, current_bookings_count=11, type="OPEN")
    closed_taken = Slot(max_capacity=15, current_bookings_count=2, type="CLOSED")

    assert is_slot_eligible(empty, "CLOSED", 15)
    assert is_slot_eligible(empty, "OPEN", 3)
    assert is_slot_eligible(open_partial, "OPEN", 4)
    assert not is_slot_eligible(open_partial, "OPEN", 5)
    assert not is_slot_eligible(open_partial, "CLOSED", 1)
    # a claimed closed slot never takes more people, whatever its numbers say
    assert not is_slot_eligible(closed_taken, "OPEN", 1)


def test_commit_guard_checks_status_then_capacity_then_type(make_slot):
    maintenance = get_slot(make_slot(hour=10, status="MAINTENANCE"))
    nearly_full = get_slot(make_slot(hour=11, count=14))
    open_partial = get_slot(make_slot(hour=12, count=3))
    closed_taken = get_slot(make_slot(hour=13, count=3, type="CLOSED"))
    empty = get_slot(make_slot(hour=14))

    assert check_slot_for_booking(None, "OPEN", 1)[0] == SLOT_ERROR
    assert check_slot_for_booking(maintenance, "OPEN", 1)[0] == SLOT_ERROR
    assert check_slot_for_booking(nearly_full, "OPEN", 2)[0] == CAPACITY_EXCEEDED
    assert check_slot_for_booking(open_partial, "CLOSED", 2)[0] == CAPACITY_EXCEEDED
    assert check_slot_for_booking(closed_taken, "OPEN", 1)[0] == CAPACITY_EXCEEDED
    assert check_slot_for_booking(open_partial, "OPEN", 12) is None
    assert check_slot_for_booking(empty, "CLOSED", 15) is None
    assert check_slot_for_booking(empty, "OPEN", 16)[0] == CAPACITY_EXCEEDED


def test_commit_guard_rejects_started_slots(make_slot):
    slot = get_slot(make_slot(hour=10))

    code, _ = check_slot_for_booking(slot, "OPEN", 1, now=slot.start_time + timedelta(minutes=1))

    assert code == SLOT_ERROR
