from services import slot_ledger
from services.booking_engine import cancel_booking, reschedule_booking
from services.results import (
    MSG_BOOKING_CANCELLED,
    MSG_BOOKING_NOT_FOUND,
    MSG_BOOKING_OUTDATED,
    MSG_CLOSED_NEEDS_EMPTY,
    MSG_NOT_ENOUGH_SPOTS,
    MSG_RESCHEDULE_LIMIT,
    MSG_SAME_SLOT,
    MSG_SLOT_CHANGED,
    MSG_SLOT_CLOSED,
    MSG_SLOT_UNAVAILABLE,
)

from helpers import get_booking, get_slot


def _snapshot(*slot_ids):
    return [
        (s.current_bookings_count, s.type)
        for s in (get_slot(i) for i in slot_ids)
    ]


def test_reschedule_once_then_limit(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    third = make_slot(hour=12)
    booking = book(old, people=4)

    first = reschedule_booking(booking.booking_id, old, new, "OPEN", 4)

    assert first.success
    moved = get_booking(booking.booking_id)
    assert moved.slot_id == new
    assert moved.reschedule_count == 1
    assert _snapshot(old, new) == [(0, "OPEN"), (4, "OPEN")]

    before = _snapshot(new, third)
    second = reschedule_booking(booking.booking_id, new, third, "OPEN", 4)

    assert not second.success
    assert second.error == MSG_RESCHEDULE_LIMIT
    assert "limit of 1 reschedule reached" in second.error.lower()
    assert _snapshot(new, third) == before
    assert get_booking(booking.booking_id).slot_id == new


def test_closed_booking_moves_its_type_and_frees_old_slot(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    booking = book(old, people=15, type="CLOSED")

    result = reschedule_booking(booking.booking_id, old, new, "CLOSED", 15)

    assert result.success
    assert _snapshot(old, new) == [(0, "OPEN"), (15, "CLOSED")]


def test_joining_open_slot_keeps_its_type(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    book(new, people=5, phone="41955554444")
    booking = book(old, people=3)
    book(old, people=2, phone="41933332222")

    assert reschedule_booking(booking.booking_id, old, new, "OPEN", 3).success

    assert _snapshot(old, new) == [(2, "OPEN"), (8, "OPEN")]


def test_closed_booking_needs_empty_target(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    book(new, people=2, phone="41955554444")
    booking = book(old, people=6, type="CLOSED")

    result = reschedule_booking(booking.booking_id, old, new, "CLOSED", 6)

    assert result.error == MSG_CLOSED_NEEDS_EMPTY
    assert _snapshot(old, new) == [(6, "CLOSED"), (2, "OPEN")]
    assert get_booking(booking.booking_id).reschedule_count == 0


def test_open_booking_cannot_join_closed_or_full_slot(make_slot, book):
    old = make_slot(hour=10)
    closed = make_slot(hour=11)
    full = make_slot(hour=12, count=13)
    book(closed, people=3, type="CLOSED", phone="41955554444")
    booking = book(old, people=3)

    assert reschedule_booking(booking.booking_id, old, closed, "OPEN", 3).error == MSG_SLOT_CLOSED
    assert reschedule_booking(booking.booking_id, old, full, "OPEN", 3).error == MSG_NOT_ENOUGH_SPOTS
    assert get_booking(booking.booking_id).reschedule_count == 0


def test_maintenance_target_is_refused(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11, status="MAINTENANCE")
    booking = book(old, people=2)

    result = reschedule_booking(booking.booking_id, old, new, "OPEN", 2)

    assert result.error == MSG_SLOT_UNAVAILABLE
    assert get_slot(old).current_bookings_count == 2


def test_preconditions(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    booking = book(old, people=2)

    assert reschedule_booking(999, old, new, "OPEN", 2).error == MSG_BOOKING_NOT_FOUND
    assert reschedule_booking(booking.booking_id, old, old, "OPEN", 2).error == MSG_SAME_SLOT
    assert reschedule_booking(booking.booking_id, new, old, "OPEN", 2).error == MSG_BOOKING_OUTDATED
    assert reschedule_booking(booking.booking_id, old, new, "CLOSED", 2).error == MSG_BOOKING_OUTDATED
    assert reschedule_booking(booking.booking_id, old, new, "OPEN", 5).error == MSG_BOOKING_OUTDATED


def test_cancelled_booking_cannot_be_rescheduled(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    booking = book(old, people=2)
    cancel_booking(booking.booking_id)

    result = reschedule_booking(booking.booking_id, old, new, "OPEN", 2)

    assert result.error == MSG_BOOKING_CANCELLED
    assert _snapshot(old, new) == [(0, "OPEN"), (0, "OPEN")]


def test_failed_claim_leaves_old_slot_and_counter_untouched(make_slot, book, monkeypatch):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    booking = book(old, people=4, type="CLOSED")
    monkeypatch.setattr(slot_ledger, "claim_seats", lambda slot, people, session_type: False)

    result = reschedule_booking(booking.booking_id, old, new, "CLOSED", 4)

    assert result.error == MSG_SLOT_CHANGED
    assert _snapshot(old, new) == [(4, "CLOSED"), (0, "OPEN")]
    unchanged = get_booking(booking.booking_id)
    assert unchanged.slot_id == old
    assert unchanged.reschedule_count == 0


def test_unexpected_error_rolls_back_release(make_slot, book, monkeypatch):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    booking = book(old, people=4)

    def boom(slot_id, session_type, people_count):
        raise RuntimeError("connection reset")

    import services.booking_engine as engine
    monkeypatch.setattr(engine, "_claim_with_revalidation", boom)

    result = reschedule_booking(booking.booking_id, old, new, "OPEN", 4)

    assert not result.success
    assert "connection" not in result.error
    assert get_slot(old).current_bookings_count == 4
    assert get_booking(booking.booking_id).reschedule_count == 0


def test_limit_error_wins_over_cancelled_status(make_slot, book):
    old = make_slot(hour=10)
    new = make_slot(hour=11)
    third = make_slot(hour=12)
    booking = book(old, people=2)
    assert reschedule_booking(booking.booking_id, old, new, "OPEN", 2).success
    cancel_booking(booking.booking_id)

    result = reschedule_booking(booking.booking_id, new, third, "OPEN", 2)

    assert result.error == MSG_RESCHEDULE_LIMIT
    assert _snapshot(new, third) == [(0, "OPEN"), (0, "OPEN")]
