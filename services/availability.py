"""
Which slots can take a booking of a given session type and party size.

The same rule is evaluated twice per booking: once to list candidate slots,
and again at commit time against a fresh read of the chosen slot.
"""
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import List, Optional, Tuple

from models.constants import SESSION_CLOSED, SESSION_OPEN, SESSION_TYPES, SLOT_AVAILABLE
from models.slot import Slot
from services.results import (
    CAPACITY_EXCEEDED,
    SLOT_ERROR,
    MSG_CLOSED_NEEDS_EMPTY,
    MSG_NOT_ENOUGH_SPOTS,
    MSG_SLOT_CLOSED,
    MSG_SLOT_NOT_FOUND,
    MSG_SLOT_STARTED,
    MSG_SLOT_UNAVAILABLE,
)
from utils.timeutils import day_bounds_utc


@dataclass
class AvailableSlot:
    slot_id: int
    start_time: datetime
    end_time: datetime
    session_type: str
    max_capacity: int
    current_bookings_count: int
    available_spots: int

    def to_dict(self) -> dict:
        out = asdict(self)
        out["start_time"] = self.start_time.isoformat()
        out["end_time"] = self.end_time.isoformat()
        return out


def validate_request(session_type: str, people_count: int):
    if session_type not in SESSION_TYPES:
        raise ValueError(f"session type must be one of {', '.join(SESSION_TYPES)}")
    if not isinstance(people_count, int) or isinstance(people_count, bool) or people_count < 1:
        raise ValueError("people count must be a positive integer")


def is_slot_eligible(slot: Slot, session_type: str, people_count: int) -> bool:
    occupancy = slot.current_bookings_count or 0
    if session_type == SESSION_CLOSED:
        # private sessions need the whole slot
        return occupancy == 0
    if occupancy == 0:
        return True
    return slot.type == SESSION_OPEN and slot.available_spots >= people_count


def check_slot_for_booking(slot: Optional[Slot], session_type: str, people_count: int,
                           now: Optional[datetime] = None) -> Optional[Tuple[str, str]]:
    """
    Commit-time guard shared by create and reschedule.
    Returns None when the slot can take the booking, else (code, message).
    """
    if slot is None:
        return SLOT_ERROR, MSG_SLOT_NOT_FOUND
    if slot.status != SLOT_AVAILABLE:
        return SLOT_ERROR, MSG_SLOT_UNAVAILABLE
    if slot.start_time <= (now or datetime.utcnow()):
        return SLOT_ERROR, MSG_SLOT_STARTED

    if slot.available_spots < people_count:
        return CAPACITY_EXCEEDED, MSG_NOT_ENOUGH_SPOTS

    if not slot.is_empty:
        if session_type == SESSION_CLOSED:
            return CAPACITY_EXCEEDED, MSG_CLOSED_NEEDS_EMPTY
        if slot.type == SESSION_CLOSED:
            return CAPACITY_EXCEEDED, MSG_SLOT_CLOSED

    return None


def list_available_slots(day: date, session_type: str, people_count: int,
                         exclude_slot_id: Optional[int] = None) -> List[AvailableSlot]:
    validate_request(session_type, people_count)

    start, end = day_bounds_utc(day)
    now = datetime.utcnow()

    q = Slot.query.filter(
        Slot.start_time >= start,
        Slot.start_time < end,
        Slot.start_time > now,
        Slot.status == SLOT_AVAILABLE,
    )
    if exclude_slot_id is not None:
        q = q.filter(Slot.id != exclude_slot_id)

    slots = q.order_by(Slot.start_time.asc()).all()

    return [
        AvailableSlot(
            slot_id=s.id,
            start_time=s.start_time,
            end_time=s.end_time,
            session_type=s.type,
            max_capacity=s.max_capacity,
            current_bookings_count=s.current_bookings_count,
            available_spots=s.available_spots,
        )
        for s in slots
        if is_slot_eligible(s, session_type, people_count)
    ]
