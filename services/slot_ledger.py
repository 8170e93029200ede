"""
Conditional writes on slot occupancy.

Every write is a compare-and-swap on the occupancy value that was read, so a
concurrent booking on the same slot makes the write miss instead of silently
overwriting the other request's count.
"""
import logging
from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy import update

from models import db
from models.constants import SESSION_CLOSED, SESSION_OPEN, SLOT_AVAILABLE
from models.slot import Slot

logger = logging.getLogger(__name__)


class SlotUpdateConflict(Exception):
    """The slot row kept changing between read and conditional write."""

    def __init__(self, slot_id):
        super().__init__(f"slot {slot_id} changed concurrently")
        self.slot_id = slot_id


def update_attempts() -> int:
    return max(1, int(current_app.config.get("SLOT_UPDATE_ATTEMPTS", 3)))


def fresh_slot(slot_id) -> Optional[Slot]:
    if slot_id is None:
        return None
    return db.session.get(Slot, slot_id, populate_existing=True)


def claim_seats(slot: Slot, people_count: int, session_type: str) -> bool:
    """
    Adds people_count to the slot if it still holds the occupancy we read.
    An empty slot takes the session type of its first claimant.
    """
    observed = slot.current_bookings_count or 0
    new_count = observed + people_count

    if observed > 0 and session_type == SESSION_CLOSED:
        return False

    conditions = [
        Slot.id == slot.id,
        Slot.current_bookings_count == observed,
        Slot.status == SLOT_AVAILABLE,
        Slot.max_capacity >= new_count,
    ]
    values = {"current_bookings_count": new_count, "updated_at": datetime.utcnow()}
    if observed == 0:
        values["type"] = session_type
    else:
        conditions.append(Slot.type == SESSION_OPEN)

    result = db.session.execute(
        update(Slot)
        .where(*conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.session.expire(slot)
    return result.rowcount == 1


def release_seats(slot_id, people_count: int) -> Optional[Slot]:
    """
    Subtracts people_count from the slot (floored at 0). An emptied slot is
    reset to OPEN so it can be offered to either session type again.
    Returns None when the slot does not exist.
    """
    for _ in range(update_attempts()):
        slot = fresh_slot(slot_id)
        if slot is None:
            return None

        observed = slot.current_bookings_count or 0
        new_count = max(0, observed - people_count)
        if observed < people_count:
            logger.warning(
                "slot %s holds %s people but %s are being released; clamping to 0",
                slot_id, observed, people_count,
            )

        values = {"current_bookings_count": new_count, "updated_at": datetime.utcnow()}
        if new_count == 0:
            values["type"] = SESSION_OPEN

        result = db.session.execute(
            update(Slot)
            .where(Slot.id == slot_id, Slot.current_bookings_count == observed)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        db.session.expire(slot)
        if result.rowcount == 1:
            return slot

        logger.info("slot %s changed while releasing seats, re-reading", slot_id)

    raise SlotUpdateConflict(slot_id)
