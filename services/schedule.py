from datetime import date, datetime, time, timedelta
from typing import Optional

from flask import current_app

from models import db
from models.constants import SESSION_OPEN, SLOT_AVAILABLE, SLOT_STATUSES
from models.slot import Slot
from utils.timeutils import local_to_utc


def day_start_times(day: date) -> list:
    """Business-local start times for one day, as configured."""
    cfg = current_app.config
    opening = time.fromisoformat(cfg.get("OPENING_TIME", "10:00"))
    closing = time.fromisoformat(cfg.get("CLOSING_TIME", "22:00"))
    duration = timedelta(minutes=cfg.get("SLOT_DURATION_MINUTES", 25))
    interval = timedelta(minutes=cfg.get("SLOT_INTERVAL_MINUTES", 30))
    if interval <= timedelta(0) or duration <= timedelta(0):
        raise ValueError("slot duration and interval must be positive")

    out = []
    current = datetime.combine(day, opening)
    close_at = datetime.combine(day, closing)
    while current + duration <= close_at:
        out.append(current)
        current += interval
    return out


def generate_slots(first_day: date, days: int = 1) -> int:
    """
    Creates the configured daily slots for `days` days starting at first_day.
    Start times that already exist are left alone. Returns how many were created.
    """
    if days < 1:
        raise ValueError("days must be at least 1")

    cfg = current_app.config
    duration = timedelta(minutes=cfg.get("SLOT_DURATION_MINUTES", 25))
    capacity = cfg.get("SLOT_MAX_CAPACITY", 15)

    created = 0
    for offset in range(days):
        starts = [local_to_utc(s) for s in day_start_times(first_day + timedelta(days=offset))]
        if not starts:
            continue
        existing = {
            s.start_time for s in Slot.query.filter(Slot.start_time.in_(starts)).all()
        }
        for start in starts:
            if start in existing:
                continue
            db.session.add(Slot(
                start_time=start,
                end_time=start + duration,
                max_capacity=capacity,
                current_bookings_count=0,
                type=SESSION_OPEN,
                status=SLOT_AVAILABLE,
            ))
            created += 1

    db.session.commit()
    return created


def set_slot_status(slot_id, status: str) -> Optional[Slot]:
    status = (status or "").strip().upper()
    if status not in SLOT_STATUSES:
        raise ValueError(f"status must be one of {', '.join(SLOT_STATUSES)}")

    slot = db.session.get(Slot, slot_id)
    if not slot:
        return None

    slot.status = status
    db.session.commit()
    return slot
