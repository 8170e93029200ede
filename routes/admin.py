from flask import Blueprint, jsonify, request

from models.booking import Booking
from models.slot import Slot
from routes.booking import booking_json
from security.admin_key import require_admin_key
from services.booking_engine import cancel_booking
from services.results import MSG_BOOKING_NOT_FOUND
from services.schedule import generate_slots, set_slot_status
from utils.audit import log_event
from utils.timeutils import day_bounds_utc, parse_day

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _slot_json(s: Slot) -> dict:
    return {
        "id": s.id,
        "start_time": s.start_time.isoformat(),
        "end_time": s.end_time.isoformat(),
        "max_capacity": s.max_capacity,
        "current_bookings_count": s.current_bookings_count,
        "available_spots": s.available_spots,
        "type": s.type,
        "status": s.status,
    }


# ---------- ADMIN: list bookings ----------
@admin_bp.get("/bookings")
@require_admin_key
def list_bookings():
    status = (request.args.get("status") or "").strip().upper()
    q = Booking.query
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(Booking.created_at.desc()).limit(200).all()
    return jsonify([booking_json(b) for b in rows]), 200


# ---------- ADMIN: cancel any booking ----------
@admin_bp.post("/bookings/<int:booking_id>/cancel")
@require_admin_key
def admin_cancel_booking(booking_id: int):
    result = cancel_booking(booking_id)
    if not result.success:
        status = 404 if result.error == MSG_BOOKING_NOT_FOUND else 500
        return jsonify(error=result.error), status

    if not result.already_cancelled:
        log_event("ADMIN_BOOKING_CANCEL", entity="booking", entity_id=booking_id,
                  metadata={"slot_released": result.slot_released})
    return jsonify(
        message="Cancelled by admin",
        already_cancelled=result.already_cancelled,
        slot_released=result.slot_released,
    ), 200


# ---------- ADMIN: slots of a day, any status ----------
@admin_bp.get("/slots")
@require_admin_key
def list_day_slots():
    try:
        day = parse_day(request.args.get("date") or "")
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    start, end = day_bounds_utc(day)
    slots = (
        Slot.query
        .filter(Slot.start_time >= start, Slot.start_time < end)
        .order_by(Slot.start_time.asc())
        .all()
    )
    return jsonify([_slot_json(s) for s in slots]), 200


# ---------- ADMIN: maintenance toggle ----------
@admin_bp.post("/slots/<int:slot_id>/status")
@require_admin_key
def change_slot_status(slot_id: int):
    data = request.get_json(silent=True) or {}
    try:
        slot = set_slot_status(slot_id, data.get("status"))
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    if not slot:
        return jsonify(error="Slot not found"), 404

    log_event("SLOT_STATUS_CHANGE", entity="slot", entity_id=slot_id, metadata={"status": slot.status})
    return jsonify(_slot_json(slot)), 200


# ---------- ADMIN: generate schedule ----------
@admin_bp.post("/slots/generate")
@require_admin_key
def generate_schedule():
    data = request.get_json(silent=True) or {}
    try:
        first_day = parse_day(data.get("start_date") or "")
        days = int(data.get("days") or 1)
        created = generate_slots(first_day, days)
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    log_event("SLOTS_GENERATED", entity="slot", metadata={"start_date": first_day, "days": days, "created": created})
    return jsonify(created=created), 201
