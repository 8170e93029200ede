from flask import Blueprint, request, jsonify

from models import db
from models.booking import Booking
from models.constants import BOOKING_CANCELLED, BOOKING_CONFIRMED, MAX_RESCHEDULES, SESSION_OPEN
from services.booking_engine import cancel_booking, create_booking, get_booking_by_token, reschedule_booking
from services.pricing import quote, validate_party_size
from services.results import (
    BOOKING_ERROR,
    CAPACITY_EXCEEDED,
    CUSTOMER_ERROR,
    SLOT_ERROR,
    UNKNOWN,
    MSG_BOOKING_NOT_FOUND,
    MSG_SLOT_NOT_FOUND,
    MSG_UNEXPECTED,
)
from utils.audit import log_event
from utils.formatting import format_phone
from utils.timeutils import utc_to_local

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")

CREATE_STATUS = {
    CAPACITY_EXCEEDED: 409,
    SLOT_ERROR: 409,
    CUSTOMER_ERROR: 400,
    BOOKING_ERROR: 400,
    UNKNOWN: 500,
}


def booking_json(b: Booking) -> dict:
    s = b.slot
    c = b.customer
    return {
        "id": b.id,
        "status": b.status,
        "people_count": b.people_count,
        "total_amount": str(b.total_amount),
        "session_type": b.session_type,
        "reschedule_count": b.reschedule_count,
        "can_cancel": b.status != BOOKING_CANCELLED,
        "can_reschedule": b.status == BOOKING_CONFIRMED and (b.reschedule_count or 0) < MAX_RESCHEDULES,
        "created_at": b.created_at.isoformat(),
        "updated_at": b.updated_at.isoformat() if b.updated_at else None,
        "cancelled_at": b.cancelled_at.isoformat() if b.cancelled_at else None,
        "slot": {
            "slot_id": b.slot_id,
            "start_time": s.start_time.isoformat() if s else None,
            "start_time_local": utc_to_local(s.start_time).isoformat() if s else None,
            "type": s.type if s else None,
        },
        "customer": {
            "customer_id": b.customer_id,
            "name": c.name if c else None,
            "phone": format_phone(c.phone) if c else None,
        },
    }


def _failure_status(error: str) -> int:
    if error == MSG_BOOKING_NOT_FOUND:
        return 404
    if error == MSG_UNEXPECTED:
        return 500
    return 409


# ---------- PUBLIC: create booking ----------
@booking_bp.post("")
def create():
    data = request.get_json(silent=True) or {}
    for field in ("name", "phone", "type"):
        if data.get(field) is not None and not isinstance(data[field], str):
            return jsonify(error=f"{field} must be text"), 400

    name = (data.get("name") or "").strip()
    phone = (data.get("phone") or "").strip()
    slot_id = data.get("slot_id")
    people_count = data.get("people_count")
    session_type = (data.get("type") or SESSION_OPEN).strip().upper()

    if not name or not phone or slot_id is None:
        return jsonify(error="name, phone and slot_id are required"), 400
    if not isinstance(slot_id, int) or isinstance(slot_id, bool):
        return jsonify(error="slot_id must be a whole number"), 400
    if not isinstance(people_count, int) or isinstance(people_count, bool):
        return jsonify(error="people_count must be a whole number"), 400

    try:
        validate_party_size(people_count, session_type)
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    total_amount = data.get("total_amount")
    if total_amount is None:
        total_amount = quote(people_count, session_type).total

    result = create_booking(
        name=name,
        phone=phone,
        slot_id=slot_id,
        people_count=people_count,
        total_amount=total_amount,
        session_type=session_type,
    )
    if not result.success:
        status = 404 if result.error == MSG_SLOT_NOT_FOUND else CREATE_STATUS.get(result.code, 400)
        return jsonify(error=result.error, code=result.code), status

    log_event("BOOKING_CREATE", entity="booking", entity_id=result.booking_id,
              metadata={"slot_id": slot_id, "people_count": people_count, "type": session_type})
    return jsonify(
        booking_id=result.booking_id,
        management_token=result.management_token,
        customer_id=result.customer_id,
    ), 201


# ---------- SELF-SERVICE: view booking by management token ----------
@booking_bp.get("/<token>")
def get_booking(token: str):
    booking = get_booking_by_token(token)
    if not booking:
        return jsonify(error=MSG_BOOKING_NOT_FOUND), 404
    return jsonify(booking_json(booking)), 200


# ---------- SELF-SERVICE: cancel ----------
@booking_bp.post("/<token>/cancel")
def cancel(token: str):
    booking = get_booking_by_token(token)
    if not booking:
        return jsonify(error=MSG_BOOKING_NOT_FOUND), 404

    booking_id = booking.id
    result = cancel_booking(booking_id, booking.slot_id, booking.people_count)
    if not result.success:
        return jsonify(error=result.error), _failure_status(result.error)

    if not result.already_cancelled:
        log_event("BOOKING_CANCEL", entity="booking", entity_id=booking_id,
                  metadata={"slot_released": result.slot_released})
    return jsonify(
        message="Cancelled",
        already_cancelled=result.already_cancelled,
        slot_released=result.slot_released,
    ), 200


# ---------- SELF-SERVICE: reschedule (once) ----------
@booking_bp.post("/<token>/reschedule")
def reschedule(token: str):
    data = request.get_json(silent=True) or {}
    new_slot_id = data.get("new_slot_id")
    if not isinstance(new_slot_id, int) or isinstance(new_slot_id, bool):
        return jsonify(error="new_slot_id is required"), 400

    booking = get_booking_by_token(token)
    if not booking:
        return jsonify(error=MSG_BOOKING_NOT_FOUND), 404

    booking_id = booking.id
    old_slot_id = booking.slot_id
    result = reschedule_booking(
        booking_id,
        old_slot_id,
        new_slot_id,
        booking.session_type,
        booking.people_count,
    )
    if not result.success:
        return jsonify(error=result.error), _failure_status(result.error)

    log_event("BOOKING_RESCHEDULE", entity="booking", entity_id=booking_id,
              metadata={"old_slot_id": old_slot_id, "new_slot_id": new_slot_id})
    return jsonify(booking_json(db.session.get(Booking, booking_id))), 200
