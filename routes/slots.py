from flask import Blueprint, request, jsonify

from models.constants import SESSION_OPEN
from services.availability import list_available_slots
from services.pricing import quote
from utils.timeutils import parse_day

slots_bp = Blueprint("slots", __name__)


def _int_arg(name, default=None):
    """Returns (value, error). A present but non-numeric value is an error."""
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return default, None
    try:
        return int(raw), None
    except ValueError:
        return None, f"{name} must be a whole number"


def _session_args():
    session_type = (request.args.get("type") or SESSION_OPEN).strip().upper()
    people, error = _int_arg("people", default=1)
    return session_type, people, error


# ---------- PUBLIC: slots open for a booking ----------
@slots_bp.get("/slots")
def list_slots():
    date_str = request.args.get("date")
    if not date_str:
        return jsonify(error="date is required (YYYY-MM-DD)"), 400
    try:
        day = parse_day(date_str)
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    session_type, people, error = _session_args()
    if error:
        return jsonify(error=error), 400
    exclude_slot_id, error = _int_arg("exclude_slot_id")
    if error:
        return jsonify(error=error), 400

    try:
        slots = list_available_slots(day, session_type, people, exclude_slot_id=exclude_slot_id)
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    return jsonify([s.to_dict() for s in slots]), 200


# ---------- PUBLIC: price for a party ----------
@slots_bp.get("/quote")
def get_quote():
    session_type, people, error = _session_args()
    if error:
        return jsonify(error=error), 400
    try:
        q = quote(people, session_type)
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    return jsonify(q.to_dict()), 200
