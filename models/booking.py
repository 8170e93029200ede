import secrets
from datetime import datetime
from models.db import db
from models.constants import BOOKING_CONFIRMED

def new_management_token() -> str:
    return secrets.token_urlsafe(24)

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    slot_id = db.Column(db.Integer, db.ForeignKey("slots.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default=BOOKING_CONFIRMED)
    # status values: PENDING, CONFIRMED, CANCELLED

    people_count = db.Column(db.Integer, nullable=False)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    session_type = db.Column(db.String(10), nullable=False)   # OPEN, CLOSED

    reschedule_count = db.Column(db.Integer, nullable=False, default=0)

    # opaque credential for self-service cancel/reschedule
    management_token = db.Column(db.String(64), unique=True, nullable=False, index=True, default=new_management_token)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    slot = db.relationship("Slot", lazy="joined")
    customer = db.relationship("Customer", lazy="joined")

    __table_args__ = (
        db.CheckConstraint("people_count >= 1", name="ck_booking_people_positive"),
        db.CheckConstraint("reschedule_count >= 0 AND reschedule_count <= 1", name="ck_booking_reschedule_once"),
    )
