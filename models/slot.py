from datetime import datetime
from models.db import db
from models.constants import SESSION_OPEN, SLOT_AVAILABLE

class Slot(db.Model):
    __tablename__ = "slots"

    id = db.Column(db.Integer, primary_key=True)

    # stored as naive UTC
    start_time = db.Column(db.DateTime, nullable=False, unique=True, index=True)
    end_time = db.Column(db.DateTime, nullable=False)

    max_capacity = db.Column(db.Integer, nullable=False, default=15)
    current_bookings_count = db.Column(db.Integer, nullable=False, default=0)

    type = db.Column(db.String(10), nullable=False, default=SESSION_OPEN)        # OPEN, CLOSED
    status = db.Column(db.String(20), nullable=False, default=SLOT_AVAILABLE)    # AVAILABLE, MAINTENANCE

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("current_bookings_count >= 0", name="ck_slot_count_non_negative"),
        db.CheckConstraint("current_bookings_count <= max_capacity", name="ck_slot_count_within_capacity"),
    )

    @property
    def available_spots(self) -> int:
        return (self.max_capacity or 0) - (self.current_bookings_count or 0)

    @property
    def is_empty(self) -> bool:
        return (self.current_bookings_count or 0) == 0
