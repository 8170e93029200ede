from models import db
from models.booking import Booking
from models.slot import Slot


def get_slot(slot_id) -> Slot:
    return db.session.get(Slot, slot_id, populate_existing=True)


def get_booking(booking_id) -> Booking:
    return db.session.get(Booking, booking_id, populate_existing=True)
