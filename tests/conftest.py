from datetime import date, datetime, time, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.slot import Slot
from services.booking_engine import create_booking
from utils.timeutils import local_to_utc


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": TestConfig.ADMIN_API_KEY}


@pytest.fixture
def day():
    # a business day safely in the future
    return date.today() + timedelta(days=7)


@pytest.fixture
def make_slot(app, day):
    def _make(hour=10, minute=0, on=None, capacity=15, count=0, type="OPEN", status="AVAILABLE"):
        start = local_to_utc(datetime.combine(on or day, time(hour, minute)))
        slot = Slot(
            start_time=start,
            end_time=start + timedelta(minutes=25),
            max_capacity=capacity,
            current_bookings_count=count,
            type=type,
            status=status,
        )
        db.session.add(slot)
        db.session.commit()
        return slot.id
    return _make


@pytest.fixture
def book(app):
    def _book(slot_id, people=4, type="OPEN", phone="41999990000", name="Ana Souza"):
        result = create_booking(
            name=name,
            phone=phone,
            slot_id=slot_id,
            people_count=people,
            total_amount="0.00",
            session_type=type,
        )
        assert result.success, result.error
        return result
    return _book
