"""
Create, cancel and reschedule bookings against shared slots.

Create and reschedule run as one database transaction: if any step fails,
everything done before it is rolled back. Cancel commits the booking status
first and updates the slot counter afterwards, reporting a failed counter
update through CancelBookingResult.slot_released.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.booking import Booking, new_management_token
from models.constants import BOOKING_CANCELLED, BOOKING_CONFIRMED, MAX_RESCHEDULES
from models.customer import Customer
from services import slot_ledger
from services.availability import check_slot_for_booking, validate_request
from services.results import (
    BOOKING_ERROR,
    CAPACITY_EXCEEDED,
    CUSTOMER_ERROR,
    SLOT_ERROR,
    UNKNOWN,
    CancelBookingResult,
    CreateBookingResult,
    RescheduleBookingResult,
    MSG_BOOKING_CANCELLED,
    MSG_BOOKING_FAILED,
    MSG_BOOKING_NOT_FOUND,
    MSG_BOOKING_OUTDATED,
    MSG_CUSTOMER_FAILED,
    MSG_INVALID_DETAILS,
    MSG_RESCHEDULE_LIMIT,
    MSG_SAME_SLOT,
    MSG_SLOT_CHANGED,
    MSG_SLOT_UPDATE_FAILED,
    MSG_UNEXPECTED,
)
from utils.audit import log_event
from utils.formatting import format_name, normalize_phone

logger = logging.getLogger(__name__)

MSG_CUSTOMER_REQUIRED = "Customer name and phone are required."
MSG_NOT_CONFIRMED = "Only confirmed bookings can be rescheduled."


def upsert_customer(name: str, phone: str) -> Customer:
    customer = Customer.query.filter_by(phone=phone).first()
    if customer:
        customer.name = name
    else:
        customer = Customer(name=name, phone=phone)
        db.session.add(customer)
    db.session.flush()
    return customer


def _claim_with_revalidation(slot_id, session_type: str, people_count: int) -> Optional[Tuple[str, str]]:
    """
    Re-reads the slot, re-checks it and claims the seats with a conditional
    write. Returns None on success, else (code, message).
    """
    for attempt in range(slot_ledger.update_attempts()):
        slot = slot_ledger.fresh_slot(slot_id)
        failure = check_slot_for_booking(slot, session_type, people_count)
        if failure:
            return failure
        if slot_ledger.claim_seats(slot, people_count, session_type):
            return None
        logger.info("slot %s changed during claim (attempt %s)", slot_id, attempt + 1)

    return CAPACITY_EXCEEDED, MSG_SLOT_CHANGED


def create_booking(name: str, phone: str, slot_id, people_count: int, total_amount,
                   session_type: str) -> CreateBookingResult:
    try:
        validate_request(session_type, people_count)
        amount = Decimal(str(total_amount))
    except (ValueError, TypeError, InvalidOperation):
        return CreateBookingResult.fail(BOOKING_ERROR, MSG_INVALID_DETAILS)
    if not amount.is_finite() or amount < 0:
        return CreateBookingResult.fail(BOOKING_ERROR, MSG_INVALID_DETAILS)

    customer_name = format_name(name)
    customer_phone = normalize_phone(phone)
    if not customer_name or not customer_phone:
        return CreateBookingResult.fail(CUSTOMER_ERROR, MSG_CUSTOMER_REQUIRED)

    try:
        slot = slot_ledger.fresh_slot(slot_id)
        failure = check_slot_for_booking(slot, session_type, people_count)
        if failure:
            return CreateBookingResult.fail(*failure)

        try:
            customer = upsert_customer(customer_name, customer_phone)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("customer upsert failed for slot %s", slot_id)
            return CreateBookingResult.fail(CUSTOMER_ERROR, MSG_CUSTOMER_FAILED)

        try:
            booking = Booking(
                slot_id=slot.id,
                customer_id=customer.id,
                people_count=people_count,
                total_amount=amount,
                session_type=session_type,
                status=BOOKING_CONFIRMED,
                reschedule_count=0,
                management_token=new_management_token(),
            )
            db.session.add(booking)
            db.session.flush()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("booking insert failed for slot %s", slot_id)
            return CreateBookingResult.fail(BOOKING_ERROR, MSG_BOOKING_FAILED)

        try:
            failure = _claim_with_revalidation(slot.id, session_type, people_count)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("slot %s update failed", slot_id)
            return CreateBookingResult.fail(SLOT_ERROR, MSG_SLOT_UPDATE_FAILED)
        if failure:
            db.session.rollback()
            logger.info("slot %s rejected booking at commit time: %s", slot_id, failure[1])
            return CreateBookingResult.fail(*failure)

        result = CreateBookingResult(
            success=True,
            booking_id=booking.id,
            management_token=booking.management_token,
            customer_id=customer.id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("unexpected error creating booking on slot %s", slot_id)
        return CreateBookingResult.fail(UNKNOWN, MSG_UNEXPECTED)

    logger.info(
        "booking %s created on slot %s (%s x%s)",
        result.booking_id, slot_id, session_type, people_count,
    )
    return result


def cancel_booking(booking_id, slot_id=None, people_count=None) -> CancelBookingResult:
    try:
        booking = db.session.get(Booking, booking_id)
        if booking is None:
            return CancelBookingResult(success=False, error=MSG_BOOKING_NOT_FOUND)

        if booking.status == BOOKING_CANCELLED:
            return CancelBookingResult(success=True, already_cancelled=True)

        if (slot_id is not None and slot_id != booking.slot_id) or \
                (people_count is not None and people_count != booking.people_count):
            logger.warning(
                "cancel of booking %s got slot=%s people=%s, stored slot=%s people=%s; using stored values",
                booking_id, slot_id, people_count, booking.slot_id, booking.people_count,
            )

        release_slot_id = booking.slot_id
        release_count = booking.people_count

        now = datetime.utcnow()
        booking.status = BOOKING_CANCELLED
        booking.cancelled_at = now
        booking.updated_at = now
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("unexpected error cancelling booking %s", booking_id)
        return CancelBookingResult(success=False, error=MSG_UNEXPECTED)

    released = _release_after_cancel(booking_id, release_slot_id, release_count)
    return CancelBookingResult(success=True, slot_released=released)


def _release_after_cancel(booking_id, slot_id, people_count: int) -> bool:
    try:
        slot = slot_ledger.release_seats(slot_id, people_count)
        db.session.commit()
    except (SQLAlchemyError, slot_ledger.SlotUpdateConflict):
        db.session.rollback()
        logger.exception("booking %s cancelled but slot %s was not released", booking_id, slot_id)
        _record_slot_sync_failure(booking_id, slot_id, people_count, "slot update failed")
        return False

    if slot is None:
        logger.error("booking %s cancelled but slot %s does not exist", booking_id, slot_id)
        _record_slot_sync_failure(booking_id, slot_id, people_count, "slot not found")
        return False

    return True


def _record_slot_sync_failure(booking_id, slot_id, people_count: int, reason: str):
    try:
        log_event(
            "BOOKING_CANCEL_SLOT_SYNC_FAILED",
            entity="booking",
            entity_id=booking_id,
            metadata={"slot_id": slot_id, "people_count": people_count, "reason": reason},
        )
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("could not record slot sync failure for booking %s", booking_id)


def reschedule_booking(booking_id, old_slot_id, new_slot_id, session_type: str,
                       people_count: int) -> RescheduleBookingResult:
    try:
        booking = db.session.get(Booking, booking_id)
        if booking is None:
            return RescheduleBookingResult(success=False, error=MSG_BOOKING_NOT_FOUND)

        observed_reschedules = booking.reschedule_count or 0
        if observed_reschedules >= MAX_RESCHEDULES:
            return RescheduleBookingResult(success=False, error=MSG_RESCHEDULE_LIMIT)

        if booking.status == BOOKING_CANCELLED:
            return RescheduleBookingResult(success=False, error=MSG_BOOKING_CANCELLED)

        if booking.status != BOOKING_CONFIRMED:
            return RescheduleBookingResult(success=False, error=MSG_NOT_CONFIRMED)

        if old_slot_id != booking.slot_id or session_type != booking.session_type \
                or people_count != booking.people_count:
            return RescheduleBookingResult(success=False, error=MSG_BOOKING_OUTDATED)

        if new_slot_id == booking.slot_id:
            return RescheduleBookingResult(success=False, error=MSG_SAME_SLOT)

        failure = check_slot_for_booking(slot_ledger.fresh_slot(new_slot_id), session_type, people_count)
        if failure:
            return RescheduleBookingResult(success=False, error=failure[1])

        old_slot = slot_ledger.release_seats(old_slot_id, people_count)
        if old_slot is None:
            logger.warning("booking %s points at missing slot %s; nothing to release", booking_id, old_slot_id)

        failure = _claim_with_revalidation(new_slot_id, session_type, people_count)
        if failure:
            db.session.rollback()
            return RescheduleBookingResult(success=False, error=failure[1])

        moved = db.session.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status == BOOKING_CONFIRMED,
                Booking.reschedule_count == observed_reschedules,
            )
            .values(
                slot_id=new_slot_id,
                updated_at=datetime.utcnow(),
                reschedule_count=observed_reschedules + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if moved.rowcount != 1:
            db.session.rollback()
            return RescheduleBookingResult(success=False, error=MSG_BOOKING_OUTDATED)

        db.session.commit()
    except slot_ledger.SlotUpdateConflict:
        db.session.rollback()
        logger.warning("reschedule of booking %s lost a race on its current slot", booking_id)
        return RescheduleBookingResult(success=False, error=MSG_SLOT_CHANGED)
    except Exception:
        db.session.rollback()
        logger.exception("unexpected error rescheduling booking %s", booking_id)
        return RescheduleBookingResult(success=False, error=MSG_UNEXPECTED)

    logger.info("booking %s moved from slot %s to slot %s", booking_id, old_slot_id, new_slot_id)
    return RescheduleBookingResult(success=True)


def get_booking_by_token(token: str) -> Optional[Booking]:
    if not token:
        return None
    return Booking.query.filter_by(management_token=token).first()
