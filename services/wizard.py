"""
Customer booking flow as an explicit state machine.

    SELECTING_DATE -> SELECTING_SLOT -> COLLECTING_CUSTOMER -> CONFIRMED

The guards are the engine operations: slots offered come from the
availability filter and submitting calls create_booking.
"""
from datetime import date
from enum import Enum
from typing import List, Optional

from models.constants import SESSION_OPEN
from services.availability import AvailableSlot, list_available_slots
from services.booking_engine import create_booking
from services.pricing import Quote, quote, validate_party_size
from services.results import CAPACITY_EXCEEDED, SLOT_ERROR, CreateBookingResult


class WizardState(str, Enum):
    SELECTING_DATE = "SELECTING_DATE"
    SELECTING_SLOT = "SELECTING_SLOT"
    COLLECTING_CUSTOMER = "COLLECTING_CUSTOMER"
    CONFIRMED = "CONFIRMED"


class InvalidTransition(Exception):
    pass


class BookingWizard:
    def __init__(self, session_type: str = SESSION_OPEN, people_count: int = 1):
        validate_party_size(people_count, session_type)
        self.session_type = session_type
        self.people_count = people_count
        self.reset()

    def _require(self, *states):
        if self.state not in states:
            raise InvalidTransition(f"not allowed while {self.state.value}")

    @property
    def pricing(self) -> Quote:
        return quote(self.people_count, self.session_type)

    def choose_session(self, session_type: str, people_count: int):
        """Changing type or party size drops the chosen slot and refilters."""
        self._require(WizardState.SELECTING_DATE, WizardState.SELECTING_SLOT)
        validate_party_size(people_count, session_type)
        self.session_type = session_type
        self.people_count = people_count
        self.slot_id = None
        if self.day is not None:
            self._refresh_slots()

    def select_date(self, day: date):
        self._require(WizardState.SELECTING_DATE, WizardState.SELECTING_SLOT)
        self.day = day
        self.slot_id = None
        self._refresh_slots()
        self.state = WizardState.SELECTING_SLOT

    def select_slot(self, slot_id):
        self._require(WizardState.SELECTING_SLOT)
        if slot_id not in {s.slot_id for s in self.slots}:
            raise InvalidTransition("slot is not among the offered slots")
        self.slot_id = slot_id
        self.error = None
        self.state = WizardState.COLLECTING_CUSTOMER

    def back(self):
        if self.state == WizardState.COLLECTING_CUSTOMER:
            self.slot_id = None
            self.state = WizardState.SELECTING_SLOT
        elif self.state == WizardState.SELECTING_SLOT:
            self.day = None
            self.slots = []
            self.state = WizardState.SELECTING_DATE
        else:
            raise InvalidTransition(f"cannot go back from {self.state.value}")

    def submit(self, name: str, phone: str) -> CreateBookingResult:
        self._require(WizardState.COLLECTING_CUSTOMER)
        result = create_booking(
            name=name,
            phone=phone,
            slot_id=self.slot_id,
            people_count=self.people_count,
            total_amount=self.pricing.total,
            session_type=self.session_type,
        )
        self.result = result
        if result.success:
            self.error = None
            self.state = WizardState.CONFIRMED
        elif result.code in (CAPACITY_EXCEEDED, SLOT_ERROR):
            # the slot went away underneath us; offer what is left
            self.error = result.error
            self.slot_id = None
            self._refresh_slots()
            self.state = WizardState.SELECTING_SLOT
        else:
            self.error = result.error
        return result

    def reset(self):
        """Back to an empty SELECTING_DATE, keeping session type and party size."""
        self.state = WizardState.SELECTING_DATE
        self.day: Optional[date] = None
        self.slots: List[AvailableSlot] = []
        self.slot_id = None
        self.error: Optional[str] = None
        self.result: Optional[CreateBookingResult] = None

    def _refresh_slots(self):
        self.slots = list_available_slots(self.day, self.session_type, self.people_count)
