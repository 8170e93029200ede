from dataclasses import dataclass
from typing import Optional

# Create failure codes
CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
CUSTOMER_ERROR = "CUSTOMER_ERROR"
BOOKING_ERROR = "BOOKING_ERROR"
SLOT_ERROR = "SLOT_ERROR"
UNKNOWN = "UNKNOWN"

# User-facing messages
MSG_UNEXPECTED = "An unexpected error occurred. Please try again."
MSG_INVALID_DETAILS = "Invalid booking details."
MSG_SLOT_NOT_FOUND = "Time slot not found."
MSG_SLOT_UNAVAILABLE = "This time slot is unavailable or under maintenance."
MSG_SLOT_STARTED = "This time slot has already started."
MSG_NOT_ENOUGH_SPOTS = "Not enough spots left in this time slot."
MSG_CLOSED_NEEDS_EMPTY = "A closed session requires an empty time slot."
MSG_SLOT_CLOSED = "This time slot is reserved for a closed session."
MSG_SLOT_CHANGED = "This time slot was just taken. Please choose another time."
MSG_CUSTOMER_FAILED = "Could not save customer details."
MSG_BOOKING_FAILED = "Could not create the booking. Please try again."
MSG_SLOT_UPDATE_FAILED = "Could not update the time slot. Please try again."
MSG_BOOKING_NOT_FOUND = "Booking not found."
MSG_BOOKING_CANCELLED = "This booking has been cancelled."
MSG_RESCHEDULE_LIMIT = "Limit of 1 reschedule reached."
MSG_BOOKING_OUTDATED = "Booking details are out of date. Reload and try again."
MSG_SAME_SLOT = "Choose a different time slot."


@dataclass
class CreateBookingResult:
    success: bool
    booking_id: Optional[int] = None
    management_token: Optional[str] = None
    customer_id: Optional[int] = None
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def fail(cls, code: str, error: str) -> "CreateBookingResult":
        return cls(success=False, code=code, error=error)


@dataclass
class CancelBookingResult:
    success: bool
    error: Optional[str] = None
    # False when the booking is cancelled but its slot counter could not be updated
    slot_released: bool = True
    already_cancelled: bool = False


@dataclass
class RescheduleBookingResult:
    success: bool
    error: Optional[str] = None
