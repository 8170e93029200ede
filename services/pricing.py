from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app

from models.constants import SESSION_CLOSED, SESSION_TYPES

CENTS = Decimal("0.01")


@dataclass
class Quote:
    people_count: int
    session_type: str
    subtotal: Decimal
    discount: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "people_count": self.people_count,
            "session_type": self.session_type,
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "total": str(self.total),
        }


def participant_limits(session_type: str) -> tuple[int, int]:
    """Upper bound never exceeds what a single slot can seat."""
    cfg = current_app.config
    if session_type == SESSION_CLOSED:
        low, high = cfg.get("PRIVATE_MIN_PARTICIPANTS", 15), cfg.get("PRIVATE_MAX_PARTICIPANTS", 50)
    else:
        low, high = cfg.get("MIN_PARTICIPANTS", 1), cfg.get("MAX_PARTICIPANTS", 15)
    return low, min(high, cfg.get("SLOT_MAX_CAPACITY", 15))


def validate_party_size(people_count: int, session_type: str):
    """Raises ValueError when the party does not fit the session type's limits."""
    if session_type not in SESSION_TYPES:
        raise ValueError(f"session type must be one of {', '.join(SESSION_TYPES)}")
    low, high = participant_limits(session_type)
    if people_count < low or people_count > high:
        raise ValueError(f"{session_type} sessions take between {low} and {high} people")


def quote(people_count: int, session_type: str) -> Quote:
    validate_party_size(people_count, session_type)

    price = Decimal(str(current_app.config.get("PRICE_PER_PERSON", "110.00")))
    rate = Decimal(str(current_app.config.get("DISCOUNT_RATE", "0.10")))

    subtotal = (price * people_count).quantize(CENTS, rounding=ROUND_HALF_UP)
    discount = (subtotal * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    return Quote(
        people_count=people_count,
        session_type=session_type,
        subtotal=subtotal,
        discount=discount,
        total=subtotal - discount,
    )
