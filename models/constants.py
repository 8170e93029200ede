SESSION_OPEN = "OPEN"
SESSION_CLOSED = "CLOSED"
SESSION_TYPES = (SESSION_OPEN, SESSION_CLOSED)

SLOT_AVAILABLE = "AVAILABLE"
SLOT_MAINTENANCE = "MAINTENANCE"
SLOT_STATUSES = (SLOT_AVAILABLE, SLOT_MAINTENANCE)

BOOKING_PENDING = "PENDING"
BOOKING_CONFIRMED = "CONFIRMED"
BOOKING_CANCELLED = "CANCELLED"

# A booking may be moved to another slot at most this many times
MAX_RESCHEDULES = 1
