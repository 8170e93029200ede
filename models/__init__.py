from .db import db
from .slot import Slot
from .customer import Customer
from .booking import Booking
from .audit_log import AuditLog
