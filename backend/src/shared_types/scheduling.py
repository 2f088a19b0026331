"""
Shared enumerations for scheduling and billing.

Values are the strings persisted in the database and accepted over the API.
"""

from enum import Enum


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    AWAITING_PAYMENT = "awaiting_payment"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses a professional may request through a status transition
TRANSITION_TARGETS = frozenset({
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
})


class Frequency(str, Enum):
    NONE = "none"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"

    @property
    def is_recurring(self) -> bool:
        return self is not Frequency.NONE


class ProfessionalLevel(str, Enum):
    STANDARD = "standard"
    LICENSED = "licensed"
    SCHOOL = "school"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class BillingStatus(str, Enum):
    UNBILLED = "unbilled"
    BILLED = "billed"
    PAID = "paid"


class DeleteType(str, Enum):
    SINGLE = "single"
    FUTURE = "future"


class UserRole(str, Enum):
    ADMIN = "admin"
    PROFESSIONAL = "professional"
    PATIENT = "patient"
    COMPANY = "company"


class NotificationType(str, Enum):
    NEW_APPOINTMENT = "new_appointment"
    APPOINTMENT_RESCHEDULED = "appointment_rescheduled"
    APPOINTMENT_STATUS_CHANGED = "appointment_status_changed"
    NEW_INVOICE = "new_invoice"
    PAYMENT_RECEIVED = "payment_received"
