"""
Services package for shared business logic.

This package contains service classes that encapsulate the scheduling,
billing and messaging logic shared across the API endpoints.
"""

from .appointment_service import AppointmentService
from .billing_service import BillingService
from .notification_service import NotificationService
from .reminder_service import ReminderService
from .side_effects import PostCommitEffects

__all__ = [
    "AppointmentService",
    "BillingService",
    "NotificationService",
    "ReminderService",
    "PostCommitEffects",
]
