"""
Shared type definitions for the agenda backend.

This module contains enumerations and dataclasses that are used across multiple services.
"""

from shared_types.scheduling import (
    AppointmentStatus,
    BillingStatus,
    DeleteType,
    Frequency,
    InvoiceStatus,
    NotificationType,
    ProfessionalLevel,
    TRANSITION_TARGETS,
    UserRole,
)

__all__ = [
    "AppointmentStatus",
    "BillingStatus",
    "DeleteType",
    "Frequency",
    "InvoiceStatus",
    "NotificationType",
    "ProfessionalLevel",
    "TRANSITION_TARGETS",
    "UserRole",
]
