"""
Shared response models for API endpoints.

This module contains Pydantic response models that are shared across
the agenda and finance endpoints.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Generic acknowledgement."""
    success: bool = True


class AppointmentCreateResponse(BaseModel):
    """Response model for appointment creation."""
    created_count: int
    appointment_ids: List[int]
    series_id: Optional[int] = None
    package_invoice_id: Optional[int] = None  # Set for funded packages


class AppointmentUpdateResponse(SuccessResponse):
    """Response model for appointment edits, including recurrence bookkeeping."""
    series_id: Optional[int] = None
    generated_count: int = 0
    removed_count: int = 0
    shifted_count: int = 0


class AppointmentDeleteResponse(SuccessResponse):
    deleted_count: int


class StatusTransitionResponse(SuccessResponse):
    """Response model for status transitions."""
    invoice_created: bool
    billing_recorded: bool = False


class SeriesOccurrence(BaseModel):
    id: int
    appointment_time: datetime


class SeriesDetailsResponse(BaseModel):
    """Frequency and future Scheduled occurrences of a series."""
    series_id: int
    frequency: str
    occurrences: List[SeriesOccurrence]


class DashboardAppointment(BaseModel):
    id: int
    appointment_time: datetime
    patient_id: int
    patient_name: Optional[str] = None
    series_id: Optional[int] = None


class ProfessionalDashboardResponse(BaseModel):
    """Response model for the professional dashboard."""
    professional_name: str
    pending_appointments: List[DashboardAppointment]  # Past sessions still awaiting review
    upcoming_appointments: List[DashboardAppointment]
    active_patients: int
    net_revenue: Decimal  # Current month, gross minus commission


class PackagePaymentResponse(SuccessResponse):
    already_paid: bool
    released_count: int


class CommissionGenerationResponse(BaseModel):
    invoices_created: int
    invoice_ids: List[int]
