"""
Appointment model representing one scheduled clinical session.

Appointments link a professional and a patient at a specific time. They may
belong to a recurring series and, when bought as part of a package, point to
the package invoice that must be paid before the session is confirmed.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import PENDING_REVIEW_HOURS
from core.database import Base
from shared_types import AppointmentStatus
from utils.datetime_utils import clinic_now


class Appointment(Base):
    """
    Appointment entity representing a session between a patient and a professional.

    Status lifecycle:
    - 'scheduled' -> 'completed' | 'cancelled'
    - 'awaiting_payment' -> 'cancelled'
    - 'awaiting_payment' -> 'scheduled' only when the package invoice is paid

    Completed appointments are immutable except for audit fields.
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the appointment."""

    series_id: Mapped[Optional[int]] = mapped_column(ForeignKey("appointment_series.id"), nullable=True)
    """Series this occurrence was generated from. NULL for single appointments."""

    professional_id: Mapped[int] = mapped_column(ForeignKey("professionals.id"))
    """Professional who owns the appointment."""

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"))
    """Patient attending the appointment."""

    appointment_time: Mapped[datetime] = mapped_column(DateTime)
    """Start of the session (naive clinic time)."""

    session_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    """Gross value of the session. NULL or zero means nothing is billed on completion."""

    status: Mapped[str] = mapped_column(String(30), default=AppointmentStatus.SCHEDULED.value)
    """Current status. Valid values: 'scheduled', 'awaiting_payment', 'completed', 'cancelled'."""

    package_invoice_id: Mapped[Optional[int]] = mapped_column(ForeignKey("invoices.id"), nullable=True)
    """
    Invoice that paid for this session as part of a package.

    Always set when status is 'awaiting_payment'. Completed package sessions are
    never billed again.
    """

    reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    """
    Timestamp when the 24-hour reminder was sent.

    NULL means the reminder has not been sent yet, which prevents duplicate
    reminders across scheduler runs.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    series = relationship("AppointmentSeries", back_populates="appointments")

    professional = relationship("Professional", back_populates="appointments")
    """Relationship to the Professional who runs this appointment."""

    patient = relationship("Patient", back_populates="appointments")
    """Relationship to the Patient who attends this appointment."""

    package_invoice = relationship("Invoice", foreign_keys=[package_invoice_id])

    @property
    def is_pending_review(self) -> bool:
        """
        True when a past session still awaits the professional's completion or cancellation.

        Computed at read time, never stored.
        """
        return (
            self.status == AppointmentStatus.SCHEDULED.value
            and self.package_invoice_id is None
            and self.appointment_time < clinic_now() - timedelta(hours=PENDING_REVIEW_HOURS)
        )

    # Table indexes for performance
    __table_args__ = (
        Index('idx_appointments_professional_time', 'professional_id', 'appointment_time'),
        Index('idx_appointments_patient', 'patient_id'),
        Index('idx_appointments_series_time', 'series_id', 'appointment_time'),
        Index('idx_appointments_package_invoice', 'package_invoice_id'),
        # Index for reminder service queries (status + reminder_sent_at)
        Index('idx_appointments_status_reminder', 'status', 'reminder_sent_at'),
    )

    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, time={self.appointment_time}, status='{self.status}')>"
