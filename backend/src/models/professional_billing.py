"""
Professional billing model: the per-session commission ledger.

One row is recorded for each completed, non-package appointment with a
positive session value. The unique appointment_id makes the insert idempotent.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import String, ForeignKey, DateTime, Date, Numeric, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from shared_types import BillingStatus


class ProfessionalBilling(Base):
    """Commission owed by a professional for one completed session."""

    __tablename__ = "professional_billings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    professional_id: Mapped[int] = mapped_column(ForeignKey("professionals.id"))

    appointment_id: Mapped[int] = mapped_column(ForeignKey("appointments.id"))
    """Completed appointment. Unique: at most one ledger row per appointment."""

    billing_date: Mapped[date] = mapped_column(Date)
    """Clinic date on which the session was completed."""

    gross_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    commission_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    """gross_value * commission rate, quantized to cents."""

    status: Mapped[str] = mapped_column(String(20), default=BillingStatus.UNBILLED.value)
    """
    Valid values:
    - 'unbilled': not yet included in a monthly commission invoice
    - 'billed': included in a commission invoice
    - 'paid': commission invoice settled
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    professional = relationship("Professional")
    appointment = relationship("Appointment")

    __table_args__ = (
        UniqueConstraint('appointment_id', name='uq_professional_billings_appointment'),
        Index('idx_professional_billings_professional_date', 'professional_id', 'billing_date'),
        Index('idx_professional_billings_status', 'status'),
    )
