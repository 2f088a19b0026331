"""
Appointment series model representing a recurrence definition.

A series owns the appointments generated from its rule. Appointments hold the
back-reference; deleting future occurrences never deletes the series row.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class AppointmentSeries(Base):
    """Recurrence rule (frequency + anchor time) for a professional-patient pair."""

    __tablename__ = "appointment_series"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the series."""

    professional_id: Mapped[int] = mapped_column(ForeignKey("professionals.id"))
    """Professional running every occurrence of the series."""

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"))
    """Patient attending every occurrence of the series."""

    start_date: Mapped[datetime] = mapped_column(DateTime)
    """Anchor time of the first occurrence (clinic time)."""

    frequency: Mapped[str] = mapped_column(String(20))
    """Recurrence interval. Valid values: 'none', 'weekly', 'biweekly'."""

    session_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    """Default gross value of each occurrence."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    appointments = relationship("Appointment", back_populates="series")
    """Occurrences generated from this series. Not cascaded: occurrences are deleted explicitly."""

    __table_args__ = (
        Index('idx_appointment_series_professional', 'professional_id'),
    )

    def __repr__(self) -> str:
        return f"<AppointmentSeries(id={self.id}, frequency='{self.frequency}')>"
