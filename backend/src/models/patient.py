"""
Patient model representing individuals who receive treatment.

A patient may be linked to a company (which then pays for the sessions) and
may have been registered by a professional, which makes it that
professional's own patient for commission purposes.
"""

from sqlalchemy import String, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional

from core.database import Base


class Patient(Base):
    """
    Patient entity representing an individual who receives treatment.

    The payer for a patient's invoices is the linked company when set,
    otherwise the patient's own user account.
    """

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the patient."""

    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True, unique=True)
    """Login account of the patient. NULL for patients who never activated an account."""

    full_name: Mapped[str] = mapped_column(String(255))
    """Full name of the patient."""

    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """Contact phone number used for WhatsApp confirmations and reschedule notices."""

    company_id: Mapped[Optional[int]] = mapped_column(ForeignKey("companies.id"), nullable=True)
    """Company that pays for this patient's sessions, if any."""

    created_by_professional_id: Mapped[Optional[int]] = mapped_column(ForeignKey("professionals.id"), nullable=True)
    """Professional who registered this patient. NULL when the platform assigned the patient."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    """Timestamp when the patient was first created. Orders external patients for commission ranking."""

    # Relationships
    user = relationship("User")
    """Optional relationship to the patient's login account."""

    company = relationship("Company", back_populates="patients")
    """Optional relationship to the paying company."""

    appointments = relationship("Appointment", back_populates="patient")
    """Relationship to all Appointment entities for this patient."""

    __table_args__ = (
        Index('idx_patients_company', 'company_id'),
        Index('idx_patients_created_by_professional', 'created_by_professional_id'),
        Index('idx_patients_created_at', 'created_at'),
    )
