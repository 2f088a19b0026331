"""
Professional-Patient Assignment model.

A patient can be assigned to several professionals and a professional can be
assigned many patients. Creating an appointment records the assignment if it
does not exist yet.
"""

from sqlalchemy import ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime

from core.database import Base


class ProfessionalAssignment(Base):
    """Assignment of a professional to a patient."""

    __tablename__ = "professional_assignments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    professional_id: Mapped[int] = mapped_column(ForeignKey("professionals.id", ondelete="CASCADE"))
    """Reference to the professional."""

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id", ondelete="CASCADE"))
    """Reference to the patient."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    """Timestamp when the assignment was created."""

    # Relationships
    professional = relationship("Professional", back_populates="assignments")
    patient = relationship("Patient")

    __table_args__ = (
        # One assignment per professional-patient pair
        Index('uq_professional_patient', 'professional_id', 'patient_id', unique=True),
        Index('idx_professional_assignments_patient', 'patient_id'),
    )
