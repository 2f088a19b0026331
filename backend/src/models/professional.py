"""
Professional model representing a clinician who runs appointments.

The professional's level drives the commission policy applied when one of
their sessions is completed.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Professional(Base):
    """Clinician profile linked to a login account."""

    __tablename__ = "professionals"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the professional."""

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True)
    """Login account of the professional (target of notifications and commission invoices)."""

    full_name: Mapped[str] = mapped_column(String(255))
    """Display name used in messages and invoice descriptions."""

    level: Mapped[str] = mapped_column(String(20), default="standard")
    """Commission tier. Valid values: 'standard', 'licensed', 'school'."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    user = relationship("User")
    """Relationship to the login account."""

    appointments = relationship("Appointment", back_populates="professional")
    """All appointments run by this professional."""

    assignments = relationship("ProfessionalAssignment", back_populates="professional", cascade="all, delete-orphan")
    """Explicit patient assignments."""

    __table_args__ = (
        Index('idx_professionals_level', 'level'),
    )
