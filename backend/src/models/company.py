"""
Company model representing an employer that pays for its collaborators' sessions.

When a patient is linked to a company, the company is the payer for that
patient's invoices.
"""

from datetime import datetime

from sqlalchemy import String, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Company(Base):
    """Corporate payer linked to a login account."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True)
    """Login account that receives the company's invoices."""

    name: Mapped[str] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    user = relationship("User")

    patients = relationship("Patient", back_populates="company")
    """Patients whose sessions this company pays for."""
