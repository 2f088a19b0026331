"""
Invoice model representing a bill issued to a payer.

Invoices are created for packages (total value, due in 7 days), for completed
sessions (gross value, due in 15 days) and for monthly commission statements
(billed to the professional). Settlement happens outside this system; the only
status change driven here is the payment confirmation of a package invoice.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime, Date, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from shared_types import InvoiceStatus


class Invoice(Base):
    """Bill addressed to a payer user."""

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    payer_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    """User account that must pay (company, patient or professional for commissions)."""

    creator_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    """User whose action produced the invoice."""

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    due_date: Mapped[date] = mapped_column(Date)

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=InvoiceStatus.PENDING.value)
    """Valid values: 'pending', 'paid', 'overdue', 'cancelled'."""

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    """Timestamp when the payment was confirmed."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    payer = relationship("User", foreign_keys=[payer_user_id])
    creator = relationship("User", foreign_keys=[creator_user_id])

    __table_args__ = (
        Index('idx_invoices_payer_status', 'payer_user_id', 'status'),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, amount={self.amount}, status='{self.status}')>"
