"""
Notification model storing in-app notifications delivered to users.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Notification(Base):
    """In-app notification shown to a user and pushed over the real-time channel."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    """Recipient."""

    type: Mapped[str] = mapped_column(String(50))
    """Notification kind, e.g. 'new_appointment', 'new_invoice'."""

    message: Mapped[str] = mapped_column(String(500))

    related_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Frontend path the notification links to."""

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_notifications_user_read', 'user_id', 'is_read'),
    )
