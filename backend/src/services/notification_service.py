"""
In-app notification service.

Persists a notification row in its own session (never the caller's
transaction) and pushes it to the recipient's live sessions.
"""

import logging
from typing import Any, Dict, Optional

from core.database import get_db_context
from core.constants import NEW_NOTIFICATION_EVENT
from models import Notification, User
from services.realtime_hub import realtime_hub
from shared_types import NotificationType, UserRole

logger = logging.getLogger(__name__)


ROLE_URL_PREFIXES = {
    UserRole.ADMIN.value: "/admin",
    UserRole.PROFESSIONAL.value: "/professional",
    UserRole.PATIENT.value: "/patient",
    UserRole.COMPANY.value: "/company",
}

TYPE_PATHS = {
    NotificationType.NEW_APPOINTMENT.value: "/agenda",
    NotificationType.APPOINTMENT_RESCHEDULED.value: "/agenda",
    NotificationType.APPOINTMENT_STATUS_CHANGED.value: "/agenda",
    NotificationType.NEW_INVOICE.value: "/finance",
    NotificationType.PAYMENT_RECEIVED.value: "/finance",
}


def build_notification_path(role: Optional[str], notification_type: str) -> str:
    """Frontend path for a notification, prefixed by the recipient's area."""
    prefix = ROLE_URL_PREFIXES.get(role or "", "")
    return f"{prefix}{TYPE_PATHS.get(notification_type, '/dashboard')}"


def serialize_notification(notification: Notification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "message": notification.message,
        "related_url": notification.related_url,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }


class NotificationService:
    """Service for creating in-app notifications."""

    @staticmethod
    def notify(
        user_id: int,
        notification_type: NotificationType | str,
        message: str,
        path: Optional[str] = None,
    ) -> bool:
        """
        Store a notification and push it to the user's live sessions.

        Args:
            user_id: Recipient user ID
            notification_type: Notification kind
            message: Text shown to the user
            path: Frontend path; derived from the recipient's role and the type when omitted

        Returns:
            True if the notification was stored, False otherwise
        """
        type_value = notification_type.value if isinstance(notification_type, NotificationType) else notification_type
        try:
            with get_db_context() as db:
                user = db.get(User, user_id)
                if user is None:
                    logger.warning(f"Notification skipped: user {user_id} not found")
                    return False

                notification = Notification(
                    user_id=user_id,
                    type=type_value,
                    message=message,
                    related_url=path or build_notification_path(user.role, type_value),
                )
                db.add(notification)
                db.flush()
                payload = serialize_notification(notification)
        except Exception as e:
            logger.exception(f"Failed to create notification for user {user_id}: {e}")
            return False

        if not realtime_hub.emit(user_id, NEW_NOTIFICATION_EVENT, payload):
            logger.debug(f"Notification {payload['id']} stored for offline user {user_id}")
        return True
