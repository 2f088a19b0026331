"""
Transactional email through the Resend API.

Each sender returns False (and logs a warning) when email is not configured
and raises SideEffectError when Resend rejects the message.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import resend

from core.config import EMAIL_FROM_ADDRESS, FRONTEND_URL, RESEND_API_KEY
from core.exceptions import SideEffectError
from utils.datetime_utils import format_currency, format_date, format_datetime

logger = logging.getLogger(__name__)

SENDER_NAME = "Agenda"

resend.api_key = RESEND_API_KEY


def _is_configured() -> bool:
    if not RESEND_API_KEY or not EMAIL_FROM_ADDRESS:
        logger.warning("Email not configured (RESEND_API_KEY / EMAIL_FROM_ADDRESS missing), skipping send")
        return False
    return True


def send_email(to: str | List[str], subject: str, html_content: str) -> bool:
    """
    Send an HTML email through Resend.

    Returns:
        True if Resend accepted the message, False if email is not configured

    Raises:
        SideEffectError: If Resend rejects the message
    """
    if not _is_configured():
        return False
    recipients = [to] if isinstance(to, str) else to
    params: Dict[str, Any] = {
        "from": f"{SENDER_NAME} <{EMAIL_FROM_ADDRESS}>",
        "to": recipients,
        "subject": subject,
        "html": html_content,
    }
    try:
        response = resend.Emails.send(params)
    except Exception as e:
        raise SideEffectError("email", f"Failed to send '{subject}' to {recipients}: {e}", e) from e
    logger.info(f"Email '{subject}' sent to {recipients}: {response}")
    return True


def send_invoice_notice(
    to: str,
    recipient_name: str,
    creator_name: str,
    amount: Decimal,
    due_date: date,
    invoice_id: int,
    finance_path: Optional[str] = None,
) -> bool:
    """Tell a payer that a new invoice was issued to them."""
    link = f"{FRONTEND_URL}{finance_path or '/finance'}"
    subject = f"New invoice received - Invoice #{invoice_id}"
    html = f"""
        <p>Hello, {recipient_name},</p>
        <p>You received a new invoice from <strong>{creator_name}</strong> for
        <strong>{format_currency(amount)}</strong>, due on <strong>{format_date(due_date)}</strong>.</p>
        <p>To see the details and pay, open the finance area of the platform.</p>
        <a href="{link}">Open my finances</a>
    """
    return send_email(to, subject, html)


def send_appointment_confirmation(
    to: str,
    patient_name: str,
    professional_name: str,
    appointment_time: datetime,
) -> bool:
    subject = "Appointment confirmed"
    html = f"""
        <p>Hello, {patient_name}!</p>
        <p>Your session with <strong>{professional_name}</strong> is confirmed for
        <strong>{format_datetime(appointment_time)}</strong>.</p>
        <p>If you need to reschedule, please contact us in advance.</p>
    """
    return send_email(to, subject, html)


def send_appointment_reminder(
    to: str,
    patient_name: str,
    professional_name: str,
    appointment_time: datetime,
) -> bool:
    """Send the 24-hour reminder email."""
    subject = "Reminder: your session is tomorrow"
    html = f"""
        <p>Hello, {patient_name}!</p>
        <p>This is a reminder of your session with <strong>{professional_name}</strong>
        on <strong>{format_datetime(appointment_time)}</strong>.</p>
        <a href="{FRONTEND_URL}/patient/agenda">See my agenda</a>
    """
    return send_email(to, subject, html)
