"""
WhatsApp Cloud API template messages.

Templates: appointment_confirmation, appointment_reschedule and
appointment_reminder, all in pt_BR with positional body parameters.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List

import httpx

from core.config import (
    WHATSAPP_API_TOKEN,
    WHATSAPP_API_VERSION,
    WHATSAPP_COUNTRY_CODE,
    WHATSAPP_PHONE_NUMBER_ID,
)
from core.exceptions import SideEffectError
from utils.datetime_utils import format_datetime

logger = logging.getLogger(__name__)

TEMPLATE_LANGUAGE = "pt_BR"
REQUEST_TIMEOUT_SECONDS = 10.0


def format_phone_number(phone: str) -> str:
    """
    Normalize a phone number to digits with the country prefix.

    Local numbers (area code + number, 10 or 11 digits) get the country code
    prepended; anything else is returned as digits only.
    """
    digits = re.sub(r"\D", "", phone)
    if len(digits) in (10, 11):
        digits = WHATSAPP_COUNTRY_CODE + digits
    return digits


def _body_parameters(*values: str) -> List[Dict[str, Any]]:
    return [{
        "type": "body",
        "parameters": [{"type": "text", "text": value} for value in values],
    }]


def send_template_message(phone: str, template_name: str, components: List[Dict[str, Any]]) -> bool:
    """
    Send a template message.

    Returns:
        True if the API accepted the message, False if WhatsApp is not configured

    Raises:
        SideEffectError: If the request fails or the API rejects it
    """
    if not WHATSAPP_API_TOKEN or not WHATSAPP_PHONE_NUMBER_ID:
        logger.warning("WhatsApp not configured (WHATSAPP_API_TOKEN / WHATSAPP_PHONE_NUMBER_ID missing), skipping send")
        return False

    url = f"https://graph.facebook.com/{WHATSAPP_API_VERSION}/{WHATSAPP_PHONE_NUMBER_ID}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": format_phone_number(phone),
        "type": "template",
        "template": {
            "name": template_name,
            "language": {"code": TEMPLATE_LANGUAGE},
            "components": components,
        },
    }
    headers = {"Authorization": f"Bearer {WHATSAPP_API_TOKEN}"}
    try:
        response = httpx.post(url, json=payload, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SideEffectError(
            "whatsapp",
            f"Template '{template_name}' rejected with {e.response.status_code}: {e.response.text}",
            e,
        ) from e
    except httpx.HTTPError as e:
        raise SideEffectError("whatsapp", f"Template '{template_name}' request failed: {e}", e) from e

    logger.info(f"WhatsApp template '{template_name}' sent to {phone}")
    return True


def send_confirmation(phone: str, patient_name: str, professional_name: str, appointment_time: datetime) -> bool:
    return send_template_message(
        phone,
        "appointment_confirmation",
        _body_parameters(patient_name, professional_name, format_datetime(appointment_time)),
    )


def send_reschedule(phone: str, patient_name: str, professional_name: str, new_appointment_time: datetime) -> bool:
    return send_template_message(
        phone,
        "appointment_reschedule",
        _body_parameters(patient_name, professional_name, format_datetime(new_appointment_time)),
    )


def send_reminder(phone: str, patient_name: str, professional_name: str, appointment_time: datetime) -> bool:
    return send_template_message(
        phone,
        "appointment_reminder",
        _body_parameters(patient_name, professional_name, format_datetime(appointment_time)),
    )
