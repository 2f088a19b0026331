"""
Appointment reminder service.

This module handles sending automated reminders to patients the day before
their appointments. Reminders are sent by email and WhatsApp and scheduled
using APScheduler.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore
from apscheduler.triggers.cron import CronTrigger  # type: ignore
from sqlalchemy.orm import Session

from core.constants import (
    REMINDER_HOURS_BEFORE,
    REMINDER_SCHEDULER_MAX_INSTANCES,
    REMINDER_WINDOW_HOURS,
)
from core.database import get_db_context
from core.exceptions import SideEffectError
from models import Appointment, User
from services import email_service, whatsapp_service
from utils.appointment_queries import get_appointments_due_for_reminder
from utils.datetime_utils import CLINIC_TZ, clinic_now

logger = logging.getLogger(__name__)


class ReminderService:
    """
    Service for managing appointment reminders.

    Every hour, Scheduled appointments starting 23 to 25 hours from now that
    were not reminded yet get an email and, when the patient has a phone
    number, a WhatsApp message. reminder_sent_at is stamped once a reminder
    went out so later runs skip the appointment.
    """

    def __init__(self):
        """
        Initialize the reminder service.

        Note: Database sessions are created fresh for each scheduler run
        to avoid stale session issues. Do not pass a session here.
        """
        # Run on the clinic's civil clock regardless of the server's timezone
        self.scheduler = AsyncIOScheduler(timezone=CLINIC_TZ)
        self._is_started = False

    async def start_scheduler(self) -> None:
        """
        Start the background scheduler for sending reminders.

        This should be called during application startup.
        """
        if self._is_started:
            logger.warning("Reminder scheduler is already started")
            return

        self.scheduler.add_job(  # type: ignore
            self._send_pending_reminders,
            CronTrigger(minute=0),  # Top of every hour
            id="send_reminders",
            name="Send appointment reminders",
            max_instances=REMINDER_SCHEDULER_MAX_INSTANCES,  # Prevent overlapping runs
            replace_existing=True
        )

        self.scheduler.start()
        self._is_started = True
        logger.info("Appointment reminder scheduler started")

    async def stop_scheduler(self) -> None:
        """
        Stop the background scheduler.

        This should be called during application shutdown.
        """
        if self._is_started:
            self.scheduler.shutdown(wait=True)
            self._is_started = False
            logger.info("Appointment reminder scheduler stopped")

    async def _send_pending_reminders(self) -> None:
        """
        Scheduler entry point: send every reminder due right now.

        Uses a fresh database session for each run.
        """
        try:
            with get_db_context() as db:
                sent = self.send_due_reminders(db)
            if sent:
                logger.info(f"Sent {sent} appointment reminder(s)")
        except Exception as e:
            logger.exception(f"Error in reminder scheduler run: {e}")

    @staticmethod
    def reminder_window(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
        """Window of appointment times that get a reminder in a run at `now`."""
        current_time = now or clinic_now()
        return (
            current_time + timedelta(hours=REMINDER_HOURS_BEFORE - REMINDER_WINDOW_HOURS),
            current_time + timedelta(hours=REMINDER_HOURS_BEFORE + REMINDER_WINDOW_HOURS),
        )

    def send_due_reminders(self, db: Session, now: Optional[datetime] = None) -> int:
        """
        Send reminders for appointments inside the window and stamp them.

        Each appointment is committed on its own so one failure does not
        resend the others on the next run.

        Returns:
            Number of appointments reminded
        """
        window_start, window_end = self.reminder_window(now)
        appointments: List[Appointment] = get_appointments_due_for_reminder(db, window_start, window_end)
        if not appointments:
            return 0

        logger.info(f"Found {len(appointments)} appointment(s) needing reminders")
        sent = 0
        for appointment in appointments:
            if self._send_reminder_for_appointment(db, appointment):
                appointment.reminder_sent_at = clinic_now()
                db.commit()
                sent += 1
        return sent

    def _send_reminder_for_appointment(self, db: Session, appointment: Appointment) -> bool:
        """
        Send the reminder over every available channel.

        Returns:
            True if at least one channel delivered the reminder
        """
        patient = appointment.patient
        professional_name = appointment.professional.full_name if appointment.professional else ""
        delivered = False

        patient_user = db.get(User, patient.user_id) if patient.user_id else None
        if patient_user is not None and patient_user.email:
            try:
                delivered = email_service.send_appointment_reminder(
                    patient_user.email, patient.full_name, professional_name, appointment.appointment_time
                ) or delivered
            except SideEffectError as e:
                logger.warning(f"Reminder email failed for appointment {appointment.id}: {e}")

        if patient.phone_number:
            try:
                delivered = whatsapp_service.send_reminder(
                    patient.phone_number, patient.full_name, professional_name, appointment.appointment_time
                ) or delivered
            except SideEffectError as e:
                logger.warning(f"Reminder WhatsApp failed for appointment {appointment.id}: {e}")

        if not delivered:
            logger.info(f"No reminder channel delivered for appointment {appointment.id}")
        return delivered


# Global reminder service instance
_reminder_service: Optional[ReminderService] = None


def get_reminder_service() -> ReminderService:
    """
    Get the global reminder service instance.

    Returns:
        The global reminder service instance
    """
    global _reminder_service
    if _reminder_service is None:
        _reminder_service = ReminderService()
    return _reminder_service


async def start_reminder_scheduler() -> None:
    """
    Start the global reminder scheduler.

    This should be called during application startup.
    """
    service = get_reminder_service()
    await service.start_scheduler()


async def stop_reminder_scheduler() -> None:
    """
    Stop the global reminder scheduler.

    This should be called during application shutdown.
    """
    global _reminder_service
    if _reminder_service:
        await _reminder_service.stop_scheduler()
