"""
Utility functions for consistent appointment queries.

This module contains the appointment store's read, lock and bulk-write
helpers so that the scheduling engine applies the same series and
"future occurrence" filters everywhere.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, Query, joinedload

from core.exceptions import ConflictError
from models import Appointment
from shared_types import AppointmentStatus
from utils.datetime_utils import clinic_now


def lock_appointment(db: Session, appointment_id: int, nowait: bool = False) -> Optional[Appointment]:
    """
    Load an appointment holding an exclusive row lock until the transaction ends.

    Args:
        db: Database session
        appointment_id: Appointment ID
        nowait: Fail immediately instead of waiting when the row is already locked

    Returns:
        The locked appointment, or None if it does not exist

    Raises:
        ConflictError: If nowait is set and another transaction holds the lock
    """
    try:
        return db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).with_for_update(nowait=nowait).first()
    except OperationalError:
        # Lock not available - another transaction is modifying the row
        db.rollback()
        raise ConflictError()


def filter_future_series_occurrences(
    query: Query[Appointment],
    series_id: int,
    after: datetime,
    inclusive: bool = False,
) -> Query[Appointment]:
    """
    Restrict a query to occurrences of a series later than a reference time.

    Args:
        query: Base query for Appointment
        series_id: Series ID
        after: Reference time (usually the edited occurrence's time)
        inclusive: Include occurrences exactly at the reference time
    """
    time_filter = Appointment.appointment_time >= after if inclusive else Appointment.appointment_time > after
    return query.filter(Appointment.series_id == series_id, time_filter)


def get_future_scheduled_occurrences(
    db: Session,
    series_id: int,
    after: datetime,
    exclude_id: Optional[int] = None,
) -> List[Appointment]:
    """Scheduled occurrences of a series strictly after the given time, oldest first."""
    query = filter_future_series_occurrences(db.query(Appointment), series_id, after).filter(
        Appointment.status == AppointmentStatus.SCHEDULED.value
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    return query.order_by(Appointment.appointment_time).all()


def delete_future_scheduled_occurrences(db: Session, series_id: int, after: datetime) -> int:
    """
    Delete Scheduled occurrences of a series strictly after the given time.

    Completed, cancelled and awaiting-payment occurrences are left untouched.

    Returns:
        Number of deleted rows
    """
    return filter_future_series_occurrences(db.query(Appointment), series_id, after).filter(
        Appointment.status == AppointmentStatus.SCHEDULED.value
    ).delete(synchronize_session=False)


def shift_future_scheduled_occurrences(
    db: Session,
    series_id: int,
    after: datetime,
    delta: timedelta,
    exclude_id: int,
) -> int:
    """
    Move every future Scheduled occurrence of a series by a fixed delta.

    Returns:
        Number of shifted occurrences
    """
    occurrences = get_future_scheduled_occurrences(db, series_id, after, exclude_id=exclude_id)
    for occurrence in occurrences:
        occurrence.appointment_time = occurrence.appointment_time + delta
    return len(occurrences)


def get_series_future_appointments(db: Session, series_id: int) -> List[Appointment]:
    """Scheduled occurrences of a series from now on, oldest first."""
    return db.query(Appointment).filter(
        Appointment.series_id == series_id,
        Appointment.status == AppointmentStatus.SCHEDULED.value,
        Appointment.appointment_time >= clinic_now(),
    ).order_by(Appointment.appointment_time).all()


def get_professional_scheduled_appointments(db: Session, professional_id: int) -> List[Appointment]:
    """
    All Scheduled appointments of a professional with the patient eagerly loaded.

    Callers split the result into pending-review and upcoming lists.
    """
    return db.query(Appointment).options(
        joinedload(Appointment.patient)
    ).filter(
        Appointment.professional_id == professional_id,
        Appointment.status == AppointmentStatus.SCHEDULED.value,
    ).order_by(Appointment.appointment_time).all()


def get_appointments_due_for_reminder(db: Session, window_start: datetime, window_end: datetime) -> List[Appointment]:
    """
    Scheduled appointments inside the reminder window that have not been reminded yet.

    Args:
        db: Database session
        window_start: Inclusive lower bound (clinic time)
        window_end: Inclusive upper bound (clinic time)
    """
    return db.query(Appointment).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.professional),
    ).filter(
        Appointment.status == AppointmentStatus.SCHEDULED.value,
        Appointment.reminder_sent_at.is_(None),
        Appointment.appointment_time >= window_start,
        Appointment.appointment_time <= window_end,
    ).order_by(Appointment.appointment_time).all()
