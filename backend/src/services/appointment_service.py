"""
Appointment service for the scheduling engine.

This module contains the appointment use cases (create, update, delete,
status transition) and the read helpers used by the agenda endpoints. Each
use case runs in one transaction; notifications, emails and messages are
collected in a PostCommitEffects and only run after commit.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import (
    APPOINTMENT_STATUS_CHANGED_EVENT,
    PACKAGE_INVOICE_DUE_DAYS,
    SESSION_INVOICE_DUE_DAYS,
)
from core.exceptions import (
    ForbiddenError,
    NotFoundError,
    PayerResolutionError,
    PersistenceError,
    ValidationError,
)
from core.sentinels import MISSING, MissingType
from models import (
    Appointment, AppointmentSeries, Company, Invoice, Patient, Professional, User
)
from services import email_service, whatsapp_service
from services.billing_service import BillingService
from services.commission_policy import resolve_commission_rate
from services.notification_service import NotificationService
from services.realtime_hub import realtime_hub
from services.series_generator import CountBoundedHorizon, DateBoundedHorizon, generate
from services.side_effects import PostCommitEffects
from shared_types import (
    AppointmentStatus,
    DeleteType,
    Frequency,
    NotificationType,
    ProfessionalLevel,
    TRANSITION_TARGETS,
)
from utils.appointment_queries import (
    delete_future_scheduled_occurrences,
    filter_future_series_occurrences,
    get_professional_scheduled_appointments,
    get_series_future_appointments,
    lock_appointment,
    shift_future_scheduled_occurrences,
)
from utils.datetime_utils import (
    clinic_now,
    clinic_today,
    due_date_in,
    format_currency,
    format_date,
    format_datetime,
    parse_datetime_to_clinic,
    to_clinic_naive,
)
from utils.patient_queries import (
    count_assigned_patients,
    ensure_professional_assignment,
    get_ranked_external_patient_ids,
)

logger = logging.getLogger(__name__)


def _get_professional_or_404(db: Session, professional_id: int) -> Professional:
    professional = db.get(Professional, professional_id)
    if not professional:
        raise NotFoundError("Professional not found")
    return professional


def _get_patient_or_404(db: Session, patient_id: int) -> Patient:
    patient = db.get(Patient, patient_id)
    if not patient:
        raise NotFoundError("Patient not found")
    return patient


def _check_ownership(appointment: Appointment, acting_professional_id: Optional[int]) -> None:
    """Professionals may only act on their own appointments (None means admin)."""
    if acting_professional_id is not None and appointment.professional_id != acting_professional_id:
        raise ForbiddenError("You do not have permission to modify this appointment")


def _assign_company(db: Session, patient: Patient, company_id: Optional[int]) -> None:
    if company_id is not None and db.get(Company, company_id) is None:
        raise NotFoundError("Company not found")
    patient.company_id = company_id


def _as_decimal(value: Optional[Decimal | float | int | str]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


class AppointmentService:
    """
    Service class for appointment operations.

    Methods take an optional `effects` collector. When the caller supplies one
    (the API layer does, and hands it to BackgroundTasks) it is responsible
    for running it; otherwise the side effects run inline right after commit.
    """

    @staticmethod
    def create_appointments(
        db: Session,
        professional_id: Optional[int],
        patient_id: Optional[int],
        appointment_times: Sequence[datetime],
        creator_user_id: int,
        frequency: Frequency = Frequency.NONE,
        company_id: Optional[int] = None,
        session_value: Optional[Decimal] = None,
        is_package: bool = False,
        discount_percentage: Optional[Decimal] = None,
        total_value: Optional[Decimal] = None,
        acting_professional_id: Optional[int] = None,
        effects: Optional[PostCommitEffects] = None,
    ) -> Dict[str, Any]:
        """
        Create one appointment, a recurring series, or a pre-paid package.

        - Funded package (is_package and total_value > 0): one invoice to the
          resolved payer due in 7 days; every supplied time becomes an
          AwaitingPayment appointment linked to it.
        - Packages, funded or not, never recur: they keep exactly the supplied times.
        - Recurring frequency (not a package): a series row plus occurrences from the first
          supplied time up to 3 months later (inclusive).
        - Otherwise: one Scheduled appointment per supplied time.

        Args:
            db: Database session
            professional_id: Professional running the sessions
            patient_id: Patient attending the sessions
            appointment_times: Requested times; the first one seeds a recurring series
            creator_user_id: User performing the action (creator of the package invoice)
            frequency: Recurrence frequency
            company_id: Company to link to the patient as payer
            session_value: Gross value of each session
            is_package: Whether the sessions are sold as a package
            discount_percentage: Package discount, shown in the invoice description
            total_value: Package total
            acting_professional_id: Set when a professional (not an admin) is acting
            effects: Post-commit side-effect collector

        Returns:
            Dict with 'created_count', 'appointment_ids', 'series_id' and 'package_invoice_id'

        Raises:
            ValidationError: Missing professional, patient or times
            ForbiddenError: A professional creating for someone else
            NotFoundError: Unknown professional, patient or company
            PayerResolutionError: Funded package with no identifiable payer
            PersistenceError: Database failure (everything rolled back)
        """
        if not professional_id or not patient_id or not appointment_times:
            raise ValidationError("Professional, patient and at least one date are required")
        if acting_professional_id is not None and acting_professional_id != professional_id:
            raise ForbiddenError("Professionals can only create their own appointments")

        run_inline = effects is None
        effects = effects if effects is not None else PostCommitEffects()
        times: List[datetime] = [to_clinic_naive(t) for t in appointment_times]  # type: ignore[misc]
        session_value = _as_decimal(session_value)
        total_value = _as_decimal(total_value)
        is_funded_package = bool(is_package and total_value is not None and total_value > 0)

        try:
            professional = _get_professional_or_404(db, professional_id)
            patient = _get_patient_or_404(db, patient_id)

            if company_id is not None:
                _assign_company(db, patient, company_id)
            ensure_professional_assignment(db, professional_id, patient_id)

            status = AppointmentStatus.SCHEDULED
            invoice: Optional[Invoice] = None
            series: Optional[AppointmentSeries] = None

            if is_funded_package:
                status = AppointmentStatus.AWAITING_PAYMENT
                db.flush()
                payer_user_id = BillingService.resolve_payer(db, patient)
                if payer_user_id is None:
                    raise PayerResolutionError("Could not identify a recipient for the package invoice")
                discount = discount_percentage if discount_percentage is not None else 0
                invoice = BillingService.create_invoice(
                    db,
                    payer_user_id=payer_user_id,
                    creator_user_id=creator_user_id,
                    amount=total_value,  # type: ignore[arg-type]
                    due_date=due_date_in(PACKAGE_INVOICE_DUE_DAYS),
                    description=(
                        f"Package of {len(times)} sessions with {professional.full_name}. "
                        f"Discount of {discount}%."
                    ),
                )
                occurrences = list(times)
            elif frequency.is_recurring and not is_package:
                series = AppointmentSeries(
                    professional_id=professional_id,
                    patient_id=patient_id,
                    start_date=times[0],
                    frequency=frequency.value,
                    session_value=session_value,
                )
                db.add(series)
                db.flush()
                occurrences = generate(times[0], frequency, DateBoundedHorizon()).to_list()
            else:
                occurrences = generate(times[0], Frequency.NONE, timestamps=times).to_list()

            appointments = [
                Appointment(
                    series_id=series.id if series else None,
                    professional_id=professional_id,
                    patient_id=patient_id,
                    appointment_time=occurrence,
                    session_value=session_value,
                    status=status.value,
                    package_invoice_id=invoice.id if invoice else None,
                )
                for occurrence in occurrences
            ]
            db.add_all(appointments)
            db.flush()

            AppointmentService._collect_creation_effects(
                db, effects, professional, patient, appointments, invoice, status
            )
            db.commit()
        except HTTPException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to create appointments for patient {patient_id}: {e}")
            raise PersistenceError("Failed to create appointments")
        except Exception as e:
            db.rollback()
            logger.exception(f"Unexpected error creating appointments for patient {patient_id}: {e}")
            raise PersistenceError("Failed to create appointments")

        logger.info(
            f"Created {len(appointments)} appointment(s) for patient {patient_id} with professional "
            f"{professional_id} (status={status.value}, series={series.id if series else None}, "
            f"package_invoice={invoice.id if invoice else None})"
        )

        if run_inline:
            effects.run()

        return {
            "created_count": len(appointments),
            "appointment_ids": [a.id for a in appointments],
            "series_id": series.id if series else None,
            "package_invoice_id": invoice.id if invoice else None,
        }

    @staticmethod
    def _collect_creation_effects(
        db: Session,
        effects: PostCommitEffects,
        professional: Professional,
        patient: Patient,
        appointments: List[Appointment],
        invoice: Optional[Invoice],
        status: AppointmentStatus,
    ) -> None:
        """Queue the notifications of a creation while the data is still in session."""
        first_time = appointments[0].appointment_time
        when = format_datetime(first_time)

        if invoice is not None:
            payer = db.get(User, invoice.payer_user_id)
            effects.add(
                f"notify payer {invoice.payer_user_id} of package invoice {invoice.id}",
                NotificationService.notify,
                invoice.payer_user_id,
                NotificationType.NEW_INVOICE,
                f"New package invoice ({professional.full_name}) of {format_currency(invoice.amount)}.",
            )
            if payer is not None and payer.email:
                effects.add(
                    f"email invoice {invoice.id} to payer",
                    email_service.send_invoice_notice,
                    payer.email,
                    payer.full_name,
                    professional.full_name,
                    invoice.amount,
                    invoice.due_date,
                    invoice.id,
                )

        if status is AppointmentStatus.AWAITING_PAYMENT:
            patient_message = (
                f"{len(appointments)} session(s) with {professional.full_name} were pre-booked. "
                f"They will be confirmed once the invoice is paid."
            )
        else:
            patient_message = f"A new session with {professional.full_name} was booked for {when}."

        patient_user = db.get(User, patient.user_id) if patient.user_id else None
        if patient_user is not None:
            effects.add(
                f"notify patient user {patient_user.id} of new appointment",
                NotificationService.notify,
                patient_user.id,
                NotificationType.NEW_APPOINTMENT,
                patient_message,
            )
        effects.add(
            f"notify professional user {professional.user_id} of new appointment",
            NotificationService.notify,
            professional.user_id,
            NotificationType.NEW_APPOINTMENT,
            f"New appointment with {patient.full_name} added for {when}.",
        )

        if status is not AppointmentStatus.AWAITING_PAYMENT:
            if patient_user is not None and patient_user.email:
                effects.add(
                    f"email confirmation to patient {patient.id}",
                    email_service.send_appointment_confirmation,
                    patient_user.email,
                    patient.full_name,
                    professional.full_name,
                    first_time,
                )
            if patient.phone_number:
                effects.add(
                    f"whatsapp confirmation to patient {patient.id}",
                    whatsapp_service.send_confirmation,
                    patient.phone_number,
                    patient.full_name,
                    professional.full_name,
                    first_time,
                )

    @staticmethod
    def update_appointment(
        db: Session,
        appointment_id: int,
        professional_id: int | MissingType = MISSING,
        patient_id: int | MissingType = MISSING,
        company_id: Optional[int] | MissingType = MISSING,
        appointment_time: datetime | MissingType = MISSING,
        session_value: Optional[Decimal] | MissingType = MISSING,
        frequency: Optional[Frequency] = None,
        acting_professional_id: Optional[int] = None,
        effects: Optional[PostCommitEffects] = None,
    ) -> Dict[str, Any]:
        """
        Edit an appointment and reconcile its recurrence.

        Recurrence handling happens first, then the supplied scalar fields are
        applied to the edited row only:

        - single -> recurring: new series, 12 occurrences after the edited time
        - series -> none: future Scheduled occurrences removed, row detached
        - series -> other interval: future Scheduled occurrences replaced by 12 new ones
        - series, time moved, same interval: future Scheduled occurrences shifted by the same delta

        Fields left as MISSING are not touched; company_id=None unlinks the
        patient's company.

        Returns:
            Dict with 'success', 'series_id', 'generated_count', 'removed_count', 'shifted_count'

        Raises:
            ValidationError: Nothing to update, or a recurring package session
            NotFoundError: Unknown appointment, professional, patient or company
            ForbiddenError: Not the owner, or the appointment is completed
            PersistenceError: Database failure (everything rolled back)
        """
        fields = (professional_id, patient_id, company_id, appointment_time, session_value)
        if all(isinstance(value, MissingType) for value in fields) and frequency is None:
            raise ValidationError("No fields to update were provided")

        run_inline = effects is None
        effects = effects if effects is not None else PostCommitEffects()
        generated_count = removed_count = shifted_count = 0

        try:
            appointment = lock_appointment(db, appointment_id)
            if not appointment:
                raise NotFoundError("Appointment not found")
            _check_ownership(appointment, acting_professional_id)
            if appointment.status == AppointmentStatus.COMPLETED.value:
                raise ForbiddenError("Completed appointments cannot be changed")

            original_time = appointment.appointment_time
            if isinstance(appointment_time, MissingType):
                new_time = original_time
            else:
                new_time = parse_datetime_to_clinic(appointment_time)

            target_professional_id = appointment.professional_id if isinstance(professional_id, MissingType) else professional_id
            target_patient_id = appointment.patient_id if isinstance(patient_id, MissingType) else patient_id
            target_value = appointment.session_value if isinstance(session_value, MissingType) else _as_decimal(session_value)

            professional = _get_professional_or_404(db, target_professional_id)
            patient = _get_patient_or_404(db, target_patient_id)
            if acting_professional_id is not None and target_professional_id != acting_professional_id:
                raise ForbiddenError("Professionals cannot move appointments to another professional")

            series = db.get(AppointmentSeries, appointment.series_id) if appointment.series_id else None
            current_frequency = Frequency(series.frequency) if series else Frequency.NONE
            requested_frequency = frequency if frequency is not None else current_frequency

            if requested_frequency.is_recurring and appointment.package_invoice_id is not None:
                raise ValidationError("Package sessions cannot be part of a recurring series")

            def add_occurrences(target_series: AppointmentSeries, interval: Frequency) -> int:
                occurrences = generate(new_time, interval, CountBoundedHorizon()).to_list()
                db.add_all([
                    Appointment(
                        series_id=target_series.id,
                        professional_id=target_professional_id,
                        patient_id=target_patient_id,
                        appointment_time=occurrence,
                        session_value=target_value,
                        status=AppointmentStatus.SCHEDULED.value,
                    )
                    for occurrence in occurrences
                ])
                return len(occurrences)

            if series is None and requested_frequency.is_recurring:
                series = AppointmentSeries(
                    professional_id=target_professional_id,
                    patient_id=target_patient_id,
                    start_date=new_time,
                    frequency=requested_frequency.value,
                    session_value=target_value,
                )
                db.add(series)
                db.flush()
                appointment.series_id = series.id
                generated_count = add_occurrences(series, requested_frequency)
            elif series is not None and not requested_frequency.is_recurring:
                removed_count = delete_future_scheduled_occurrences(db, series.id, original_time)
                appointment.series_id = None
            elif series is not None and requested_frequency != current_frequency:
                removed_count = delete_future_scheduled_occurrences(db, series.id, original_time)
                series.frequency = requested_frequency.value
                generated_count = add_occurrences(series, requested_frequency)
            elif series is not None and new_time != original_time:
                shifted_count = shift_future_scheduled_occurrences(
                    db, series.id, original_time, new_time - original_time, exclude_id=appointment.id
                )

            appointment.professional_id = target_professional_id
            appointment.patient_id = target_patient_id
            appointment.appointment_time = new_time
            appointment.session_value = target_value
            if not isinstance(company_id, MissingType):
                _assign_company(db, patient, company_id)

            db.flush()

            when = format_datetime(new_time)
            if patient.user_id:
                effects.add(
                    f"notify patient user {patient.user_id} of rescheduled appointment {appointment_id}",
                    NotificationService.notify,
                    patient.user_id,
                    NotificationType.APPOINTMENT_RESCHEDULED,
                    f"Your appointment was changed to {when}.",
                )
            effects.add(
                f"notify professional user {professional.user_id} of rescheduled appointment {appointment_id}",
                NotificationService.notify,
                professional.user_id,
                NotificationType.APPOINTMENT_RESCHEDULED,
                f"An appointment with {patient.full_name} was changed to {when}. Check your agenda.",
            )
            if patient.phone_number:
                effects.add(
                    f"whatsapp reschedule notice to patient {patient.id}",
                    whatsapp_service.send_reschedule,
                    patient.phone_number,
                    patient.full_name,
                    professional.full_name,
                    new_time,
                )

            db.commit()
        except HTTPException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to update appointment {appointment_id}: {e}")
            raise PersistenceError("Failed to update appointment")
        except Exception as e:
            db.rollback()
            logger.exception(f"Unexpected error updating appointment {appointment_id}: {e}")
            raise PersistenceError("Failed to update appointment")

        logger.info(
            f"Updated appointment {appointment_id} (series={appointment.series_id}, generated={generated_count}, "
            f"removed={removed_count}, shifted={shifted_count})"
        )

        if run_inline:
            effects.run()

        return {
            "success": True,
            "series_id": appointment.series_id,
            "generated_count": generated_count,
            "removed_count": removed_count,
            "shifted_count": shifted_count,
        }

    @staticmethod
    def delete_appointment(
        db: Session,
        appointment_id: int,
        delete_type: DeleteType = DeleteType.SINGLE,
        acting_professional_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Delete one appointment, or it and the rest of its series.

        `future` removes the targeted row and every occurrence of its series at
        or after its time; completed occurrences are kept. The series row
        itself is never deleted.

        Raises:
            NotFoundError: Unknown appointment
            ValidationError: `future` on an appointment outside a series
            ForbiddenError: Not the owner, or the appointment is completed
        """
        try:
            appointment = lock_appointment(db, appointment_id)
            if not appointment:
                raise NotFoundError("Appointment not found")
            _check_ownership(appointment, acting_professional_id)
            if appointment.status == AppointmentStatus.COMPLETED.value:
                raise ForbiddenError("Completed appointments cannot be deleted")

            if delete_type == DeleteType.FUTURE:
                if appointment.series_id is None:
                    raise ValidationError("Only appointments in a series can be deleted with their future occurrences")
                deleted_count = filter_future_series_occurrences(
                    db.query(Appointment), appointment.series_id, appointment.appointment_time, inclusive=True
                ).filter(
                    Appointment.status != AppointmentStatus.COMPLETED.value
                ).delete(synchronize_session=False)
            else:
                db.delete(appointment)
                deleted_count = 1

            db.commit()
        except HTTPException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to delete appointment {appointment_id}: {e}")
            raise PersistenceError("Failed to delete appointment")

        logger.info(f"Deleted {deleted_count} appointment(s) starting at {appointment_id} ({delete_type.value})")
        return {"success": True, "deleted_count": deleted_count}

    @staticmethod
    def transition_status(
        db: Session,
        appointment_id: int,
        new_status: AppointmentStatus | str,
        acting_professional_id: int,
        effects: Optional[PostCommitEffects] = None,
    ) -> Dict[str, Any]:
        """
        Move an appointment to Scheduled, Completed or Cancelled.

        The appointment row stays exclusively locked until commit, so two
        concurrent completions cannot both bill the session. Completing a
        non-package session with a positive value records the commission and
        invoices the payer for the gross value, due in 15 days.

        Requesting the current status again is a no-op.

        Args:
            db: Database session
            appointment_id: Appointment ID
            new_status: Target status
            acting_professional_id: Professional performing the transition (must own the appointment)
            effects: Post-commit side-effect collector

        Returns:
            Dict with 'success', 'invoice_created' and 'billing_recorded'

        Raises:
            ValidationError: Target is not Scheduled, Completed or Cancelled
            NotFoundError: Unknown appointment
            ForbiddenError: Not the owner, or an illegal transition
            PersistenceError: Database failure (everything rolled back)
        """
        try:
            target = AppointmentStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status: {new_status}")
        if target not in TRANSITION_TARGETS:
            raise ValidationError(f"Invalid status: {target.value}")

        run_inline = effects is None
        effects = effects if effects is not None else PostCommitEffects()
        invoice: Optional[Invoice] = None
        billing_recorded = False

        try:
            appointment = lock_appointment(db, appointment_id)
            if not appointment:
                raise NotFoundError("Appointment not found")
            if appointment.professional_id != acting_professional_id:
                raise ForbiddenError("You do not have permission to modify this appointment")

            current = AppointmentStatus(appointment.status)
            if current is AppointmentStatus.AWAITING_PAYMENT and target is not AppointmentStatus.CANCELLED:
                raise ForbiddenError("Package sessions can only be cancelled before the invoice is paid")
            if current is target:
                logger.info(f"Appointment {appointment_id} already {target.value}, returning success")
                db.rollback()
                return {"success": True, "invoice_created": False, "billing_recorded": False}
            if current in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
                raise ForbiddenError(f"Appointment is already {current.value}")

            appointment.status = target.value

            professional = _get_professional_or_404(db, appointment.professional_id)
            patient = _get_patient_or_404(db, appointment.patient_id)

            gross = appointment.session_value
            if (
                target is AppointmentStatus.COMPLETED
                and appointment.package_invoice_id is None
                and gross is not None
                and gross > 0
            ):
                ranked: List[int] = []
                if professional.level == ProfessionalLevel.SCHOOL.value:
                    db.flush()
                    ranked = get_ranked_external_patient_ids(db, professional.id)
                rate = resolve_commission_rate(
                    professional.id, professional.level, patient.id,
                    patient.created_by_professional_id, ranked,
                )
                billing_recorded = BillingService.record_professional_billing(
                    db, professional.id, appointment.id, gross, rate, billing_date=appointment.appointment_time.date(),
                )
                if billing_recorded:
                    payer_user_id = BillingService.resolve_payer(db, patient)
                    if payer_user_id is not None:
                        invoice = BillingService.create_invoice(
                            db,
                            payer_user_id=payer_user_id,
                            creator_user_id=professional.user_id,
                            amount=gross,
                            due_date=due_date_in(SESSION_INVOICE_DUE_DAYS),
                            description=(
                                f"Session with {patient.full_name} on "
                                f"{format_date(appointment.appointment_time)}."
                            ),
                        )
                    else:
                        logger.warning(f"No payer found for appointment {appointment_id}, session not invoiced")

            AppointmentService._collect_transition_effects(
                db, effects, appointment, professional, patient, invoice
            )
            db.commit()
        except HTTPException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to change status of appointment {appointment_id}: {e}")
            raise PersistenceError("Failed to update appointment status")
        except Exception as e:
            db.rollback()
            logger.exception(f"Unexpected error changing status of appointment {appointment_id}: {e}")
            raise PersistenceError("Failed to update appointment status")

        logger.info(
            f"Appointment {appointment_id} moved from {current.value} to {target.value} "
            f"(billing_recorded={billing_recorded}, invoice={invoice.id if invoice else None})"
        )

        if run_inline:
            effects.run()

        return {"success": True, "invoice_created": invoice is not None, "billing_recorded": billing_recorded}

    @staticmethod
    def _collect_transition_effects(
        db: Session,
        effects: PostCommitEffects,
        appointment: Appointment,
        professional: Professional,
        patient: Patient,
        invoice: Optional[Invoice],
    ) -> None:
        if invoice is not None:
            payer = db.get(User, invoice.payer_user_id)
            effects.add(
                f"notify payer {invoice.payer_user_id} of session invoice {invoice.id}",
                NotificationService.notify,
                invoice.payer_user_id,
                NotificationType.NEW_INVOICE,
                f"New invoice from {professional.full_name} of {format_currency(invoice.amount)}.",
            )
            if payer is not None and payer.email:
                effects.add(
                    f"email invoice {invoice.id} to payer",
                    email_service.send_invoice_notice,
                    payer.email,
                    payer.full_name,
                    professional.full_name,
                    invoice.amount,
                    invoice.due_date,
                    invoice.id,
                )

        payload = {"appointment_id": appointment.id, "status": appointment.status}
        for user_id in filter(None, (patient.user_id, professional.user_id)):
            effects.add(
                f"push status change of appointment {appointment.id} to user {user_id}",
                realtime_hub.emit, user_id, APPOINTMENT_STATUS_CHANGED_EVENT, payload,
            )

        if patient.user_id:
            effects.add(
                f"notify patient user {patient.user_id} of status change",
                NotificationService.notify,
                patient.user_id,
                NotificationType.APPOINTMENT_STATUS_CHANGED,
                f"Your session on {format_datetime(appointment.appointment_time)} "
                f"with {professional.full_name} is now {appointment.status.replace('_', ' ')}.",
            )

    @staticmethod
    def get_series_details(db: Session, series_id: int) -> Dict[str, Any]:
        """
        Frequency of a series and its future Scheduled occurrences.

        An unknown series yields an empty result instead of an error.
        """
        series = db.get(AppointmentSeries, series_id)
        if not series:
            return {"series_id": series_id, "frequency": Frequency.NONE.value, "occurrences": []}
        occurrences = get_series_future_appointments(db, series_id)
        return {
            "series_id": series_id,
            "frequency": series.frequency,
            "occurrences": [
                {"id": a.id, "appointment_time": a.appointment_time} for a in occurrences
            ],
        }

    @staticmethod
    def get_professional_dashboard(db: Session, professional_id: int) -> Dict[str, Any]:
        """
        Summary shown on the professional's home screen.

        Returns:
            Dict with 'professional_name', 'pending_appointments' (past sessions
            awaiting review), 'upcoming_appointments', 'active_patients' and
            'net_revenue' for the current month
        """
        professional = _get_professional_or_404(db, professional_id)
        now = clinic_now()
        scheduled = get_professional_scheduled_appointments(db, professional_id)

        def summarize(appointment: Appointment) -> Dict[str, Any]:
            return {
                "id": appointment.id,
                "appointment_time": appointment.appointment_time,
                "patient_id": appointment.patient_id,
                "patient_name": appointment.patient.full_name if appointment.patient else None,
                "series_id": appointment.series_id,
            }

        today = clinic_today()
        return {
            "professional_name": professional.full_name,
            "pending_appointments": [summarize(a) for a in scheduled if a.is_pending_review],
            "upcoming_appointments": [summarize(a) for a in scheduled if a.appointment_time >= now],
            "active_patients": count_assigned_patients(db, professional_id),
            "net_revenue": BillingService.get_monthly_net_revenue(db, professional_id, today.month, today.year),
        }
