"""
Invoice and billing ledger service.

Creates payer invoices and per-session commission records inside the
caller's transaction, and owns the two finance use cases that run in their
own transaction: package payment confirmation and the monthly commission
statement.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import COMMISSION_INVOICE_DUE_DAY
from core.exceptions import NotFoundError, PersistenceError, ValidationError
from models import Appointment, Invoice, Patient, Professional, ProfessionalBilling
from services.notification_service import NotificationService
from services.side_effects import PostCommitEffects
from shared_types import AppointmentStatus, BillingStatus, InvoiceStatus, NotificationType
from utils.datetime_utils import (
    add_months,
    clinic_now,
    clinic_today,
    format_currency,
    month_bounds,
)
from utils.patient_queries import resolve_payer_user_id

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value: Decimal | float | int | str) -> Decimal:
    """Quantize a monetary amount to cents."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


class BillingService:
    """
    Service class for invoices and the professional commission ledger.

    Methods that only add rows (create_invoice, record_professional_billing)
    flush but never commit: they run inside a scheduling use case's transaction.
    """

    @staticmethod
    def create_invoice(
        db: Session,
        payer_user_id: int,
        creator_user_id: int,
        amount: Decimal,
        due_date: date,
        description: Optional[str] = None,
    ) -> Invoice:
        """
        Add a pending invoice to the current transaction.

        Returns:
            The flushed Invoice (id assigned)
        """
        invoice = Invoice(
            payer_user_id=payer_user_id,
            creator_user_id=creator_user_id,
            amount=to_money(amount),
            due_date=due_date,
            description=description,
            status=InvoiceStatus.PENDING.value,
        )
        db.add(invoice)
        db.flush()
        return invoice

    @staticmethod
    def resolve_payer(db: Session, patient: Patient) -> Optional[int]:
        """Payer user for a patient: the linked company, else the patient."""
        return resolve_payer_user_id(db, patient)

    @staticmethod
    def record_professional_billing(
        db: Session,
        professional_id: int,
        appointment_id: int,
        gross_value: Decimal,
        commission_rate: Decimal,
        billing_date: Optional[date] = None,
    ) -> bool:
        """
        Record the commission owed for a completed session.

        The insert is a no-op when the appointment already has a ledger row.

        Returns:
            True if a row was inserted, False if one already existed
        """
        gross = to_money(gross_value)
        values = {
            "professional_id": professional_id,
            "appointment_id": appointment_id,
            "billing_date": billing_date or clinic_today(),
            "gross_value": gross,
            "commission_value": to_money(gross * commission_rate),
            "status": BillingStatus.UNBILLED.value,
            "created_at": clinic_now(),
        }

        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        else:
            dialect_insert = None

        if dialect_insert is not None:
            stmt = dialect_insert(ProfessionalBilling).values(**values).on_conflict_do_nothing(
                index_elements=["appointment_id"]
            )
            result = db.execute(stmt)
            inserted = result.rowcount == 1
        else:
            # Other backends: rely on the unique constraint inside a savepoint
            try:
                with db.begin_nested():
                    db.execute(insert(ProfessionalBilling).values(**values))
                inserted = True
            except IntegrityError:
                inserted = False

        if inserted:
            logger.info(
                f"Recorded billing for appointment {appointment_id}: "
                f"gross={values['gross_value']} commission={values['commission_value']}"
            )
        else:
            logger.info(f"Billing for appointment {appointment_id} already recorded, skipping")
        return inserted

    @staticmethod
    def confirm_package_payment(
        db: Session,
        invoice_id: int,
        effects: Optional[PostCommitEffects] = None,
    ) -> Dict[str, Any]:
        """
        Mark a package invoice as paid and release its sessions.

        Every AwaitingPayment appointment linked to the invoice moves to
        Scheduled. Confirming an already-paid invoice is a no-op.

        Args:
            db: Database session
            invoice_id: Package invoice ID
            effects: Collector for post-commit notifications. When omitted they run inline after commit.

        Returns:
            Dict with 'success', 'already_paid' and 'released_count'

        Raises:
            NotFoundError: If the invoice does not exist
            ValidationError: If the invoice is neither pending nor paid
        """
        run_inline = effects is None
        effects = effects if effects is not None else PostCommitEffects()

        invoice = db.query(Invoice).filter(Invoice.id == invoice_id).with_for_update().first()
        if not invoice:
            raise NotFoundError("Invoice not found")

        if invoice.status == InvoiceStatus.PAID.value:
            logger.info(f"Invoice {invoice_id} already paid, returning success")
            return {"success": True, "already_paid": True, "released_count": 0}
        if invoice.status != InvoiceStatus.PENDING.value:
            raise ValidationError(f"Invoice with status '{invoice.status}' cannot be confirmed")

        try:
            invoice.status = InvoiceStatus.PAID.value
            invoice.paid_at = clinic_now()

            appointments = db.query(Appointment).filter(
                Appointment.package_invoice_id == invoice_id,
                Appointment.status == AppointmentStatus.AWAITING_PAYMENT.value,
            ).order_by(Appointment.appointment_time).all()
            for appointment in appointments:
                appointment.status = AppointmentStatus.SCHEDULED.value

            recipients: Dict[int, str] = {}
            if appointments:
                first = appointments[0]
                professional = db.get(Professional, first.professional_id)
                patient = db.get(Patient, first.patient_id)
                if patient and patient.user_id:
                    recipients[patient.user_id] = (
                        f"Payment confirmed: {len(appointments)} session(s) with "
                        f"{professional.full_name if professional else 'your professional'} are now scheduled."
                    )
                if professional:
                    recipients[professional.user_id] = (
                        f"Package paid for {patient.full_name if patient else 'your patient'}: "
                        f"{len(appointments)} session(s) confirmed."
                    )

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to confirm payment of invoice {invoice_id}: {e}")
            raise PersistenceError("Failed to confirm invoice payment")

        logger.info(f"Invoice {invoice_id} paid, released {len(appointments)} package appointment(s)")

        for user_id, message in recipients.items():
            effects.add(
                f"notify user {user_id} of package payment",
                NotificationService.notify, user_id, NotificationType.PAYMENT_RECEIVED, message,
            )
        if run_inline:
            effects.run()

        return {"success": True, "already_paid": False, "released_count": len(appointments)}

    @staticmethod
    def generate_monthly_commission_invoices(
        db: Session,
        month: int,
        year: int,
        creator_user_id: int,
        effects: Optional[PostCommitEffects] = None,
    ) -> Dict[str, Any]:
        """
        Bill every professional for the commissions of one month.

        One invoice per professional with unbilled ledger rows in the month,
        addressed to the professional's user and due on the 10th of the
        following month. Zero totals are skipped but their rows are still
        marked billed.

        Returns:
            Dict with 'invoices_created' and 'invoice_ids'

        Raises:
            ValidationError: If the month is invalid
        """
        run_inline = effects is None
        effects = effects if effects is not None else PostCommitEffects()

        try:
            start, end = month_bounds(year, month)
        except ValueError as e:
            raise ValidationError(str(e))
        due_date = add_months(start, 1).date().replace(day=COMMISSION_INVOICE_DUE_DAY)

        try:
            rows = db.query(ProfessionalBilling).filter(
                ProfessionalBilling.status == BillingStatus.UNBILLED.value,
                ProfessionalBilling.billing_date >= start.date(),
                ProfessionalBilling.billing_date < end.date(),
            ).with_for_update().all()

            by_professional: Dict[int, List[ProfessionalBilling]] = defaultdict(list)
            for row in rows:
                by_professional[row.professional_id].append(row)

            created: List[Tuple[int, Invoice]] = []
            for professional_id, billings in sorted(by_professional.items()):
                total = to_money(sum((b.commission_value for b in billings), Decimal("0")))
                for billing in billings:
                    billing.status = BillingStatus.BILLED.value
                if total <= 0:
                    continue
                professional = db.get(Professional, professional_id)
                if professional is None:
                    logger.warning(f"Skipping commission invoice for missing professional {professional_id}")
                    continue
                invoice = BillingService.create_invoice(
                    db,
                    payer_user_id=professional.user_id,
                    creator_user_id=creator_user_id,
                    amount=total,
                    due_date=due_date,
                    description=f"Commission for sessions of {month:02d}/{year}.",
                )
                created.append((professional.user_id, invoice))

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to generate commission invoices for {month:02d}/{year}: {e}")
            raise PersistenceError("Failed to generate commission invoices")

        logger.info(f"Generated {len(created)} commission invoice(s) for {month:02d}/{year}")

        for user_id, invoice in created:
            effects.add(
                f"notify professional user {user_id} of commission invoice {invoice.id}",
                NotificationService.notify,
                user_id,
                NotificationType.NEW_INVOICE,
                f"New commission invoice for {month:02d}/{year}: {format_currency(invoice.amount)}.",
            )
        if run_inline:
            effects.run()

        return {"invoices_created": len(created), "invoice_ids": [invoice.id for _, invoice in created]}

    @staticmethod
    def get_monthly_net_revenue(db: Session, professional_id: int, month: int, year: int) -> Decimal:
        """
        Professional's net revenue for a month: sum of gross minus commission.
        """
        start, end = month_bounds(year, month)
        net = db.query(
            func.coalesce(func.sum(ProfessionalBilling.gross_value - ProfessionalBilling.commission_value), 0)
        ).filter(
            ProfessionalBilling.professional_id == professional_id,
            ProfessionalBilling.billing_date >= start.date(),
            ProfessionalBilling.billing_date < end.date(),
        ).scalar()
        return to_money(net or 0)
