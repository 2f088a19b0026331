"""
Integration tests for package payment confirmation and monthly commissions.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from models import Appointment, Invoice, Notification, ProfessionalBilling
from services import AppointmentService, BillingService
from shared_types import AppointmentStatus, BillingStatus, InvoiceStatus, ProfessionalLevel
from tests.factories import (
    create_admin,
    create_appointment,
    create_patient,
    create_professional,
    future_slot,
)


def _billing(db: Session, professional, appointment, gross: str, commission: str, billing_date: date):
    row = ProfessionalBilling(
        professional_id=professional.id,
        appointment_id=appointment.id,
        billing_date=billing_date,
        gross_value=Decimal(gross),
        commission_value=Decimal(commission),
        status=BillingStatus.UNBILLED.value,
    )
    db.add(row)
    db.commit()
    return row


class TestConfirmPackagePayment:
    def _package(self, db: Session):
        admin = create_admin(db)
        professional = create_professional(db)
        patient = create_patient(db)
        result = AppointmentService.create_appointments(
            db, professional.id, patient.id, [future_slot(3), future_slot(10)], creator_user_id=admin.id,
            is_package=True, total_value=Decimal("400"),
        )
        return professional, patient, result

    def test_releases_sessions_and_marks_paid(self, db_session: Session):
        professional, patient, created = self._package(db_session)

        result = BillingService.confirm_package_payment(db_session, created["package_invoice_id"])

        assert result == {"success": True, "already_paid": False, "released_count": 2}
        invoice = db_session.get(Invoice, created["package_invoice_id"])
        assert invoice.status == InvoiceStatus.PAID.value
        assert invoice.paid_at is not None
        statuses = {a.status for a in db_session.query(Appointment).all()}
        assert statuses == {AppointmentStatus.SCHEDULED.value}
        assert db_session.query(Notification).filter_by(type="payment_received").count() == 2

    def test_cancelled_package_sessions_stay_cancelled(self, db_session: Session):
        professional, patient, created = self._package(db_session)
        AppointmentService.transition_status(
            db_session, created["appointment_ids"][0], "cancelled", professional.id,
        )

        result = BillingService.confirm_package_payment(db_session, created["package_invoice_id"])

        assert result["released_count"] == 1
        db_session.expire_all()
        assert db_session.get(Appointment, created["appointment_ids"][0]).status == "cancelled"

    def test_second_confirmation_is_a_no_op(self, db_session: Session):
        professional, patient, created = self._package(db_session)
        BillingService.confirm_package_payment(db_session, created["package_invoice_id"])

        result = BillingService.confirm_package_payment(db_session, created["package_invoice_id"])

        assert result == {"success": True, "already_paid": True, "released_count": 0}

    def test_unknown_invoice(self, db_session: Session):
        with pytest.raises(NotFoundError):
            BillingService.confirm_package_payment(db_session, 999)

    def test_cancelled_invoice_cannot_be_confirmed(self, db_session: Session):
        professional, patient, created = self._package(db_session)
        invoice = db_session.get(Invoice, created["package_invoice_id"])
        invoice.status = InvoiceStatus.CANCELLED.value
        db_session.commit()

        with pytest.raises(ValidationError):
            BillingService.confirm_package_payment(db_session, invoice.id)


class TestMonthlyCommissions:
    def test_one_invoice_per_professional_with_commission(self, db_session: Session):
        admin = create_admin(db_session)
        ana = create_professional(db_session)
        bia = create_professional(db_session, email="bia@test.com", full_name="Dr. Bia")
        licensed = create_professional(
            db_session, email="caio@test.com", full_name="Dr. Caio", level=ProfessionalLevel.LICENSED.value,
        )
        patient = create_patient(db_session)
        session_time = datetime(2026, 3, 10, 10, 0)

        def completed(professional):
            return create_appointment(
                db_session, professional, patient, session_time, status=AppointmentStatus.COMPLETED.value,
            )

        _billing(db_session, ana, completed(ana), "200", "50", date(2026, 3, 10))
        _billing(db_session, ana, completed(ana), "100", "25", date(2026, 3, 31))
        _billing(db_session, bia, completed(bia), "200", "50", date(2026, 3, 1))
        _billing(db_session, licensed, completed(licensed), "200", "0", date(2026, 3, 15))
        outside = _billing(db_session, bia, completed(bia), "200", "50", date(2026, 4, 1))

        result = BillingService.generate_monthly_commission_invoices(db_session, 3, 2026, creator_user_id=admin.id)

        assert result["invoices_created"] == 2
        invoices = {i.payer_user_id: i for i in db_session.query(Invoice).all()}
        assert set(invoices) == {ana.user_id, bia.user_id}
        assert invoices[ana.user_id].amount == Decimal("75.00")
        assert invoices[bia.user_id].amount == Decimal("50.00")
        assert invoices[ana.user_id].due_date == date(2026, 4, 10)
        assert invoices[ana.user_id].creator_user_id == admin.id
        assert invoices[ana.user_id].description == "Commission for sessions of 03/2026."

        statuses = {
            row.id: row.status for row in db_session.query(ProfessionalBilling).all()
        }
        assert statuses.pop(outside.id) == BillingStatus.UNBILLED.value
        assert set(statuses.values()) == {BillingStatus.BILLED.value}
        assert db_session.query(Notification).filter_by(type="new_invoice").count() == 2

    def test_rerun_bills_nothing_twice(self, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(
            db_session, professional, patient, datetime(2026, 5, 2, 9, 0), status=AppointmentStatus.COMPLETED.value,
        )
        _billing(db_session, professional, appointment, "200", "50", date(2026, 5, 2))

        BillingService.generate_monthly_commission_invoices(db_session, 5, 2026, creator_user_id=admin.id)
        second = BillingService.generate_monthly_commission_invoices(db_session, 5, 2026, creator_user_id=admin.id)

        assert second == {"invoices_created": 0, "invoice_ids": []}
        assert db_session.query(Invoice).count() == 1

    def test_december_is_due_in_january(self, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(
            db_session, professional, patient, datetime(2026, 12, 20, 9, 0), status=AppointmentStatus.COMPLETED.value,
        )
        _billing(db_session, professional, appointment, "80", "20", date(2026, 12, 20))

        BillingService.generate_monthly_commission_invoices(db_session, 12, 2026, creator_user_id=admin.id)

        assert db_session.query(Invoice).one().due_date == date(2027, 1, 10)

    def test_invalid_month(self, db_session: Session):
        with pytest.raises(ValidationError):
            BillingService.generate_monthly_commission_invoices(db_session, 13, 2026, creator_user_id=1)


class TestNetRevenue:
    def test_gross_minus_commission_within_month(self, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)

        def billed(day: date, gross: str, commission: str):
            appointment = create_appointment(
                db_session, professional, patient, datetime(day.year, day.month, day.day, 9, 0),
                status=AppointmentStatus.COMPLETED.value,
            )
            _billing(db_session, professional, appointment, gross, commission, day)

        billed(date(2026, 6, 1), "200", "50")
        billed(date(2026, 6, 30), "100", "25")
        billed(date(2026, 7, 1), "999", "0")

        assert BillingService.get_monthly_net_revenue(db_session, professional.id, 6, 2026) == Decimal("225.00")
        assert BillingService.get_monthly_net_revenue(db_session, professional.id, 8, 2026) == Decimal("0.00")
