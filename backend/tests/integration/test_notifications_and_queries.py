"""
Integration tests for notifications, series details and the professional dashboard.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.orm import Session

from models import Notification, ProfessionalBilling
from services import AppointmentService, NotificationService
from services.notification_service import build_notification_path
from shared_types import AppointmentStatus, BillingStatus, Frequency, NotificationType
from utils.datetime_utils import clinic_now, clinic_today
from tests.factories import (
    create_admin,
    create_appointment,
    create_company,
    create_patient,
    create_professional,
    future_slot,
)


class TestNotificationService:
    def test_path_depends_on_role_and_type(self):
        assert build_notification_path("company", "new_invoice") == "/company/finance"
        assert build_notification_path("patient", "appointment_rescheduled") == "/patient/agenda"
        assert build_notification_path("admin", "something_else") == "/admin/dashboard"

    def test_notify_stores_and_pushes(self, db_session: Session):
        company = create_company(db_session)

        with patch("services.notification_service.realtime_hub.emit", return_value=True) as mock_emit:
            assert NotificationService.notify(company.user_id, NotificationType.NEW_INVOICE, "New invoice") is True

        notification = db_session.query(Notification).one()
        assert notification.related_url == "/company/finance"
        assert notification.is_read is False
        user_id, event, payload = mock_emit.call_args.args
        assert (user_id, event) == (company.user_id, "newNotification")
        assert payload["id"] == notification.id

    def test_explicit_path(self, db_session: Session):
        admin = create_admin(db_session)
        NotificationService.notify(admin.id, "new_invoice", "Custom", path="/admin/finance/42")
        assert db_session.query(Notification).one().related_url == "/admin/finance/42"

    def test_unknown_user_is_skipped(self, db_session: Session):
        assert NotificationService.notify(999, NotificationType.NEW_APPOINTMENT, "Hello") is False
        assert db_session.query(Notification).count() == 0


class TestSeriesDetails:
    def test_lists_future_scheduled_occurrences(self, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        result = AppointmentService.create_appointments(
            db_session, professional.id, patient.id, [future_slot(1)], creator_user_id=admin.id,
            frequency=Frequency.BIWEEKLY,
        )
        AppointmentService.transition_status(
            db_session, result["appointment_ids"][1], "cancelled", professional.id,
        )

        details = AppointmentService.get_series_details(db_session, result["series_id"])

        assert details["frequency"] == "biweekly"
        ids = [o["id"] for o in details["occurrences"]]
        assert result["appointment_ids"][1] not in ids
        assert len(ids) == result["created_count"] - 1

    def test_unknown_series_is_empty(self, db_session: Session):
        assert AppointmentService.get_series_details(db_session, 404) == {
            "series_id": 404, "frequency": "none", "occurrences": [],
        }


class TestProfessionalDashboard:
    def test_summary(self, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        AppointmentService.create_appointments(
            db_session, professional.id, patient.id, [future_slot(2)], creator_user_id=admin.id,
        )
        overdue = create_appointment(db_session, professional, patient, clinic_now() - timedelta(hours=30))
        recent = create_appointment(db_session, professional, patient, clinic_now() - timedelta(hours=2))
        done = create_appointment(
            db_session, professional, patient, clinic_now() - timedelta(hours=5),
            status=AppointmentStatus.COMPLETED.value,
        )
        db_session.add(ProfessionalBilling(
            professional_id=professional.id,
            appointment_id=done.id,
            billing_date=clinic_today(),
            gross_value=Decimal("200"),
            commission_value=Decimal("50"),
            status=BillingStatus.UNBILLED.value,
        ))
        db_session.commit()

        dashboard = AppointmentService.get_professional_dashboard(db_session, professional.id)

        assert dashboard["professional_name"] == "Dr. Ana"
        assert [a["id"] for a in dashboard["pending_appointments"]] == [overdue.id]
        assert recent.id not in [a["id"] for a in dashboard["upcoming_appointments"]]
        assert len(dashboard["upcoming_appointments"]) == 1
        assert dashboard["upcoming_appointments"][0]["patient_name"] == "Maria Silva"
        assert dashboard["active_patients"] == 1
        assert dashboard["net_revenue"] == Decimal("150.00")
