"""
API tests for the agenda, finance and health endpoints.
"""

from datetime import timedelta
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from models import Appointment, Invoice, ProfessionalBilling, User
from shared_types import AppointmentStatus, InvoiceStatus
from utils.datetime_utils import clinic_now
from tests.factories import (
    auth_headers,
    create_admin,
    create_appointment,
    create_patient,
    create_professional,
    future_slot,
)


def _pro_user(db: Session, professional) -> User:
    return db.get(User, professional.user_id)


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCreateEndpoint:
    def test_professional_creates_for_self(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)

        response = client.post(
            "/api/agenda/appointments",
            json={
                "patient_id": patient.id,
                "session_value": "150.00",
                "appointment_times": [future_slot(3).isoformat()],
            },
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["created_count"] == 1
        assert body["series_id"] is None
        appointment = db_session.get(Appointment, body["appointment_ids"][0])
        assert appointment.professional_id == professional.id
        assert appointment.session_value == Decimal("150.00")

    def test_requires_token(self, client: TestClient):
        response = client.post(
            "/api/agenda/appointments",
            json={"patient_id": 1, "appointment_times": [future_slot().isoformat()]},
        )
        assert response.status_code == 401

    def test_professional_cannot_book_for_colleague(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        colleague = create_professional(db_session, email="bia@test.com", full_name="Dr. Bia")
        patient = create_patient(db_session)

        response = client.post(
            "/api/agenda/appointments",
            json={
                "professional_id": colleague.id,
                "patient_id": patient.id,
                "appointment_times": [future_slot().isoformat()],
            },
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 403
        assert db_session.query(Appointment).count() == 0

    def test_admin_creates_weekly_series(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)

        response = client.post(
            "/api/agenda/appointments",
            json={
                "professional_id": professional.id,
                "patient_id": patient.id,
                "frequency": "weekly",
                "appointment_times": [future_slot(1).isoformat()],
            },
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["series_id"] is not None
        assert body["created_count"] >= 13

        series = client.get(f"/api/agenda/series/{body['series_id']}", headers=auth_headers(admin))
        assert series.status_code == 200
        assert series.json()["frequency"] == "weekly"
        assert len(series.json()["occurrences"]) == body["created_count"]

    def test_empty_times_rejected(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        response = client.post(
            "/api/agenda/appointments",
            json={"professional_id": 1, "patient_id": 1, "appointment_times": []},
            headers=auth_headers(admin),
        )
        assert response.status_code == 422


class TestUpdateAndDeleteEndpoints:
    def test_update_only_applies_sent_fields(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(db_session, professional, patient, future_slot(5))
        new_time = future_slot(6, hour=14)

        response = client.put(
            f"/api/agenda/appointments/{appointment.id}",
            json={"appointment_time": new_time.isoformat()},
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 200
        db_session.refresh(appointment)
        assert appointment.appointment_time == new_time
        assert appointment.session_value == Decimal("200.00")
        assert appointment.patient_id == patient.id

    def test_update_rejects_null_time(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(db_session, professional, patient, future_slot(5))

        response = client.put(
            f"/api/agenda/appointments/{appointment.id}",
            json={"appointment_time": None},
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 422

    def test_delete_future_occurrences(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        created = client.post(
            "/api/agenda/appointments",
            json={
                "professional_id": professional.id,
                "patient_id": patient.id,
                "frequency": "biweekly",
                "appointment_times": [future_slot(1).isoformat()],
            },
            headers=auth_headers(admin),
        ).json()
        third = created["appointment_ids"][2]

        response = client.delete(
            f"/api/agenda/appointments/{third}",
            params={"delete_type": "future"},
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 200
        assert response.json()["deleted_count"] == created["created_count"] - 2
        assert db_session.query(Appointment).count() == 2

    def test_delete_missing_appointment(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        response = client.delete("/api/agenda/appointments/999", headers=auth_headers(admin))
        assert response.status_code == 404


class TestStatusEndpoint:
    def test_complete_bills_session(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(db_session, professional, patient, clinic_now() - timedelta(hours=1))

        response = client.patch(
            f"/api/agenda/appointments/{appointment.id}/status",
            json={"status": "completed"},
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "invoice_created": True, "billing_recorded": True}
        assert db_session.query(ProfessionalBilling).count() == 1
        assert db_session.query(Invoice).one().payer_user_id == patient.user_id

    def test_admin_cannot_change_status(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(db_session, professional, patient, future_slot())

        response = client.patch(
            f"/api/agenda/appointments/{appointment.id}/status",
            json={"status": "cancelled"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 403


class TestDashboardEndpoint:
    def test_dashboard(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        overdue = create_appointment(db_session, professional, patient, clinic_now() - timedelta(hours=30))
        upcoming = create_appointment(db_session, professional, patient, future_slot(2))

        response = client.get(
            "/api/agenda/professional/dashboard",
            headers=auth_headers(_pro_user(db_session, professional)),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["professional_name"] == "Dr. Ana"
        assert [a["id"] for a in body["pending_appointments"]] == [overdue.id]
        assert [a["id"] for a in body["upcoming_appointments"]] == [upcoming.id]
        assert Decimal(str(body["net_revenue"])) == Decimal("0")

    def test_dashboard_requires_professional(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        response = client.get("/api/agenda/professional/dashboard", headers=auth_headers(admin))
        assert response.status_code == 403


class TestFinanceEndpoints:
    def test_confirm_package_payment(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        created = client.post(
            "/api/agenda/appointments",
            json={
                "professional_id": professional.id,
                "patient_id": patient.id,
                "is_package": True,
                "total_value": "300.00",
                "appointment_times": [future_slot(2).isoformat(), future_slot(9).isoformat()],
            },
            headers=auth_headers(admin),
        ).json()

        response = client.post(
            f"/api/finance/invoices/{created['package_invoice_id']}/confirm-payment",
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "already_paid": False, "released_count": 2}
        db_session.expire_all()
        assert db_session.get(Invoice, created["package_invoice_id"]).status == InvoiceStatus.PAID.value
        statuses = {a.status for a in db_session.query(Appointment).all()}
        assert statuses == {AppointmentStatus.SCHEDULED.value}

    def test_finance_is_admin_only(self, client: TestClient, db_session: Session):
        professional = create_professional(db_session)
        response = client.post(
            "/api/finance/commissions/generate",
            json={"month": 3, "year": 2026},
            headers=auth_headers(_pro_user(db_session, professional)),
        )
        assert response.status_code == 403

    def test_generate_commissions(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)

        response = client.post(
            "/api/finance/commissions/generate",
            json={"month": 3, "year": 2026},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json() == {"invoices_created": 0, "invoice_ids": []}

    def test_generate_commissions_rejects_bad_month(self, client: TestClient, db_session: Session):
        admin = create_admin(db_session)
        response = client.post(
            "/api/finance/commissions/generate",
            json={"month": 0, "year": 2026},
            headers=auth_headers(admin),
        )
        assert response.status_code == 422
