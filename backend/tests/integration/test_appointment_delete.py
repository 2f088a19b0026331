"""
Integration tests for appointment deletion.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from models import Appointment, AppointmentSeries
from services import AppointmentService
from shared_types import AppointmentStatus, DeleteType, Frequency
from tests.factories import (
    create_admin,
    create_appointment,
    create_patient,
    create_professional,
    future_slot,
)


def _create_weekly_series(db: Session):
    admin = create_admin(db)
    professional = create_professional(db)
    patient = create_patient(db)
    start = future_slot(2)
    result = AppointmentService.create_appointments(
        db, professional.id, patient.id, [start], creator_user_id=admin.id,
        frequency=Frequency.WEEKLY, session_value=Decimal("200"),
    )
    return professional, start, result


class TestDeleteSingle:
    def test_removes_only_target(self, db_session: Session):
        professional, start, result = _create_weekly_series(db_session)
        second_id = result["appointment_ids"][1]

        outcome = AppointmentService.delete_appointment(db_session, second_id)

        assert outcome == {"success": True, "deleted_count": 1}
        assert db_session.query(Appointment).count() == result["created_count"] - 1


class TestDeleteFuture:
    def test_removes_target_and_later_occurrences(self, db_session: Session):
        professional, start, result = _create_weekly_series(db_session)
        third = db_session.query(Appointment).filter(
            Appointment.appointment_time == start + timedelta(days=14)
        ).one()

        outcome = AppointmentService.delete_appointment(db_session, third.id, delete_type=DeleteType.FUTURE)

        assert outcome["deleted_count"] == result["created_count"] - 2
        remaining = [a.appointment_time for a in db_session.query(Appointment).order_by(Appointment.appointment_time)]
        assert remaining == [start, start + timedelta(days=7)]
        # The series row itself is kept
        assert db_session.get(AppointmentSeries, result["series_id"]) is not None

    def test_completed_occurrences_are_kept(self, db_session: Session):
        professional, start, result = _create_weekly_series(db_session)
        completed = db_session.query(Appointment).filter(
            Appointment.appointment_time == start + timedelta(days=28)
        ).one()
        completed.status = AppointmentStatus.COMPLETED.value
        db_session.commit()

        outcome = AppointmentService.delete_appointment(
            db_session, result["appointment_ids"][0], delete_type=DeleteType.FUTURE,
        )

        assert outcome["deleted_count"] == result["created_count"] - 1
        assert [a.id for a in db_session.query(Appointment).all()] == [completed.id]

    def test_requires_a_series(self, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(db_session, professional, patient, future_slot())

        with pytest.raises(ValidationError):
            AppointmentService.delete_appointment(db_session, appointment.id, delete_type=DeleteType.FUTURE)
        assert db_session.query(Appointment).count() == 1


class TestDeleteGuards:
    def test_unknown_appointment(self, db_session: Session):
        with pytest.raises(NotFoundError):
            AppointmentService.delete_appointment(db_session, 999)

    def test_completed_appointment_cannot_be_deleted(self, db_session: Session):
        professional = create_professional(db_session)
        patient = create_patient(db_session)
        appointment = create_appointment(
            db_session, professional, patient, future_slot(), status=AppointmentStatus.COMPLETED.value,
        )

        with pytest.raises(ForbiddenError):
            AppointmentService.delete_appointment(db_session, appointment.id)

    def test_professional_cannot_delete_colleague_appointment(self, db_session: Session):
        professional = create_professional(db_session)
        colleague = create_professional(db_session, email="bia@test.com", full_name="Dr. Bia")
        patient = create_patient(db_session)
        appointment = create_appointment(db_session, colleague, patient, future_slot())

        with pytest.raises(ForbiddenError):
            AppointmentService.delete_appointment(
                db_session, appointment.id, acting_professional_id=professional.id,
            )
