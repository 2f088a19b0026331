# pyright: reportMissingTypeStubs=false
"""
Agenda API endpoints.

Routers stay thin: they validate the payload, resolve the acting user and
call AppointmentService. Post-commit side effects are handed to
BackgroundTasks so they run after the response is sent.

Write endpoints are plain `def` so the blocking row locks taken by the
service run in the threadpool.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from auth.dependencies import (
    UserContext,
    require_professional,
    require_professional_or_admin,
)
from core.constants import MAX_DESCRIPTION_LENGTH
from core.database import get_db
from core.exceptions import ForbiddenError
from core.sentinels import MISSING
from services import AppointmentService, PostCommitEffects
from shared_types import DeleteType, Frequency
from utils.datetime_utils import datetime_validator
from api.responses import (
    AppointmentCreateResponse,
    AppointmentDeleteResponse,
    AppointmentUpdateResponse,
    ProfessionalDashboardResponse,
    SeriesDetailsResponse,
    StatusTransitionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request Models =====

class AppointmentCreateRequest(BaseModel):
    """Request model for creating appointments, recurring series or packages."""
    professional_id: Optional[int] = None  # Defaults to the acting professional
    patient_id: int
    company_id: Optional[int] = None
    session_value: Optional[Decimal] = Field(default=None, ge=0)
    frequency: Frequency = Frequency.NONE
    appointment_times: List[datetime] = Field(min_length=1)
    is_package: bool = False
    discount_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    total_value: Optional[Decimal] = Field(default=None, ge=0)

    @model_validator(mode='before')
    @classmethod
    def parse_datetime_fields(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        """Parse datetime strings before validation, converting to clinic time."""
        return datetime_validator('appointment_times')(cls, values)


class AppointmentUpdateRequest(BaseModel):
    """
    Request model for editing an appointment.

    Only fields present in the payload are applied. `company_id: null` unlinks
    the patient's company; `frequency` converts or re-intervals the series.
    """
    professional_id: Optional[int] = None
    patient_id: Optional[int] = None
    company_id: Optional[int] = None
    appointment_time: Optional[datetime] = None
    session_value: Optional[Decimal] = Field(default=None, ge=0)
    frequency: Optional[Frequency] = None

    @field_validator('professional_id', 'patient_id', 'appointment_time')
    @classmethod
    def reject_explicit_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError('Field cannot be null')
        return v

    @model_validator(mode='before')
    @classmethod
    def parse_datetime_fields(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        """Parse datetime strings before validation, converting to clinic time."""
        return datetime_validator('appointment_time')(cls, values)

    def supplied(self, field_name: str) -> Any:
        """Value of a field if it was sent, MISSING otherwise."""
        return getattr(self, field_name) if field_name in self.model_fields_set else MISSING


class StatusUpdateRequest(BaseModel):
    """Request model for status transitions."""
    status: str = Field(max_length=MAX_DESCRIPTION_LENGTH)


# ===== Endpoints =====

@router.post(
    "/appointments",
    summary="Create appointments",
    status_code=status.HTTP_201_CREATED,
    response_model=AppointmentCreateResponse,
)
def create_appointments(
    request: AppointmentCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(require_professional_or_admin),
    db: Session = Depends(get_db),
):
    """
    Create a single appointment, a recurring series or a pre-paid package.

    Admins create for any professional; professionals only for themselves.
    """
    professional_id = request.professional_id
    if current_user.is_professional():
        professional_id = professional_id or current_user.professional_id

    effects = PostCommitEffects()
    result = AppointmentService.create_appointments(
        db,
        professional_id=professional_id,
        patient_id=request.patient_id,
        appointment_times=request.appointment_times,
        creator_user_id=current_user.user_id,
        frequency=request.frequency,
        company_id=request.company_id,
        session_value=request.session_value,
        is_package=request.is_package,
        discount_percentage=request.discount_percentage,
        total_value=request.total_value,
        acting_professional_id=current_user.acting_professional_id,
        effects=effects,
    )
    background_tasks.add_task(effects.run)
    return result


@router.put(
    "/appointments/{appointment_id}",
    summary="Edit appointment",
    response_model=AppointmentUpdateResponse,
)
def update_appointment(
    appointment_id: int,
    request: AppointmentUpdateRequest,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(require_professional_or_admin),
    db: Session = Depends(get_db),
):
    """
    Edit an appointment's professional, patient, time or value, and its recurrence.

    Admin can edit any appointment.
    Professionals can only edit their own appointments.
    """
    effects = PostCommitEffects()
    result = AppointmentService.update_appointment(
        db,
        appointment_id,
        professional_id=request.supplied('professional_id'),
        patient_id=request.supplied('patient_id'),
        company_id=request.supplied('company_id'),
        appointment_time=request.supplied('appointment_time'),
        session_value=request.supplied('session_value'),
        frequency=request.frequency,
        acting_professional_id=current_user.acting_professional_id,
        effects=effects,
    )
    background_tasks.add_task(effects.run)
    return result


@router.delete(
    "/appointments/{appointment_id}",
    summary="Delete appointment",
    response_model=AppointmentDeleteResponse,
)
def delete_appointment(
    appointment_id: int,
    delete_type: DeleteType = Query(DeleteType.SINGLE),
    current_user: UserContext = Depends(require_professional_or_admin),
    db: Session = Depends(get_db),
):
    """Delete one appointment, or it and every later occurrence of its series."""
    return AppointmentService.delete_appointment(
        db,
        appointment_id,
        delete_type=delete_type,
        acting_professional_id=current_user.acting_professional_id,
    )


@router.patch(
    "/appointments/{appointment_id}/status",
    summary="Change appointment status",
    response_model=StatusTransitionResponse,
)
def update_appointment_status(
    appointment_id: int,
    request: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(require_professional),
    db: Session = Depends(get_db),
):
    """
    Complete, cancel or reschedule-back an appointment owned by the professional.

    Completing a non-package session bills the commission and invoices the payer.
    """
    if current_user.professional_id is None:
        raise ForbiddenError("Professional profile not found")

    effects = PostCommitEffects()
    result = AppointmentService.transition_status(
        db,
        appointment_id,
        request.status,
        acting_professional_id=current_user.professional_id,
        effects=effects,
    )
    background_tasks.add_task(effects.run)
    return result


@router.get(
    "/series/{series_id}",
    summary="Get series details",
    response_model=SeriesDetailsResponse,
)
def get_series_details(
    series_id: int,
    current_user: UserContext = Depends(require_professional_or_admin),
    db: Session = Depends(get_db),
):
    """Frequency and upcoming Scheduled occurrences of a series."""
    return AppointmentService.get_series_details(db, series_id)


@router.get(
    "/professional/dashboard",
    summary="Get professional dashboard",
    response_model=ProfessionalDashboardResponse,
)
def get_professional_dashboard(
    current_user: UserContext = Depends(require_professional),
    db: Session = Depends(get_db),
):
    """Pending reviews, upcoming sessions, active patients and this month's net revenue."""
    if current_user.professional_id is None:
        raise ForbiddenError("Professional profile not found")
    return AppointmentService.get_professional_dashboard(db, current_user.professional_id)


