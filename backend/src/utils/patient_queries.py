"""
Utility functions for patient queries used by billing.

Payer resolution and the external-patient ranking both read patient linkage
without locking; the commission resolver receives the ranking precomputed.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models import Appointment, Company, Patient, ProfessionalAssignment

logger = logging.getLogger(__name__)


def resolve_payer_user_id(db: Session, patient: Patient) -> Optional[int]:
    """
    Identify the user account that pays for a patient's sessions.

    The patient's company pays when the patient is linked to one; otherwise
    the patient pays for themselves.

    Returns:
        Payer user ID, or None if neither the company nor the patient has an account
    """
    if patient.company_id is not None:
        company = db.get(Company, patient.company_id)
        if company is not None and company.user_id is not None:
            return company.user_id
        logger.warning(f"Patient {patient.id} linked to company {patient.company_id} without a user account")
    return patient.user_id


def get_ranked_external_patient_ids(db: Session, professional_id: int) -> List[int]:
    """
    List the professional's external patients in arrival order.

    A patient is linked to the professional by an explicit assignment or by any
    appointment (whatever its status). External means the patient was not
    registered by this professional. Ordering is by patient creation time, then ID.

    Args:
        db: Database session
        professional_id: Professional ID

    Returns:
        Patient IDs, oldest first
    """
    assigned = select(ProfessionalAssignment.patient_id).where(
        ProfessionalAssignment.professional_id == professional_id
    )
    seen = select(Appointment.patient_id).where(
        Appointment.professional_id == professional_id
    )
    rows = db.query(Patient.id).filter(
        or_(Patient.id.in_(assigned), Patient.id.in_(seen)),
        or_(
            Patient.created_by_professional_id.is_(None),
            Patient.created_by_professional_id != professional_id,
        ),
    ).order_by(Patient.created_at, Patient.id).all()
    return [row[0] for row in rows]


def ensure_professional_assignment(db: Session, professional_id: int, patient_id: int) -> bool:
    """
    Record the professional-patient assignment if it does not exist yet.

    Returns:
        True if a new assignment was added to the session
    """
    existing = db.query(ProfessionalAssignment).filter(
        ProfessionalAssignment.professional_id == professional_id,
        ProfessionalAssignment.patient_id == patient_id,
    ).first()
    if existing:
        return False
    db.add(ProfessionalAssignment(professional_id=professional_id, patient_id=patient_id))
    return True


def count_assigned_patients(db: Session, professional_id: int) -> int:
    """Number of patients explicitly assigned to the professional."""
    return db.query(ProfessionalAssignment).filter(
        ProfessionalAssignment.professional_id == professional_id
    ).count()
