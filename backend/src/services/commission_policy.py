"""
Commission policy resolver.

Pure function over a professional's tier, the patient's origin and the
professional's precomputed external-patient ranking. Storage access lives in
utils.patient_queries.get_ranked_external_patient_ids.
"""

from decimal import Decimal
from typing import Optional, Sequence

from core.constants import (
    SCHOOL_FREE_EXTERNAL_PATIENTS,
    STANDARD_COMMISSION_RATE,
    ZERO_COMMISSION_RATE,
)
from shared_types import ProfessionalLevel


def resolve_commission_rate(
    professional_id: int,
    level: str,
    patient_id: int,
    patient_created_by_professional_id: Optional[int],
    ranked_external_patient_ids: Sequence[int],
) -> Decimal:
    """
    Resolve the platform's commission rate for one session.

    Rules:
    - standard: flat standard rate
    - licensed: zero (fixed-fee arrangement handled elsewhere)
    - school: zero for the professional's own patients and for the first
      external patients in arrival order; standard rate afterwards

    Args:
        professional_id: Professional running the session
        level: Professional tier ('standard', 'licensed', 'school')
        patient_id: Patient attending the session
        patient_created_by_professional_id: Professional who registered the patient, if any
        ranked_external_patient_ids: The professional's external patients, oldest first

    Returns:
        Rate in [0, 1]

    Raises:
        ValueError: If the level is unknown
    """
    tier = ProfessionalLevel(level)

    if tier is ProfessionalLevel.STANDARD:
        return STANDARD_COMMISSION_RATE
    if tier is ProfessionalLevel.LICENSED:
        return ZERO_COMMISSION_RATE

    if patient_created_by_professional_id == professional_id:
        return ZERO_COMMISSION_RATE

    ranked = list(ranked_external_patient_ids)
    # A patient missing from the ranking is treated as the newest arrival
    rank = ranked.index(patient_id) if patient_id in ranked else len(ranked)
    if rank < SCHOOL_FREE_EXTERNAL_PATIENTS:
        return ZERO_COMMISSION_RATE
    return STANDARD_COMMISSION_RATE
