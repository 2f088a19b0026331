# pyright: reportMissingTypeStubs=false
"""
Finance API endpoints (admin only).

Package payment confirmation and the monthly commission run.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.dependencies import UserContext, require_admin
from core.database import get_db
from services import BillingService, PostCommitEffects
from api.responses import CommissionGenerationResponse, PackagePaymentResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class CommissionGenerationRequest(BaseModel):
    """Billing period for the commission run."""
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=9999)


@router.post(
    "/invoices/{invoice_id}/confirm-payment",
    summary="Confirm package payment",
    response_model=PackagePaymentResponse,
)
def confirm_package_payment(
    invoice_id: int,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Mark a package invoice as paid and release its sessions to the agenda."""
    effects = PostCommitEffects()
    result = BillingService.confirm_package_payment(db, invoice_id, effects=effects)
    background_tasks.add_task(effects.run)
    return result


@router.post(
    "/commissions/generate",
    summary="Generate monthly commission invoices",
    response_model=CommissionGenerationResponse,
)
def generate_commission_invoices(
    request: CommissionGenerationRequest,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Bill each professional for the commissions of the given month.

    Ledger entries already billed are never billed again, so re-running a
    month only picks up sessions completed since the last run.
    """
    logger.info(f"Admin {current_user.user_id} generating commissions for {request.month:02d}/{request.year}")
    effects = PostCommitEffects()
    result = BillingService.generate_monthly_commission_invoices(
        db,
        request.month,
        request.year,
        creator_user_id=current_user.user_id,
        effects=effects,
    )
    background_tasks.add_task(effects.run)
    return result
