# =============================================================================
# app/routers/credits.py - Credit Endpoints
# =============================================================================
# Balance, consumption and history of the current user's credits, plus the
# admin grant of purchased credits.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import AdminUser, CurrentRole, CurrentUser
from app.exceptions import CreditLedgerMissingError, InsufficientCreditsError
from core.models.credits import (
    ConsumeCreditRequest,
    ConsumeCreditResponse,
    CreditBalance,
    CreditTransaction,
    PurchaseCreditsRequest,
)
from core.services.credit_service import CreditService
from core.services.limits_service import limits_for

router = APIRouter()


@router.get("", response_model=CreditBalance)
def get_balance(user: AuthUser = Depends(get_current_user)):
    """
    Current credit balance.

    Errors:
    - 404 CREDITS_UNINITIALIZED: the ledger was never provisioned
    """
    balance = CreditService.fetch_balance(user.id)
    if balance is None:
        raise CreditLedgerMissingError(str(user.id))
    return balance


@router.post("/consume", response_model=ConsumeCreditResponse)
def consume_credit(
    request: ConsumeCreditRequest | None = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Debit one credit for an export.

    Errors:
    - 402 INSUFFICIENT_CREDITS: balance is zero
    """
    request = request or ConsumeCreditRequest()
    consumed = CreditService.consume_credit(
        user.id,
        game_url=request.game_url,
        template_info=request.template_info,
    )
    if not consumed:
        raise InsufficientCreditsError(str(user.id))

    return ConsumeCreditResponse(consumed=True, balance=CreditService.fetch_balance(user.id))


@router.get("/transactions", response_model=list[CreditTransaction])
def list_transactions(
    user: AuthUser = Depends(get_current_user),
    limit: Annotated[int, Query(ge=1, le=100, description="Max entries")] = 20,
):
    """Most recent credit movements, newest first."""
    return CreditService.list_transactions(user.id, limit=limit)


@router.post("/provision", response_model=CreditBalance)
def provision_balance(user: CurrentUser, role: CurrentRole):
    """
    Create the ledger with the role's monthly allowance if it doesn't exist.

    Existing balances are returned unchanged.
    """
    return CreditService.provision_balance(user.id, limits_for(role).monthly_credits)


@router.post("/purchase", response_model=CreditBalance | None)
def add_purchased_credits(
    request: PurchaseCreditsRequest,
    admin: AdminUser,
):
    """Grant purchased credits to a user (admin only)."""
    return CreditService.add_purchased_credits(request.user_id, request.amount)
