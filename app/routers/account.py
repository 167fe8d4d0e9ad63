# =============================================================================
# app/routers/account.py - Account Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import CurrentUser
from core.models.account import AccountDeletionReport, DeleteAccountRequest
from core.services.account_service import AccountService

router = APIRouter()


@router.delete("", response_model=AccountDeletionReport)
def delete_account(request: DeleteAccountRequest, user: CurrentUser):
    """
    Permanently delete the account and all of its data.

    Body: {"confirmation": "DELETE"}

    Errors:
    - 400 INVALID_CONFIRMATION: confirmation text is not DELETE
    - 500 ACCOUNT_DELETION_FAILED: the login itself could not be removed
    """
    return AccountService.delete_account(user.id, request.confirmation)
