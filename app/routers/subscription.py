# =============================================================================
# app/routers/subscription.py - Subscription Endpoints
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_user, AuthUser
from core.models.subscription import SubscriptionStatus
from core.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("", response_model=SubscriptionStatus)
def get_subscription(user: AuthUser = Depends(get_current_user)):
    """Last stored subscription state (no Stripe call)."""
    return SubscriptionService.fetch_stored_status(user.id)


@router.post("/check", response_model=SubscriptionStatus)
def check_subscription(user: AuthUser = Depends(get_current_user)):
    """
    Refresh the subscription from Stripe and sync the user's role.

    Called after checkout and when the pricing/profile page opens.

    Errors:
    - 502 SUBSCRIPTION_CHECK_FAILED: Stripe unavailable or not configured
    """
    return SubscriptionService.check_subscription(user.id, user.email or "")
