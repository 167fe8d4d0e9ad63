# =============================================================================
# core/models/subscription.py - Subscription Status Schemas
# =============================================================================
# Mirrors the user_subscriptions row written by the subscription check.
# The tier is informational (pricing page, profile); entitlements are
# derived from the Role, which the same check keeps in sync.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SubscriptionTier(str, Enum):
    """Stripe product families."""
    FREE = "free"
    AMATEUR = "amateur"
    PRO = "pro"
    PREMIUM = "premium"


class SubscriptionStatus(BaseModel):
    """
    Result of a subscription check.

    Example:
        {
            "subscribed": true,
            "tier": "pro",
            "subscription_end": "2024-02-15T10:30:00Z",
            "product_id": "prod_TEvmWCaGHNS17q"
        }
    """

    subscribed: bool = False
    tier: SubscriptionTier = SubscriptionTier.FREE
    subscription_end: datetime | None = None
    product_id: str | None = Field(
        default=None,
        description="Stripe product of the active subscription"
    )
    customer_id: str | None = Field(default=None, exclude=True)
    subscription_id: str | None = Field(default=None, exclude=True)
