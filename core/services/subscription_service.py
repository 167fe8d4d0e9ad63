# =============================================================================
# core/services/subscription_service.py - Stripe Subscription Sync
# =============================================================================
# Looks up the user's Stripe customer by email, derives the tier from the
# product of the active subscription, stores it in user_subscriptions and
# keeps user_roles in sync (free_user <-> paid_user, admins untouched).
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import stripe

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, to_iso
from app.config import settings
from app.exceptions import StoreUnavailableError, SubscriptionCheckError
from core.models.role import Role
from core.models.subscription import SubscriptionStatus, SubscriptionTier
from core.services.role_service import RoleService

logger = logging.getLogger(__name__)

TABLE = "user_subscriptions"

# Stripe product -> tier (monthly and yearly variants)
PRODUCT_TIER_MAP: dict[str, SubscriptionTier] = {
    "prod_TEvmhiwsigA8wE": SubscriptionTier.AMATEUR,
    "prod_TEvmFwrDTxQYrT": SubscriptionTier.AMATEUR,
    "prod_TEvmWCaGHNS17q": SubscriptionTier.PRO,
    "prod_TEvm1qgmfSNKDz": SubscriptionTier.PRO,
    "prod_TEvmUk7MYUf9XQ": SubscriptionTier.PREMIUM,
    "prod_TEvmj6Pr2p7wxV": SubscriptionTier.PREMIUM,
}


def tier_for_product(product_id: str | None) -> SubscriptionTier:
    """Unknown products fall back to the free tier."""
    return PRODUCT_TIER_MAP.get(product_id or "", SubscriptionTier.FREE)


class SubscriptionService:
    """
    Service for checking and persisting subscription state.
    """

    @staticmethod
    def check_subscription(user_id: UUID | str, email: str) -> SubscriptionStatus:
        """
        Refresh a user's subscription from Stripe.

        Args:
            user_id: The owner UUID
            email: Email the Stripe customer was created with

        Returns:
            SubscriptionStatus as stored in user_subscriptions

        Raises:
            SubscriptionCheckError: If Stripe isn't configured or fails
            StoreUnavailableError: If the result can't be stored
        """
        user_id_str = normalize_uuid(user_id)
        status = SubscriptionService.fetch_stripe_status(email)

        SubscriptionService._store_status(user_id_str, status)

        # The tier is informational; the role carries the entitlement
        role = Role.PAID_USER if status.subscribed else Role.FREE_USER
        RoleService.set_role(user_id_str, role)

        logger.info(
            f"Subscription check for user {user_id_str}: "
            f"subscribed={status.subscribed}, tier={status.tier.value}"
        )
        return status

    @staticmethod
    def fetch_stripe_status(email: str) -> SubscriptionStatus:
        """Read the subscription state of a customer email from Stripe."""
        if not settings.STRIPE_SECRET_KEY:
            raise SubscriptionCheckError("STRIPE_SECRET_KEY is not set")
        if not email:
            raise SubscriptionCheckError("user has no email address")

        stripe.api_key = settings.STRIPE_SECRET_KEY

        try:
            customers = stripe.Customer.list(email=email, limit=1)
            if not customers.data:
                logger.debug(f"No Stripe customer for {email}")
                return SubscriptionStatus()

            customer_id = customers.data[0].id
            subscriptions = stripe.Subscription.list(
                customer=customer_id,
                status="active",
                limit=1,
            )
        except stripe.StripeError as e:
            raise SubscriptionCheckError(str(e))

        if not subscriptions.data:
            return SubscriptionStatus(customer_id=customer_id)

        subscription = subscriptions.data[0]
        # subscription.items would be the dict method, so use item access
        item = subscription["items"]["data"][0]
        product_id = item["price"]["product"]
        if not isinstance(product_id, str):
            product_id = product_id["id"]

        return SubscriptionStatus(
            subscribed=True,
            tier=tier_for_product(product_id),
            subscription_end=_period_end(subscription, item),
            product_id=product_id,
            customer_id=customer_id,
            subscription_id=subscription["id"],
        )

    @staticmethod
    def fetch_stored_status(user_id: UUID | str) -> SubscriptionStatus:
        """Last stored subscription state (free if never checked)."""
        user_id_str = normalize_uuid(user_id)
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TABLE)
                .select("*")
                .eq("user_id", user_id_str)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("fetch_subscription", str(e))

        if not response.data:
            return SubscriptionStatus()

        row = response.data[0]
        return SubscriptionStatus(
            subscribed=bool(row.get("subscribed")),
            tier=row.get("tier") or SubscriptionTier.FREE.value,
            subscription_end=row.get("subscription_end"),
            product_id=row.get("stripe_product_id"),
            customer_id=row.get("stripe_customer_id"),
            subscription_id=row.get("stripe_subscription_id"),
        )

    @staticmethod
    def recheck_all() -> dict[str, int]:
        """
        Re-run the check for every user stored as subscribed.

        Catches users whose subscription lapsed without them opening the
        app. Failures are counted, not raised.
        """
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TABLE)
                .select("user_id")
                .eq("subscribed", True)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("list_subscriptions", str(e))

        stats = {"checked": 0, "failed": 0}
        for row in response.data or []:
            user_id = row["user_id"]
            try:
                profile = SupabaseClient.fetch_profile(user_id, columns="email")
                email = (profile or {}).get("email")
                SubscriptionService.check_subscription(user_id, email)
                stats["checked"] += 1
            except Exception as e:
                logger.warning(f"Subscription re-check failed for user {user_id}: {e}")
                stats["failed"] += 1

        logger.info(f"Subscription re-check finished: {stats}")
        return stats

    @staticmethod
    def _store_status(user_id: str, status: SubscriptionStatus) -> None:
        row: dict[str, Any] = {
            "user_id": user_id,
            "subscribed": status.subscribed,
            "tier": status.tier.value,
            "stripe_customer_id": status.customer_id,
            "stripe_subscription_id": status.subscription_id,
            "stripe_product_id": status.product_id,
            "subscription_end": to_iso(status.subscription_end) if status.subscription_end else None,
        }

        try:
            client = SupabaseClient.get_client()
            client.table(TABLE).upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            raise StoreUnavailableError("store_subscription", str(e))


def _period_end(subscription: Any, item: Any) -> datetime | None:
    """current_period_end moved from the subscription to its items in newer API versions."""
    timestamp = subscription.get("current_period_end") or item.get("current_period_end")
    if not timestamp:
        return None
    try:
        return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Unreadable subscription end {timestamp!r}: {e}")
        return None
