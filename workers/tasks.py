# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background jobs, mostly triggered by the beat schedule in workers/config.py.
#
# Tasks:
# - send_game_announcements: Daily reminder emails for upcoming games
# - check_subscriptions: Re-sync tiers/roles of subscribed users
# - reset_monthly_credits: Refill credit balances at the start of a month
# - check_user_subscription: Single-user sync (e.g. after checkout)
# - migrate_system_templates: Run a template migration by name
# =============================================================================

import logging
from datetime import date
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)

TEMPLATE_MIGRATIONS = ("api_field_prefix", "strip_result_detail")


@shared_task(bind=True, name="workers.tasks.send_game_announcements")
def send_game_announcements(self, today: str | None = None) -> dict[str, Any]:
    """
    Email every opted-in user the games they can announce now.

    Args:
        today: Optional ISO date (YYYY-MM-DD) to run the job for

    Returns:
        Dict with users_with_games, emails_sent, emails_failed
    """
    from core.services.announcement_service import AnnouncementService

    run_date = date.fromisoformat(today) if today else None
    return AnnouncementService.send_game_announcements(run_date)


@shared_task(bind=True, name="workers.tasks.check_subscriptions")
def check_subscriptions(self) -> dict[str, Any]:
    """Re-check Stripe for every user stored as subscribed."""
    from core.services.subscription_service import SubscriptionService

    return SubscriptionService.recheck_all()


@shared_task(bind=True, name="workers.tasks.check_user_subscription")
def check_user_subscription(self, user_id: str, email: str) -> dict[str, Any]:
    """
    Sync one user's subscription, retrying while Stripe is unreachable.
    """
    from app.exceptions import SubscriptionCheckError
    from core.services.subscription_service import SubscriptionService

    try:
        status = SubscriptionService.check_subscription(user_id, email)
    except SubscriptionCheckError as e:
        logger.warning(f"Subscription check for {user_id} failed, retrying: {e.message}")
        raise self.retry(exc=e)

    return status.model_dump(mode="json")


@shared_task(bind=True, name="workers.tasks.reset_monthly_credits")
def reset_monthly_credits(self) -> dict[str, Any]:
    """Refill every credit ledger that hasn't been reset this month."""
    from core.services.credit_service import CreditService

    return CreditService.reset_all_due()


@shared_task(bind=True, name="workers.tasks.migrate_system_templates")
def migrate_system_templates(self, migration: str) -> dict[str, Any]:
    """
    Run one of the system template migrations.

    Args:
        migration: "api_field_prefix" or "strip_result_detail"
    """
    from core.services.template_service import TemplateService

    if migration == "api_field_prefix":
        result = TemplateService.migrate_api_fields()
    elif migration == "strip_result_detail":
        result = TemplateService.strip_result_details()
    else:
        return {
            "success": False,
            "error": f"Unknown migration '{migration}', expected one of {TEMPLATE_MIGRATIONS}",
        }

    return {"success": True, **result.model_dump()}
