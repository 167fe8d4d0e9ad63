# =============================================================================
# core/services/limits_service.py - Subscription Limits
# =============================================================================
# Pure lookup from Role to Entitlement. Numbers come from settings so the
# product can tune them without a deploy of new code.
# =============================================================================

from typing import Any

from app.config import settings
from core.models.role import Entitlement, Role


def _free_entitlement() -> Entitlement:
    return Entitlement(
        max_teams=settings.FREE_MAX_TEAMS,
        monthly_credits=settings.FREE_MONTHLY_CREDITS,
    )


def _paid_entitlement() -> Entitlement:
    return Entitlement(
        max_teams=settings.PAID_MAX_TEAMS,
        monthly_credits=settings.PAID_MONTHLY_CREDITS,
    )


ROLE_ENTITLEMENTS = {
    Role.FREE_USER: _free_entitlement,
    Role.PAID_USER: _paid_entitlement,
    Role.ADMIN: _paid_entitlement,
}


def limits_for(role: Role | str | Any) -> Entitlement:
    """
    Entitlement of a role.

    Total: anything that isn't a known role (None, a future role name,
    garbage) gets the free entitlement instead of raising.

    Example:
        limits_for(Role.FREE_USER).max_teams  # 1
        limits_for("platinum").max_teams      # 1
    """
    try:
        known = Role(role)
    except (ValueError, TypeError):
        return _free_entitlement()
    return ROLE_ENTITLEMENTS.get(known, _free_entitlement)()
