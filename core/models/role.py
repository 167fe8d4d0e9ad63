# =============================================================================
# core/models/role.py - Role & Entitlement Schemas
# =============================================================================
# These models describe who a user is to the billing layer:
# - Role: stored 1:1 per user in user_roles
# - Entitlement: numeric allowances derived from a Role (never persisted)
# - RoleResponse: what GET /me/role returns
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    """
    Account role stored in user_roles.role.

    - free_user: default for every account
    - paid_user: set by the subscription check while a subscription is active
    - admin: assigned manually, never touched by automation
    """
    FREE_USER = "free_user"
    PAID_USER = "paid_user"
    ADMIN = "admin"


class Entitlement(BaseModel):
    """
    Allowances derived from a Role.

    Example:
        {"max_teams": 1, "monthly_credits": 3}
    """

    max_teams: int = Field(
        ...,
        ge=0,
        description="Maximum number of team slots the user may hold"
    )

    monthly_credits: int = Field(
        default=0,
        ge=0,
        description="Credits restored at each monthly reset"
    )

    model_config = {"frozen": True}


class RoleResponse(BaseModel):
    """Resolved role of the current user plus its entitlement."""
    role: Role
    is_paid_user: bool
    is_admin: bool
    limits: Entitlement
