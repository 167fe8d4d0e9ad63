# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from uuid import UUID
from typing import Optional

from pydantic import BaseModel, ConfigDict

from core.models.role import RoleResponse


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class UserResponse(BaseModel):
    """
    Current user with the role-derived entitlements.

    Example:
        {
            "id": "550e8400-...",
            "email": "coach@club.ch",
            "role": {"role": "free_user", "is_paid_user": false, ...}
        }
    """
    id: UUID
    email: Optional[str] = None
    role: RoleResponse
