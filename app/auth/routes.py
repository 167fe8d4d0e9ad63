# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for the authenticated user and their tier.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_role, get_current_user
from app.auth.models import AuthUser, UserResponse
from core.models.role import Role, RoleResponse
from core.services.limits_service import limits_for
from core.services.role_service import RoleService

logger = logging.getLogger(__name__)

router = APIRouter()


def _role_response(role: Role) -> RoleResponse:
    return RoleResponse(
        role=role,
        is_paid_user=RoleService.is_paid_user(role),
        is_admin=RoleService.is_admin(role),
        limits=limits_for(role),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user),
    role: Role = Depends(get_current_role),
) -> UserResponse:
    """
    Get the current user with their role and limits.

    Raises:
        401: If not authenticated
    """
    return UserResponse(id=user.id, email=user.email, role=_role_response(role))


@router.get("/role", response_model=RoleResponse)
async def get_role(role: Role = Depends(get_current_role)) -> RoleResponse:
    """
    Resolved role and entitlement of the current user.

    Unknown or missing roles come back as free_user.
    """
    return _role_response(role)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
