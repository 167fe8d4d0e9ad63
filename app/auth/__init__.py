# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth, plus role gating.
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import get_current_role, get_current_user, require_admin
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "get_current_role",
    "require_admin",
    "AuthUser",
    "UserResponse",
]
