# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.auth import AuthUser, get_current_role, get_current_user, require_admin
from core.models.role import Role

# Type aliases for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
CurrentRole = Annotated[Role, Depends(get_current_role)]
AdminUser = Annotated[AuthUser, Depends(require_admin)]
