# =============================================================================
# core/services/role_service.py - Tier Resolution
# =============================================================================
# Maps an authenticated user to a Role. Reads are fail-safe: anything other
# than a clean, known role row resolves to free_user, so a backend hiccup
# can never grant paid privileges.
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.role import Role
from app.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

PAID_ROLES = frozenset({Role.PAID_USER, Role.ADMIN})


class RoleService:
    """
    Service for role lookups and the role sync used by billing.
    """

    @staticmethod
    def resolve_role(user_id: UUID | str) -> Role:
        """
        Resolve the role of a user.

        Safe to call on every request: no side effects.

        Args:
            user_id: The owner UUID

        Returns:
            The stored Role, or Role.FREE_USER when the row is missing,
            unreadable or holds an unknown value
        """
        try:
            raw_role = SupabaseClient.fetch_user_role(user_id)
        except SupabaseClientError as e:
            logger.warning(f"Role lookup failed for {user_id}, treating as free_user: {e}")
            return Role.FREE_USER

        if raw_role is None:
            return Role.FREE_USER

        try:
            return Role(raw_role)
        except ValueError:
            logger.warning(f"Unknown role '{raw_role}' for user {user_id}, treating as free_user")
            return Role.FREE_USER

    @staticmethod
    def is_paid_user(role: Role) -> bool:
        """Paid features are available to paid users and admins."""
        return role in PAID_ROLES

    @staticmethod
    def is_admin(role: Role) -> bool:
        return role == Role.ADMIN

    @staticmethod
    def set_role(user_id: UUID | str, role: Role) -> Role:
        """
        Store a new role for a user, leaving admins untouched.

        Only the subscription check calls this, to move users between
        free_user and paid_user.

        Args:
            user_id: The owner UUID
            role: Role.FREE_USER or Role.PAID_USER

        Returns:
            The role the user has after the call

        Raises:
            ValueError: If asked to assign the admin role
            StoreUnavailableError: If the role can't be read or written
        """
        if role == Role.ADMIN:
            raise ValueError("The admin role is never assigned automatically")

        try:
            current = SupabaseClient.fetch_user_role(user_id)
        except SupabaseClientError as e:
            raise StoreUnavailableError("fetch_user_role", str(e))

        if current == Role.ADMIN.value:
            logger.info(f"User {user_id} is admin, role sync skipped")
            return Role.ADMIN

        if current == role.value:
            return role

        try:
            SupabaseClient.upsert_user_role(user_id, role.value)
        except SupabaseClientError as e:
            raise StoreUnavailableError("upsert_user_role", str(e))

        logger.info(f"Role of user {user_id} changed from {current} to {role.value}")
        return role
