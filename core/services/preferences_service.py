# =============================================================================
# core/services/preferences_service.py - User Preferences
# =============================================================================
# Reads and writes the preference columns of the profiles row. Last write
# wins. Updates return the values the store confirmed, so a client that
# applied a change optimistically can reconcile (or revert on error).
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid
from app.exceptions import StoreUnavailableError
from core.models.preferences import PreferencesUpdate, UserPreferences

logger = logging.getLogger(__name__)

PREFERENCE_COLUMNS = ", ".join(UserPreferences.model_fields)


class PreferencesService:

    @staticmethod
    def get_preferences(user_id: UUID | str) -> UserPreferences:
        """Preferences of a user; defaults when no profile exists yet."""
        try:
            row = SupabaseClient.fetch_profile(user_id, columns=PREFERENCE_COLUMNS)
        except SupabaseClientError as e:
            raise StoreUnavailableError("fetch_preferences", str(e))
        return UserPreferences.from_profile(row)

    @staticmethod
    def update_preferences(user_id: UUID | str, update: PreferencesUpdate) -> UserPreferences:
        """
        Apply a partial update.

        Returns:
            The confirmed preferences after the write

        Raises:
            StoreUnavailableError: If the write fails; the client should
                fall back to its last confirmed values
        """
        user_id_str = normalize_uuid(user_id)
        changes = update.changes()
        if not changes:
            return PreferencesService.get_preferences(user_id_str)

        try:
            client = SupabaseClient.get_client()
            response = (
                client.table("profiles")
                .update(changes)
                .eq("id", user_id_str)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("update_preferences", str(e))

        if not response.data:
            raise StoreUnavailableError("update_preferences", "profile not found")

        logger.info(f"Updated preferences of user {user_id_str}: {sorted(changes)}")
        return UserPreferences.from_profile(response.data[0])
