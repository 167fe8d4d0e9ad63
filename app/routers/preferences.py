# =============================================================================
# app/routers/preferences.py - Preference Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import CurrentUser
from core.models.preferences import PreferencesUpdate, UserPreferences
from core.services.preferences_service import PreferencesService

router = APIRouter()


@router.get("", response_model=UserPreferences)
def get_preferences(user: CurrentUser):
    """Email reminder and session preferences of the current user."""
    return PreferencesService.get_preferences(user.id)


@router.patch("", response_model=UserPreferences)
def update_preferences(update: PreferencesUpdate, user: CurrentUser):
    """
    Change some preferences.

    Returns the confirmed values; on error the client should keep its last
    confirmed state.
    """
    return PreferencesService.update_preferences(user.id, update)
