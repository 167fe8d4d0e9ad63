# =============================================================================
# core/models/preferences.py - User Preference Schemas
# =============================================================================
# Preferences live on the profiles row:
# - email reminder switches (game day, announcement + lead time)
# - session preferences (language, theme)
#
# Updates are partial; the response always carries the confirmed server
# values so clients can reconcile optimistic UI state.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError


class Language(str, Enum):
    DE = "de"
    EN = "en"
    FR = "fr"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class UserPreferences(BaseModel):
    """
    Confirmed preference values of a user.

    Defaults apply when the profile column is NULL.
    """

    email_game_day_reminder: bool = True
    email_game_announcement_reminder: bool = True
    announcement_days_before: int = Field(default=3, ge=1, le=14)
    language: Language = Language.DE
    theme: Theme = Theme.SYSTEM

    @classmethod
    def from_profile(cls, row: dict[str, Any] | None) -> "UserPreferences":
        """Apply defaults for missing, NULL or invalid columns."""
        row = row or {}
        values = {key: value for key, value in row.items() if value is not None and key in cls.model_fields}
        try:
            return cls(**values)
        except ValidationError as e:
            invalid = {error["loc"][0] for error in e.errors() if error.get("loc")}
            return cls(**{key: value for key, value in values.items() if key not in invalid})


class PreferencesUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    email_game_day_reminder: bool | None = None
    email_game_announcement_reminder: bool | None = None
    announcement_days_before: int | None = Field(default=None, ge=1, le=14)
    language: Language | None = None
    theme: Theme | None = None

    def changes(self) -> dict[str, Any]:
        """Columns to write, enums flattened to their values."""
        return self.model_dump(exclude_none=True, mode="json")
