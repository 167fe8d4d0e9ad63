# =============================================================================
# core/models/team_slot.py - Team Slot Schemas
# =============================================================================
# These models define the API contract for team slot operations:
# - Sport: the three supported leagues
# - TeamSelection: the team a user wants to export graphics for
# - TeamSlot: one row of user_team_slots
# - TeamSlotView / TeamSlotList: what the slot endpoints return
#
# A team slot binds one team to one user. Slots are limited per role and
# can only be changed once per week.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Sport(str, Enum):
    """Supported Swiss leagues."""
    UNIHOCKEY = "unihockey"
    VOLLEYBALL = "volleyball"
    HANDBALL = "handball"


class TeamSelection(BaseModel):
    """
    A team chosen in the wizard, as sent by the client.

    Example:
        {
            "team_id": "429283",
            "team_name": "HC Rot-Weiss",
            "sport": "unihockey",
            "club_id": "su-452800"
        }
    """

    team_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="League identifier of the team"
    )

    team_name: str | None = Field(
        default=None,
        max_length=255,
        description="Display name of the team"
    )

    sport: Sport | None = Field(
        default=None,
        description="League the team plays in"
    )

    club_id: str | None = Field(
        default=None,
        max_length=100,
        description="League identifier of the club"
    )

    def to_row(self) -> dict[str, Any]:
        """Columns written to user_team_slots for this team."""
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "sport": self.sport.value if self.sport else None,
            "club_id": self.club_id,
        }


class TeamSlot(BaseModel):
    """
    One row of user_team_slots.

    last_changed_at drives the weekly cooldown; created_at drives ordering.
    """

    id: str
    user_id: str
    team_id: str
    team_name: str | None = None
    sport: Sport | None = None
    club_id: str | None = None
    created_at: datetime
    last_changed_at: datetime

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "TeamSlot":
        """Build a TeamSlot from a Supabase row (unknown sports become None)."""
        sport = row.get("sport")
        try:
            sport = Sport(sport) if sport else None
        except ValueError:
            sport = None
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            team_id=str(row["team_id"]),
            team_name=row.get("team_name"),
            sport=sport,
            club_id=row.get("club_id"),
            created_at=row["created_at"],
            last_changed_at=row["last_changed_at"],
        )


class TeamSlotView(TeamSlot):
    """A slot enriched with its cooldown state for display."""
    days_until_editable: int = Field(..., ge=0)
    is_editable: bool


class TeamSlotList(BaseModel):
    """
    Response for GET /team-slots.

    Example:
        {"slots": [...], "used": 1, "max_teams": 1, "can_add_slot": false}
    """
    slots: list[TeamSlotView] = Field(default_factory=list)
    used: int = Field(default=0, ge=0)
    max_teams: int = Field(default=0, ge=0)
    can_add_slot: bool = False
