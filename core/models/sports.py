# =============================================================================
# core/models/sports.py - League Data Schemas
# =============================================================================
# Minimal shapes of what the league data API returns. Only the fields the
# backend actually uses are modelled; everything else is ignored.
# =============================================================================

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class NamedEntity(BaseModel):
    """A club or team: an id and a display name."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str


class Game(BaseModel):
    """
    One fixture.

    Dates arrive as "DD.MM.YYYY" strings, times as "HH:MM".
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    date: str
    time: str | None = None
    team_home: str | None = Field(default=None, alias="teamHome")
    team_away: str | None = Field(default=None, alias="teamAway")
    result: str | None = None
    location: str | None = None
    city: str | None = None

    @property
    def game_date(self) -> date | None:
        """Parse the league's DD.MM.YYYY date, None when malformed."""
        try:
            day, month, year = (int(part) for part in self.date.split("."))
            return date(year, month, day)
        except (ValueError, AttributeError):
            return None
