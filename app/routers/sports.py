# =============================================================================
# app/routers/sports.py - League Data Endpoints
# =============================================================================
# Read-only pass-through to the league data API for the team wizard.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.sports import Game, NamedEntity
from core.models.team_slot import Sport
from core.services.sports_data_service import SportsDataService

router = APIRouter()

SportPath = Annotated[Sport, Path(description="unihockey, volleyball or handball")]


@router.get("/{sport}/clubs", response_model=list[NamedEntity])
def list_clubs(
    sport: SportPath,
    user: AuthUser = Depends(get_current_user),
):
    """All clubs of a league, sorted by name."""
    return SportsDataService.fetch_clubs(sport)


@router.get("/{sport}/clubs/{club_id}/teams", response_model=list[NamedEntity])
def list_teams(
    sport: SportPath,
    club_id: Annotated[str, Path(description="League club id")],
    user: AuthUser = Depends(get_current_user),
):
    """Teams of a club, sorted by name."""
    return SportsDataService.fetch_teams(sport, club_id)


@router.get("/{sport}/teams/{team_id}/games", response_model=list[Game])
def list_games(
    sport: SportPath,
    team_id: Annotated[str, Path(description="League team id")],
    user: AuthUser = Depends(get_current_user),
    club_id: Annotated[str | None, Query(description="Required for handball")] = None,
):
    """Games of a team."""
    return SportsDataService.fetch_games(sport, team_id, club_id)
