# =============================================================================
# core/services/sports_data_service.py - League Data Client
# =============================================================================
# Read-only client for the league data API. Each sport has its own endpoint
# (swissunihockey, swissvolley, swisshandball) behind the same GraphQL-style
# interface: the query goes in the `query` parameter, the result comes back
# as {"data": {<field>: [...]}}.
#
# Per-sport differences (endpoint, game fields, handball needing the club id)
# live in the SPORTS dispatch table below.
# =============================================================================

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from app.config import settings
from app.exceptions import SportsDataError
from core.models.sports import Game, NamedEntity
from core.models.team_slot import Sport

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Query builders
# -----------------------------------------------------------------------------

def quote(value: str) -> str:
    """Render an id as an escaped GraphQL string literal."""
    return json.dumps(str(value))


def clubs_query() -> str:
    return "{\n  clubs {\n    id\n    name\n  }\n}\n"


def teams_query(club_id: str) -> str:
    return f'{{\n  teams(clubId: {quote(club_id)}) {{\n    id\n    name\n  }}\n}}\n'


def _games_query(arguments: str, fields: list[str]) -> str:
    body = "\n".join(f"    {field}" for field in fields)
    return f"{{\n  games({arguments}) {{\n{body}\n  }}\n}}\n"


def unihockey_games_query(team_id: str, club_id: str | None = None) -> str:
    return _games_query(
        f"teamId: {quote(team_id)}",
        ["id", "result", "date", "time", "teamHome", "teamAway"],
    )


def volleyball_games_query(team_id: str, club_id: str | None = None) -> str:
    return _games_query(
        f"teamId: {quote(team_id)}",
        ["id", "date", "time", "location", "city", "teamHome", "teamAway", "result"],
    )


def handball_games_query(team_id: str, club_id: str | None = None) -> str:
    # Handball game lookups are scoped to a club
    return _games_query(
        f"teamId: {quote(team_id)}, clubId: {quote(club_id or '')}",
        ["id", "teamHome", "teamAway", "date", "time", "result"],
    )


@dataclass(frozen=True)
class SportEndpoint:
    """How to talk to the league API for one sport."""
    path: str
    games_query: Callable[[str, str | None], str]


SPORTS: dict[Sport, SportEndpoint] = {
    Sport.UNIHOCKEY: SportEndpoint("swissunihockey", unihockey_games_query),
    Sport.VOLLEYBALL: SportEndpoint("swissvolley", volleyball_games_query),
    Sport.HANDBALL: SportEndpoint("swisshandball", handball_games_query),
}


class SportsDataService:
    """
    Service for fetching clubs, teams and games.

    Example:
        teams = SportsDataService.fetch_teams(Sport.UNIHOCKEY, "452800")
    """

    @staticmethod
    def endpoint_url(sport: Sport) -> str:
        base = settings.SPORTS_API_BASE_URL.rstrip("/")
        return f"{base}/{SPORTS[sport].path}"

    @staticmethod
    def fetch_clubs(sport: Sport) -> list[NamedEntity]:
        """All clubs of a league, sorted by name."""
        rows = SportsDataService._query(sport, clubs_query(), "clubs")
        clubs = [NamedEntity.model_validate(row) for row in rows]
        return sorted(clubs, key=lambda club: club.name.casefold())

    @staticmethod
    def fetch_teams(sport: Sport, club_id: str) -> list[NamedEntity]:
        """Teams of a club, sorted by name."""
        rows = SportsDataService._query(sport, teams_query(club_id), "teams")
        teams = [NamedEntity.model_validate(row) for row in rows]
        return sorted(teams, key=lambda team: team.name.casefold())

    @staticmethod
    def fetch_games(sport: Sport, team_id: str, club_id: str | None = None) -> list[Game]:
        """
        Games of a team in the order the league returns them.

        Rows that don't parse are skipped with a warning.
        """
        query = SPORTS[sport].games_query(team_id, club_id)
        games = []
        for row in SportsDataService._query(sport, query, "games"):
            try:
                games.append(Game.model_validate(row))
            except ValueError as e:
                logger.warning(f"Skipping malformed {sport.value} game for team {team_id}: {e}")
        return games

    @staticmethod
    def _query(sport: Sport, query: str, field: str) -> list[dict[str, Any]]:
        url = SportsDataService.endpoint_url(sport)

        try:
            response = httpx.get(
                url,
                params={"query": query},
                timeout=settings.SPORTS_API_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise SportsDataError(sport.value, f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise SportsDataError(sport.value, str(e))
        except ValueError as e:
            raise SportsDataError(sport.value, f"invalid JSON: {e}")

        data = (payload or {}).get("data") or {}
        rows = data.get(field) or []
        if not isinstance(rows, list):
            raise SportsDataError(sport.value, f"unexpected '{field}' payload")

        logger.debug(f"Fetched {len(rows)} {field} from {SPORTS[sport].path}")
        return rows
