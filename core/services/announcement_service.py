# =============================================================================
# core/services/announcement_service.py - Game Announcement Reminders
# =============================================================================
# Daily job: for every user who opted into announcement reminders, look up
# the games of their team slots and email a list of the games taking place
# in exactly `announcement_days_before` days (default 3), each with a link
# into the studio to create the announcement graphic.
#
# Games of the same team are fetched once per run, however many users hold
# that team. A failing team or mail never stops the run.
# =============================================================================

import html
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from lib.mailer import MailerError, send_email
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now
from app.config import settings
from app.exceptions import SportsDataError, StoreUnavailableError
from core.models.sports import Game
from core.models.team_slot import Sport
from core.services.sports_data_service import SportsDataService

logger = logging.getLogger(__name__)


@dataclass
class DueGame:
    """A game of one of the user's teams that is due for an announcement."""
    game: Game
    sport: Sport
    club_id: str | None
    team_id: str

    @property
    def studio_url(self) -> str:
        base = settings.APP_BASE_URL.rstrip("/")
        return (
            f"{base}/studio/{self.sport.value}/{self.club_id}/{self.team_id}/{self.game.id}"
            f"?template={settings.GAME_RESULT_TEMPLATE_ID}"
        )


def games_on(games: list[Game], target: date) -> list[Game]:
    """Games whose DD.MM.YYYY date equals target; unparseable dates never match."""
    return [game for game in games if game.game_date == target]


def render_announcement(games: list[DueGame], days_before: int) -> tuple[str, str, str]:
    """
    Build (subject, text, html) for one user's announcement email.
    """
    count = len(games)
    when = "morgen" if days_before == 1 else f"in {days_before} Tagen"
    subject = (
        f"📅 {'Dein Spiel' if count == 1 else f'{count} Spiele'} {when} - "
        "Erstelle jetzt die Ankündigung!"
    )
    intro = (
        f"{when[0].upper()}{when[1:]} "
        f"{'steht ein Spiel' if count == 1 else f'stehen {count} Spiele'} deiner Teams an! "
        "Jetzt ist der perfekte Zeitpunkt, um eine mitreissende Spielankündigung "
        "zu erstellen und deine Fans zu mobilisieren."
    )
    profile_url = f"{settings.APP_BASE_URL.rstrip('/')}/profile"

    text_lines = [intro, ""]
    html_rows = []
    for due in games:
        matchup = f"{due.game.team_home or '?'} vs {due.game.team_away or '?'}"
        kickoff = f"{due.game.date} um {due.game.time or '--:--'}"
        text_lines.append(f"- {matchup}, {kickoff}: {due.studio_url}")
        html_rows.append(
            "<tr><td style=\"padding: 15px 30px; border-bottom: 1px solid #f4f4f4;\">"
            f"<p style=\"margin: 0; font-weight: 600;\">{html.escape(matchup)}</p>"
            f"<p style=\"margin: 5px 0 0 0; color: #666666;\">{html.escape(kickoff)}</p>"
            f"<p style=\"margin: 10px 0 0 0;\"><a href=\"{html.escape(due.studio_url)}\" "
            "style=\"color: #015afe;\">Ankündigung erstellen</a></p>"
            "</td></tr>"
        )
    text_lines += [
        "",
        "KANVA - wo Emotionen zu Stories werden.",
        f"Du kannst deine E-Mail-Einstellungen jederzeit in deinem Profil anpassen: {profile_url}",
    ]

    html_body = (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        "<title>Spielankündigung - KANVA</title></head>"
        "<body style=\"background-color: #f4f4f4; font-family: Helvetica, Arial, sans-serif;\">"
        "<table width=\"100%\" style=\"max-width: 600px; margin: 0 auto; background: #ffffff;\">"
        "<tr><td style=\"padding: 40px 20px 20px 20px;\"><h1>Bald geht's los! 📅</h1></td></tr>"
        f"<tr><td style=\"padding: 20px 30px; color: #666666;\"><p>{html.escape(intro)}</p></td></tr>"
        f"{''.join(html_rows)}"
        "<tr><td style=\"padding: 30px; color: #666666; font-size: 14px;\">"
        "<p>KANVA - wo Emotionen zu Stories werden.</p>"
        "<p style=\"font-size: 12px; color: #999999;\">Du kannst deine E-Mail-Einstellungen "
        f"jederzeit in deinem <a href=\"{profile_url}\" style=\"color: #015afe;\">Profil</a> anpassen.</p>"
        "</td></tr></table></body></html>"
    )

    return subject, "\n".join(text_lines), html_body


class AnnouncementService:
    """
    Service behind the daily send_game_announcements task.
    """

    @staticmethod
    def collect_due_games(today: date | None = None) -> dict[str, tuple[int, list[DueGame]]]:
        """
        Group due games by recipient email.

        Returns:
            {email: (days_before, [DueGame, ...])}; users without due games
            are left out
        """
        today = today or utc_now().date()
        slots = AnnouncementService._fetch_slots()
        if not slots:
            logger.info("No team slots found")
            return {}

        recipients = AnnouncementService._fetch_recipients({slot["user_id"] for slot in slots})
        if not recipients:
            logger.info("No users with game announcement reminders enabled")
            return {}

        games_cache: dict[tuple[str, str, str | None], list[Game] | None] = {}
        due: dict[str, tuple[int, list[DueGame]]] = {}

        for slot in slots:
            recipient = recipients.get(slot["user_id"])
            if not recipient:
                continue
            email, days_before = recipient

            try:
                sport = Sport(slot.get("sport"))
            except ValueError:
                logger.debug(f"Skipping slot with unknown sport: {slot.get('sport')}")
                continue

            key = (sport.value, slot["team_id"], slot.get("club_id"))
            if key not in games_cache:
                try:
                    games_cache[key] = SportsDataService.fetch_games(
                        sport, slot["team_id"], slot.get("club_id")
                    )
                except SportsDataError as e:
                    logger.warning(f"Error fetching games for team {slot['team_id']}: {e.message}")
                    games_cache[key] = None

            games = games_cache[key]
            if not games:
                continue

            upcoming = games_on(games, today + timedelta(days=days_before))
            if not upcoming:
                continue

            logger.debug(f"Found {len(upcoming)} games in {days_before} days for team {slot['team_id']}")
            _, user_games = due.setdefault(email, (days_before, []))
            user_games.extend(
                DueGame(game=game, sport=sport, club_id=slot.get("club_id"), team_id=slot["team_id"])
                for game in upcoming
            )

        return due

    @staticmethod
    def send_game_announcements(today: date | None = None) -> dict[str, int]:
        """
        Run the announcement job.

        Returns:
            Stats dict with users_with_games, emails_sent and emails_failed
        """
        due = AnnouncementService.collect_due_games(today)
        stats = {"users_with_games": len(due), "emails_sent": 0, "emails_failed": 0}

        for email, (days_before, games) in due.items():
            subject, text, html_body = render_announcement(games, days_before)
            try:
                send_email(email, subject, text, html_body)
                stats["emails_sent"] += 1
            except MailerError as e:
                logger.error(str(e))
                stats["emails_failed"] += 1

        logger.info(f"Game announcements finished: {stats}")
        return stats

    @staticmethod
    def _fetch_slots() -> list[dict[str, Any]]:
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table("user_team_slots")
                .select("team_id, team_name, sport, club_id, user_id")
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("fetch_team_slots", str(e))
        return response.data or []

    @staticmethod
    def _fetch_recipients(user_ids: set[str]) -> dict[str, tuple[str, int]]:
        """user_id -> (email, days_before) for users who opted in."""
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table("profiles")
                .select("id, email, announcement_days_before")
                .in_("id", sorted(user_ids))
                .eq("email_game_announcement_reminder", True)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("fetch_profiles", str(e))

        recipients = {}
        for profile in response.data or []:
            if not profile.get("email"):
                continue
            days_before = profile.get("announcement_days_before") or settings.ANNOUNCEMENT_DAYS_AHEAD
            recipients[str(profile["id"])] = (profile["email"], int(days_before))
        return recipients
