# =============================================================================
# tests/test_announcements.py - Game Announcement Email Tests
# =============================================================================
# League data and SMTP are patched; slots and profiles live in the fake store.
#
# Run with: pytest tests/test_announcements.py -v
# =============================================================================

import smtplib
from datetime import date
from unittest.mock import patch

import pytest

from app.config import settings
from app.exceptions import SportsDataError
from core.models.sports import Game
from core.models.team_slot import Sport
from core.services.announcement_service import (
    AnnouncementService,
    DueGame,
    games_on,
    render_announcement,
)
from core.services.sports_data_service import SportsDataService
from lib.mailer import MailerError, send_email

TODAY = date(2024, 3, 12)


def game(game_id: str, day: str, home: str = "UHC Thun", away: str = "HC Rot-Weiss") -> Game:
    return Game(id=game_id, date=day, time="19:30", team_home=home, team_away=away)


@pytest.fixture
def league():
    with patch.object(SportsDataService, "fetch_games") as fetch_games:
        yield fetch_games


@pytest.fixture
def mailbox():
    with patch("core.services.announcement_service.send_email") as send:
        yield send


@pytest.fixture
def subscribers(fake_db, user_id, other_user_id):
    """Two users following the same team, one of them opted out."""
    fake_db.seed(
        "user_team_slots",
        {"user_id": user_id, "team_id": "100", "team_name": "Thun", "sport": "unihockey", "club_id": "452800"},
        {"user_id": other_user_id, "team_id": "100", "team_name": "Thun", "sport": "unihockey", "club_id": "452800"},
    )
    fake_db.seed(
        "profiles",
        {"id": user_id, "email": "fan@example.com", "email_game_announcement_reminder": True,
         "announcement_days_before": None},
        {"id": other_user_id, "email": "quiet@example.com", "email_game_announcement_reminder": False},
    )
    return fake_db


class TestRendering:

    def test_games_on(self):
        games = [game("g1", "15.03.2024"), game("g2", "16.03.2024"), game("g3", "bad")]

        assert [g.id for g in games_on(games, date(2024, 3, 15))] == ["g1"]

    def test_studio_link(self):
        due = DueGame(game=game("g1", "15.03.2024"), sport=Sport.UNIHOCKEY, club_id="452800", team_id="100")

        assert due.studio_url == (
            f"{settings.APP_BASE_URL}/studio/unihockey/452800/100/g1"
            f"?template={settings.GAME_RESULT_TEMPLATE_ID}"
        )

    def test_single_game_copy(self):
        due = [DueGame(game=game("g1", "15.03.2024"), sport=Sport.UNIHOCKEY, club_id="1", team_id="100")]

        subject, text, html_body = render_announcement(due, 3)

        assert "Dein Spiel in 3 Tagen" in subject
        assert "UHC Thun vs HC Rot-Weiss" in text
        assert "15.03.2024 um 19:30" in html_body

    def test_html_is_escaped(self):
        due = [DueGame(game=game("g1", "15.03.2024", home="<b>Evil</b>"), sport=Sport.HANDBALL,
                       club_id="1", team_id="100")]

        _, _, html_body = render_announcement(due, 1)

        assert "<b>Evil</b>" not in html_body
        assert "&lt;b&gt;Evil&lt;/b&gt;" in html_body

    def test_multiple_games_tomorrow(self):
        due = [
            DueGame(game=game(f"g{n}", "13.03.2024"), sport=Sport.UNIHOCKEY, club_id="1", team_id="100")
            for n in range(2)
        ]

        subject, _, _ = render_announcement(due, 1)

        assert "2 Spiele morgen" in subject


class TestCollectDueGames:

    def test_only_opted_in_users_with_due_games(self, subscribers, league):
        # Arrange
        league.return_value = [game("g1", "15.03.2024"), game("g2", "22.03.2024")]

        # Act
        due = AnnouncementService.collect_due_games(TODAY)

        # Assert
        assert list(due) == ["fan@example.com"]
        days_before, games = due["fan@example.com"]
        assert days_before == settings.ANNOUNCEMENT_DAYS_AHEAD
        assert [d.game.id for d in games] == ["g1"]

    def test_custom_lead_time(self, subscribers, user_id, league):
        subscribers.tables["profiles"][0]["announcement_days_before"] = 1
        league.return_value = [game("g1", "13.03.2024"), game("g2", "15.03.2024")]

        due = AnnouncementService.collect_due_games(TODAY)

        assert [d.game.id for d in due["fan@example.com"][1]] == ["g1"]

    def test_games_fetched_once_per_team(self, subscribers, other_user_id, league):
        subscribers.tables["profiles"][1]["email_game_announcement_reminder"] = True
        league.return_value = [game("g1", "15.03.2024")]

        due = AnnouncementService.collect_due_games(TODAY)

        assert set(due) == {"fan@example.com", "quiet@example.com"}
        league.assert_called_once_with(Sport.UNIHOCKEY, "100", "452800")

    def test_league_failure_skips_team(self, subscribers, league):
        league.side_effect = SportsDataError("unihockey", "HTTP 500")

        assert AnnouncementService.collect_due_games(TODAY) == {}

    def test_no_slots(self, fake_db, league):
        assert AnnouncementService.collect_due_games(TODAY) == {}
        league.assert_not_called()


class TestSendGameAnnouncements:

    def test_sends_one_email_per_user(self, subscribers, league, mailbox):
        league.return_value = [game("g1", "15.03.2024")]

        stats = AnnouncementService.send_game_announcements(TODAY)

        assert stats == {"users_with_games": 1, "emails_sent": 1, "emails_failed": 0}
        to_email, subject, text, html_body = mailbox.call_args.args
        assert to_email == "fan@example.com"
        assert "/studio/unihockey/452800/100/g1" in text

    def test_mail_failure_is_counted(self, subscribers, league, mailbox):
        league.return_value = [game("g1", "15.03.2024")]
        mailbox.side_effect = MailerError("fan@example.com", "550 mailbox unavailable")

        stats = AnnouncementService.send_game_announcements(TODAY)

        assert stats["emails_failed"] == 1
        assert stats["emails_sent"] == 0


class TestMailer:

    def test_send_over_implicit_tls(self):
        with patch("smtplib.SMTP_SSL") as smtp_ssl:
            send_email("fan@example.com", "Hallo", "text", "<p>html</p>")

        server = smtp_ssl.return_value.__enter__.return_value
        server.login.assert_called_once_with(settings.SMTP_USER, settings.SMTP_PASS)
        message = server.send_message.call_args.args[0]
        assert message["To"] == "fan@example.com"
        assert message["From"] == settings.EMAIL_FROM
        assert len(message.get_payload()) == 2

    def test_starttls_on_other_ports(self):
        with patch.object(settings, "SMTP_PORT", 587), patch("smtplib.SMTP") as smtp:
            send_email("fan@example.com", "Hallo", "text")

        smtp.return_value.__enter__.return_value.starttls.assert_called_once()

    def test_smtp_error(self):
        with patch("smtplib.SMTP_SSL", side_effect=smtplib.SMTPConnectError(421, "busy")):
            with pytest.raises(MailerError):
                send_email("fan@example.com", "Hallo", "text")

    def test_not_configured(self):
        with patch.object(settings, "SMTP_HOST", ""):
            with pytest.raises(MailerError):
                send_email("fan@example.com", "Hallo", "text")
