# =============================================================================
# lib/mailer.py - SMTP Email Sending
# =============================================================================
# Thin wrapper around smtplib for transactional mail (game announcements).
# Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
#
# Usage:
#   from lib.mailer import send_email
#   send_email("fan@example.com", "Subject", text, html)
# =============================================================================

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class MailerError(Exception):
    """Raised when an email can't be delivered to the SMTP server."""

    def __init__(self, recipient: str, error: str):
        super().__init__(f"Failed to send email to {recipient}: {error}")
        self.recipient = recipient
        self.error = error


def build_message(
    to_email: str,
    subject: str,
    text_content: str,
    html_content: str | None = None,
) -> MIMEMultipart:
    """Multipart/alternative message with a plain text and optional HTML part."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to_email

    msg.attach(MIMEText(text_content, "plain", "utf-8"))
    if html_content:
        msg.attach(MIMEText(html_content, "html", "utf-8"))
    return msg


def send_email(
    to_email: str,
    subject: str,
    text_content: str,
    html_content: str | None = None,
) -> None:
    """
    Send one email through the configured SMTP server.

    A new connection is opened per message.

    Raises:
        MailerError: If SMTP isn't configured or the server rejects the message
    """
    if not settings.smtp_configured:
        raise MailerError(to_email, "SMTP is not configured")

    msg = build_message(to_email, subject, text_content, html_content)

    try:
        if settings.SMTP_PORT == IMPLICIT_TLS_PORT:
            with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
                server.login(settings.SMTP_USER, settings.SMTP_PASS)
                server.send_message(msg)
        else:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
                server.starttls()
                server.login(settings.SMTP_USER, settings.SMTP_PASS)
                server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise MailerError(to_email, str(e))

    logger.info(f"Email sent to {to_email}")
