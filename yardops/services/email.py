"""Outgoing email for notifications.

Bodies are rendered from Jinja2 templates under ``templates/email`` and sent
over SMTP. Callers treat delivery as best effort.
"""

import logging
import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from yardops.core.config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

_TAG_RE = re.compile(r"<[^>]*>")


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the SMTP server."""


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_email(template_name: str, context: dict[str, Any]) -> str:
    """Render an email template with the given context."""
    return _env.get_template(template_name).render(**context)


class EmailSender:
    """SMTP sender configured from application settings."""

    def __init__(self, settings: Settings) -> None:
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM or settings.SMTP_USER
        self.starttls = settings.SMTP_STARTTLS

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    def send_email(self, to: str, subject: str, html_body: str) -> bool:
        """
        Send an HTML email with a plain-text alternative.

        Args:
            to: Recipient address
            subject: Subject line
            html_body: HTML content

        Returns:
            True if sent, False if SMTP is not configured

        Raises:
            EmailDeliveryError: If the SMTP exchange fails

        """
        if not self.is_configured:
            logger.warning("SMTP credentials not configured, skipping email to %s", to)
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to
        msg.attach(MIMEText(_TAG_RE.sub("", html_body), "plain"))
        msg.attach(MIMEText(html_body, "html"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                if self.starttls:
                    server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Failed to send email to {to}: {exc}") from exc

        logger.info("Email sent to %s: %s", to, subject)
        return True
