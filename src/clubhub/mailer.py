import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CLUB_NAME = "GenX Developers Club"


class MailSettings(BaseSettings):
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    from_address: str = ""
    starttls: bool = True
    timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(env_prefix="SMTP_", env_file=".env", extra="ignore")

    @property
    def configured(self) -> bool:
        return bool(self.host)


class Mailer:
    """Sends HTML e-mail over SMTP."""

    def __init__(self, settings: MailSettings | None = None):
        self.settings = settings or MailSettings()

    def build_message(self, to_email: str, subject: str, html_content: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.from_address or self.settings.username
        msg["To"] = to_email
        msg.attach(MIMEText(html_content, "html"))
        return msg

    def send(self, to_email: str, subject: str, html_content: str) -> bool:
        """Send one message. Returns False when SMTP is not configured."""
        if not self.settings.configured:
            logger.warning("SMTP is not configured, skipping e-mail to %s", to_email)
            return False

        msg = self.build_message(to_email, subject, html_content)
        with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.settings.timeout_seconds) as server:
            if self.settings.starttls:
                server.starttls()
            if self.settings.username:
                server.login(self.settings.username, self.settings.password)
            server.send_message(msg)
        logger.info("Sent e-mail %r to %s", subject, to_email)
        return True


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    return Mailer()


def render_event_confirmation(event: dict, registration: dict) -> tuple[str, str]:
    """Build the subject and HTML body of an event registration confirmation."""
    subject = f"Registration Confirmation - {event['title']}"
    html = f"""
    <h2>Event Registration Confirmation</h2>
    <p>Dear {registration['name']},</p>
    <p>Thank you for registering for {event['title']}!</p>

    <h3>Event Details:</h3>
    <p>Date: {event['date']:%d %b %Y} - {event['end_date']:%d %b %Y}</p>
    <p>Venue: {event['venue']}</p>

    <h3>Your Registration Details:</h3>
    <p>Name: {registration['name']}</p>
    <p>Registration No: {registration['registration_no']}</p>
    <p>Email: {registration['email']}</p>

    <p>Please keep this email as your ticket for the event.</p>

    <p>Best regards,<br>{CLUB_NAME}</p>
    """
    return subject, html
