"""Email transport backed by the SendGrid API."""
import logging
from typing import Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from secret_santa.core.config import settings
from secret_santa.errors import DeliveryError, NotifierNotConfiguredError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Anything that can deliver one message to one address."""

    def send(self, to_email: str, subject: str, text: str, html: str) -> None: ...


class SendGridMailer:
    """Deliver messages through SendGrid's v3 mail/send endpoint."""

    def __init__(self, api_key: str, from_email: str):
        if not api_key or not from_email:
            raise NotifierNotConfiguredError(
                "Email is not configured: set SENDGRID_API_KEY and EMAIL_FROM"
            )
        self.client = SendGridAPIClient(api_key)
        self.from_email = from_email

    def send(self, to_email: str, subject: str, text: str, html: str) -> None:
        message = Mail(
            from_email=self.from_email,
            to_emails=to_email,
            subject=subject,
            plain_text_content=text,
            html_content=html,
        )
        try:
            response = self.client.send(message)
        except Exception as e:
            # HTTP error statuses and network failures alike
            raise DeliveryError(str(e)) from e

        if response.status_code >= 300:
            raise DeliveryError(f"SendGrid responded with status {response.status_code}")
        logger.debug(f"SendGrid accepted message for {to_email}")


def get_mailer() -> Mailer:
    """Dependency returning the configured mailer."""
    return SendGridMailer(settings.sendgrid_api_key, settings.email_from)
