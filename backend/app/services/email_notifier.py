"""
Email notifier for new trip requests and contact messages.

Sending is best effort: every message is bounded by a timeout, failures
are recorded per message in a NotificationResult, and nothing here ever
raises into the request that triggered it.

Providers are interchangeable and picked with EMAIL_PROVIDER:
    console  - log the message instead of sending (development default)
    smtp     - plain SMTP / SMTPS via smtplib, run in a worker thread
    resend   - Resend HTTP API via httpx
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

import httpx
from email_validator import EmailNotValidError, validate_email

from backend.app.core.config import Settings, settings
from backend.app.core.exceptions import ConfigurationError
from backend.app.schemas.notification import DeliveryStatus, NotificationResult
from backend.app.services.email_templates import (
    contact_acknowledgement_email,
    contact_lead_email,
    trip_confirmation_email,
    trip_lead_email,
)

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    """A rendered message ready for a provider."""
    sender: str
    to: str
    subject: str
    text: str
    html: Optional[str] = None


class EmailProvider(ABC):
    """One way of actually delivering an email."""

    name = "base"

    def check_configuration(self) -> None:
        """Raise ConfigurationError when required settings are missing."""

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> None:
        """Deliver the message or raise."""


class ConsoleEmailProvider(EmailProvider):
    """Logs messages instead of sending them."""

    name = "console"

    async def send(self, message: OutgoingEmail) -> None:
        logger.info(
            "[console email] from=%s to=%s subject=%s\n%s",
            message.sender, message.to, message.subject, message.text
        )


class SmtpEmailProvider(EmailProvider):
    """Sends through an SMTP server; smtplib runs in a worker thread."""

    name = "smtp"

    def __init__(self, host: Optional[str], port: int, username: Optional[str] = None,
                 password: Optional[str] = None, use_ssl: bool = True, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.timeout = timeout

    def check_configuration(self) -> None:
        if not self.host:
            raise ConfigurationError("SMTP_HOST is not configured", setting="smtp_host")

    def _send_sync(self, message: OutgoingEmail) -> None:
        msg = MIMEMultipart("alternative")
        msg["From"] = message.sender
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg.attach(MIMEText(message.text, "plain", "utf-8"))
        if message.html:
            msg.attach(MIMEText(message.html, "html", "utf-8"))

        if self.use_ssl:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                # Only use STARTTLS and login if credentials are provided
                if self.username and self.password:
                    server.starttls()
                    server.login(self.username, self.password)
                server.send_message(msg)

    async def send(self, message: OutgoingEmail) -> None:
        await asyncio.to_thread(self._send_sync, message)


class ResendEmailProvider(EmailProvider):
    """Sends through the Resend transactional email API."""

    name = "resend"

    def __init__(self, api_key: Optional[str], api_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    def check_configuration(self) -> None:
        if not self.api_key:
            raise ConfigurationError("EMAIL_API_KEY is not configured", setting="email_api_key")

    async def send(self, message: OutgoingEmail) -> None:
        payload = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text,
        }
        if message.html:
            payload["html"] = message.html

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            response = await client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()


class UnknownEmailProvider(EmailProvider):
    """Placeholder for an EMAIL_PROVIDER value we do not recognise."""

    def __init__(self, name: str):
        self.name = name

    def check_configuration(self) -> None:
        raise ConfigurationError(f"Unknown EMAIL_PROVIDER '{self.name}'", setting="email_provider")

    async def send(self, message: OutgoingEmail) -> None:
        self.check_configuration()


def build_email_provider(config: Settings) -> EmailProvider:
    """Pick the provider named by EMAIL_PROVIDER."""
    name = (config.email_provider or "").strip().lower()
    if name == "console":
        return ConsoleEmailProvider()
    if name == "smtp":
        return SmtpEmailProvider(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_ssl=config.smtp_use_ssl,
            timeout=config.email_timeout_seconds,
        )
    if name == "resend":
        return ResendEmailProvider(
            api_key=config.email_api_key,
            api_url=config.email_api_url,
            timeout=config.email_timeout_seconds,
        )
    return UnknownEmailProvider(name)


def is_deliverable_address(address: Optional[str]) -> bool:
    """Syntax-only check of a recipient address; no DNS lookups."""
    if not address:
        return False
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class TripNotifier:
    """
    Sends the agency lead and the customer confirmation for a trip request.

    Both sends are attempted independently; the outcome of one never
    affects the other.
    """

    def __init__(self, provider: EmailProvider, admin_email: Optional[str], sender_email: Optional[str],
                 sender_name: str = "", timeout: float = 10.0):
        self.provider = provider
        self.admin_email = admin_email
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "TripNotifier":
        return cls(
            provider=build_email_provider(config),
            admin_email=config.admin_email,
            sender_email=config.sender_email,
            sender_name=config.sender_name,
            timeout=config.email_timeout_seconds,
        )

    def _sender(self) -> str:
        if not self.sender_email:
            raise ConfigurationError("SENDER_EMAIL is not configured", setting="sender_email")
        return formataddr((self.sender_name, self.sender_email)) if self.sender_name else self.sender_email

    async def _deliver(self, kind: str, to: Optional[str], subject: str, text: str, html: str) -> DeliveryStatus:
        try:
            self.provider.check_configuration()
            if not to:
                raise ConfigurationError(f"No recipient for {kind} email")
            message = OutgoingEmail(sender=self._sender(), to=to, subject=subject, text=text, html=html)
            await asyncio.wait_for(self.provider.send(message), timeout=self.timeout)
        except ConfigurationError as e:
            logger.warning("%s email not sent: configuration error: %s", kind, e.message)
            return DeliveryStatus.failed(f"ConfigurationError: {e.message}")
        except asyncio.TimeoutError:
            logger.warning("%s email to %s timed out after %ss", kind, to, self.timeout)
            return DeliveryStatus.failed(f"Timed out after {self.timeout}s")
        except Exception as e:
            logger.warning("%s email to %s failed: %s: %s", kind, to, type(e).__name__, e)
            return DeliveryStatus.failed(f"{type(e).__name__}: {e}")

        logger.info("%s email sent to %s via %s", kind, to, self.provider.name)
        return DeliveryStatus.ok()

    async def _notify(self, lead, confirmation, customer_address: Optional[str]) -> NotificationResult:
        agency_task = self._deliver("Agency", self.admin_email, *lead)

        if is_deliverable_address(customer_address):
            customer_task = self._deliver("Customer", customer_address, *confirmation)
            agency_status, customer_status = await asyncio.gather(agency_task, customer_task)
        else:
            agency_status = await agency_task
            customer_status = DeliveryStatus.failed("Invalid customer email address")

        return NotificationResult(agency_email=agency_status, customer_email=customer_status)

    async def notify_new_request(self, trip) -> NotificationResult:
        """
        Send the lead to the agency and the confirmation to the traveler.

        Must only be called once the trip request has been committed.
        """
        return await self._notify(
            trip_lead_email(trip),
            trip_confirmation_email(trip, self.sender_name),
            trip.email,
        )

    async def notify_contact_message(self, contact) -> NotificationResult:
        """Forward a contact form message to the agency and acknowledge it."""
        return await self._notify(
            contact_lead_email(contact),
            contact_acknowledgement_email(contact, self.sender_name),
            contact.email,
        )


def get_notifier() -> TripNotifier:
    """FastAPI dependency; override in tests to capture outgoing mail."""
    return TripNotifier.from_settings(settings)


async def dispatch_new_request_notification(notifier: TripNotifier, trip) -> Optional[NotificationResult]:
    """
    Background unit of work for a committed trip request.

    Runs after the response has been sent and has its own error boundary.
    """
    try:
        result = await notifier.notify_new_request(trip)
    except Exception:
        logger.exception("Notification for trip request %s crashed", getattr(trip, "id", None))
        return None

    logger.info("Notification result for trip request %s: %s", trip.id, result.as_log_dict())
    return result


async def dispatch_contact_notification(notifier: TripNotifier, contact) -> Optional[NotificationResult]:
    """Background unit of work for a contact form message."""
    try:
        result = await notifier.notify_contact_message(contact)
    except Exception:
        logger.exception("Contact notification from %s crashed", getattr(contact, "email", None))
        return None

    logger.info("Contact notification result for %s: %s", contact.email, result.as_log_dict())
    return result
