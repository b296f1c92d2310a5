"""
Tests for the best-effort email notifier.

Each send is independent, bounded by a timeout, and failures are
recorded in the result instead of raised.
"""

import asyncio
import json
from datetime import date, datetime

import httpx
import pytest

from backend.app.core.config import Settings
from backend.app.models.enums import TripStatus
from backend.app.schemas.contact import ContactMessage
from backend.app.schemas.trip_request import TripRequestResponse
from backend.app.services.email_notifier import (
    ConsoleEmailProvider,
    EmailProvider,
    OutgoingEmail,
    ResendEmailProvider,
    SmtpEmailProvider,
    TripNotifier,
    UnknownEmailProvider,
    build_email_provider,
    dispatch_new_request_notification,
    is_deliverable_address,
)

AGENCY = "leads@greaterandbetter.com"


def make_trip(**overrides):
    data = {
        "id": "trip-1",
        "user_id": None,
        "full_name": "Ann Lee",
        "email": "ann@example.com",
        "phone": None,
        "destination": "Accra",
        "departure_city": "Boston",
        "take_off_day": date(2025, 6, 1),
        "return_date": None,
        "people": 2,
        "visa_type": "Tourist",
        "preferences": None,
        "status": TripStatus.PENDING,
        "created_at": datetime(2025, 1, 1, 12, 0),
        "updated_at": datetime(2025, 1, 1, 12, 0),
    }
    data.update(overrides)
    return TripRequestResponse(**data)


def make_notifier(provider, **overrides):
    options = {
        "admin_email": AGENCY,
        "sender_email": "no-reply@greaterandbetter.com",
        "sender_name": "Greater & Better Travel",
        "timeout": 0.5,
    }
    options.update(overrides)
    return TripNotifier(provider=provider, **options)


class SlowProvider(EmailProvider):
    """Hangs on one recipient to exercise the timeout."""

    name = "slow"

    def __init__(self, slow_for):
        self.slow_for = slow_for
        self.sent = []

    async def send(self, message):
        if message.to == self.slow_for:
            await asyncio.sleep(5)
        self.sent.append(message.to)


@pytest.mark.asyncio
async def test_both_messages_sent(email_provider):
    result = await make_notifier(email_provider).notify_new_request(make_trip())

    assert result.agency_email.sent is True
    assert result.customer_email.sent is True
    assert set(email_provider.recipients()) == {AGENCY, "ann@example.com"}

    confirmation = next(m for m in email_provider.sent if m.to == "ann@example.com")
    assert confirmation.subject == "Trip Request Received: Accra"
    assert confirmation.sender == "Greater & Better Travel <no-reply@greaterandbetter.com>"


@pytest.mark.asyncio
async def test_result_serializes_for_logs(email_provider):
    result = await make_notifier(email_provider).notify_new_request(make_trip(email="ann@@example.com"))
    assert result.as_log_dict() == {
        "agencyEmail": {"sent": True},
        "customerEmail": {"sent": False, "error": "Invalid customer email address"},
    }


@pytest.mark.asyncio
async def test_customer_failure_does_not_affect_agency(email_provider):
    email_provider.fail_for = {"ann@example.com"}

    result = await make_notifier(email_provider).notify_new_request(make_trip())

    assert result.agency_email.sent is True
    assert result.customer_email.sent is False
    assert "550" in result.customer_email.error


@pytest.mark.asyncio
async def test_agency_failure_does_not_affect_customer(email_provider):
    email_provider.fail_for = {AGENCY}

    result = await make_notifier(email_provider).notify_new_request(make_trip())

    assert result.agency_email.sent is False
    assert result.customer_email.sent is True


@pytest.mark.asyncio
async def test_timeout_is_recorded_as_failure():
    provider = SlowProvider(slow_for=AGENCY)

    result = await make_notifier(provider, timeout=0.05).notify_new_request(make_trip())

    assert result.agency_email.sent is False
    assert "Timed out" in result.agency_email.error
    assert result.customer_email.sent is True
    assert provider.sent == ["ann@example.com"]


@pytest.mark.asyncio
async def test_missing_admin_address_is_configuration_error(email_provider):
    result = await make_notifier(email_provider, admin_email=None).notify_new_request(make_trip())

    assert result.agency_email.sent is False
    assert result.agency_email.error.startswith("ConfigurationError")
    assert result.customer_email.sent is True


@pytest.mark.asyncio
async def test_missing_sender_fails_both_without_raising(email_provider):
    result = await make_notifier(email_provider, sender_email=None).notify_new_request(make_trip())

    assert result.agency_email.sent is False
    assert result.customer_email.sent is False
    assert "SENDER_EMAIL" in result.agency_email.error
    assert email_provider.sent == []


@pytest.mark.asyncio
async def test_unconfigured_provider_is_recorded():
    provider = ResendEmailProvider(api_key=None, api_url="https://api.resend.test/emails")

    result = await make_notifier(provider).notify_new_request(make_trip())

    assert "EMAIL_API_KEY" in result.agency_email.error
    assert "EMAIL_API_KEY" in result.customer_email.error


@pytest.mark.asyncio
async def test_user_values_are_escaped_in_html(email_provider):
    trip = make_trip(full_name="<script>alert(1)</script>", preferences="Beach & sun")

    await make_notifier(email_provider).notify_new_request(trip)

    lead = next(m for m in email_provider.sent if m.to == AGENCY)
    assert "<script>" not in lead.html
    assert "&lt;script&gt;" in lead.html
    assert "Beach &amp; sun" in lead.html


@pytest.mark.asyncio
async def test_contact_message(email_provider):
    contact = ContactMessage(first_name="Ann", last_name="Lee", email="ann@example.com", message="Group tours?")

    result = await make_notifier(email_provider).notify_contact_message(contact)

    assert result.agency_email.sent is True
    assert result.customer_email.sent is True
    lead = next(m for m in email_provider.sent if m.to == AGENCY)
    assert "Ann Lee" in lead.subject
    assert "Group tours?" in lead.text


@pytest.mark.asyncio
async def test_dispatch_swallows_crashes(mocker):
    notifier = make_notifier(ConsoleEmailProvider())
    mocker.patch.object(notifier, "notify_new_request", side_effect=RuntimeError("boom"))

    assert await dispatch_new_request_notification(notifier, make_trip()) is None


@pytest.mark.asyncio
async def test_console_provider_logs(caplog):
    caplog.set_level("INFO")
    result = await make_notifier(ConsoleEmailProvider()).notify_new_request(make_trip())

    assert result.agency_email.sent is True
    assert "NEW TRIP LEAD" in caplog.text


@pytest.mark.asyncio
async def test_resend_provider_posts_message():
    captured = {}

    def handler(request):
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email-1"})

    provider = ResendEmailProvider(
        api_key="re_test",
        api_url="https://api.resend.test/emails",
        transport=httpx.MockTransport(handler),
    )
    await provider.send(OutgoingEmail(sender="a@example.com", to="b@example.com", subject="Hi", text="Hello"))

    assert captured["auth"] == "Bearer re_test"
    assert captured["body"]["to"] == ["b@example.com"]
    assert "html" not in captured["body"]


@pytest.mark.asyncio
async def test_resend_provider_error_is_recorded():
    provider = ResendEmailProvider(
        api_key="re_test",
        api_url="https://api.resend.test/emails",
        transport=httpx.MockTransport(lambda request: httpx.Response(429, json={"message": "quota"})),
    )

    result = await make_notifier(provider).notify_new_request(make_trip())

    assert result.agency_email.sent is False
    assert result.agency_email.error.startswith("HTTPStatusError")


@pytest.mark.asyncio
async def test_smtp_provider_uses_ssl_and_login(mocker):
    smtp_ssl = mocker.patch("backend.app.services.email_notifier.smtplib.SMTP_SSL")
    server = smtp_ssl.return_value.__enter__.return_value
    provider = SmtpEmailProvider(host="smtp.example.com", port=465, username="user", password="secret")

    await provider.send(OutgoingEmail(sender="a@example.com", to="b@example.com", subject="Hi", text="Hello", html="<p>Hello</p>"))

    smtp_ssl.assert_called_once_with("smtp.example.com", 465, timeout=10.0)
    server.login.assert_called_once_with("user", "secret")
    sent = server.send_message.call_args.args[0]
    assert sent["To"] == "b@example.com"


@pytest.mark.asyncio
async def test_smtp_provider_requires_host():
    result = await make_notifier(SmtpEmailProvider(host=None, port=465)).notify_new_request(make_trip())
    assert "SMTP_HOST" in result.agency_email.error


@pytest.mark.parametrize("name,expected", [
    ("console", ConsoleEmailProvider),
    ("SMTP", SmtpEmailProvider),
    ("resend", ResendEmailProvider),
    ("carrier-pigeon", UnknownEmailProvider),
])
def test_build_email_provider(name, expected):
    assert isinstance(build_email_provider(Settings(email_provider=name)), expected)


@pytest.mark.parametrize("address,ok", [
    ("ann@example.com", True),
    ("ann@@example.com", False),
    ("ann@example", False),
    ("", False),
    (None, False),
])
def test_is_deliverable_address(address, ok):
    assert is_deliverable_address(address) is ok
