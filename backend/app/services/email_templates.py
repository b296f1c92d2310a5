"""
Email bodies for lead and confirmation messages.

Every user-supplied value is HTML-escaped before it goes into a template.
"""

from html import escape
from typing import Iterable, Tuple

ACCENT_COLOR = "#d1a340"


def _value(value) -> str:
    if value is None or value == "":
        return "N/A"
    return str(value)


def _dates(take_off_day, return_date) -> str:
    if return_date:
        return f"{take_off_day} to {return_date}"
    return f"{take_off_day} (one way)"


def _html_rows(rows: Iterable[Tuple[str, str]]) -> str:
    return "\n".join(
        f'<tr><td style="padding: 6px 12px; font-weight: bold;">{escape(label)}</td>'
        f'<td style="padding: 6px 12px;">{escape(value)}</td></tr>'
        for label, value in rows
    )


def _text_rows(rows: Iterable[Tuple[str, str]]) -> str:
    return "\n".join(f"{label}: {value}" for label, value in rows)


def trip_lead_email(trip) -> Tuple[str, str, str]:
    """Agency-facing lead. Returns (subject, text, html)."""
    subject = f"✈️ NEW TRIP LEAD: {trip.destination or 'Unspecified'} ({trip.full_name})"
    rows = [
        ("Request ID", _value(trip.id)),
        ("Traveler", _value(trip.full_name)),
        ("Email", _value(trip.email)),
        ("Phone", _value(trip.phone)),
        ("Destination", _value(trip.destination)),
        ("Departure City", _value(trip.departure_city)),
        ("Dates", _dates(trip.take_off_day, trip.return_date)),
        ("People", _value(trip.people)),
        ("Visa Type", _value(trip.visa_type)),
        ("Preferences", _value(trip.preferences)),
    ]
    text = "New Trip Request!\n\n" + _text_rows(rows)
    html = f"""
<div style="font-family: Arial, sans-serif; color: #333;">
    <h2>New Trip Request!</h2>
    <table style="border-collapse: collapse;">
{_html_rows(rows)}
    </table>
</div>
"""
    return subject, text, html


def trip_confirmation_email(trip, sender_name: str) -> Tuple[str, str, str]:
    """Customer-facing confirmation. Returns (subject, text, html)."""
    subject = f"Trip Request Received: {trip.destination}"
    rows = [
        ("Destination", _value(trip.destination)),
        ("Dates", _dates(trip.take_off_day, trip.return_date)),
        ("Travelers", _value(trip.people)),
        ("Preferences", trip.preferences or "None"),
    ]
    text = (
        f"Hi {trip.full_name},\n\n"
        f"We have received your request to plan a trip to {trip.destination}.\n"
        "Our travel specialists are reviewing your details and will get back to you "
        "shortly with a personalized itinerary.\n\n"
        f"{_text_rows(rows)}\n\n"
        f"Warm regards,\n{sender_name}"
    )
    html = f"""
<div style="font-family: Arial, sans-serif; color: #333;">
    <h1 style="color: {ACCENT_COLOR};">Thank you for choosing {escape(sender_name)}!</h1>
    <p>Hi {escape(trip.full_name)},</p>
    <p>We have received your request to plan a trip to <strong>{escape(trip.destination)}</strong>.</p>
    <p>Our travel specialists are reviewing your details and will get back to you shortly
    with a personalized itinerary.</p>
    <hr style="border: 0; border-top: 1px solid #eee;">
    <h3>Your Request Details:</h3>
    <table style="border-collapse: collapse;">
{_html_rows(rows)}
    </table>
    <p>Warm regards,<br>{escape(sender_name)}</p>
</div>
"""
    return subject, text, html


def contact_lead_email(contact) -> Tuple[str, str, str]:
    """Agency-facing contact form message. Returns (subject, text, html)."""
    subject = f"\U0001F4E9 New contact message from {contact.full_name}"
    rows = [
        ("Name", contact.full_name),
        ("Email", _value(contact.email)),
        ("Phone", _value(contact.phone)),
    ]
    text = f"{_text_rows(rows)}\n\nMessage:\n{contact.message}"
    html = f"""
<div style="font-family: Arial, sans-serif; color: #333;">
    <h2>New Contact Message</h2>
    <table style="border-collapse: collapse;">
{_html_rows(rows)}
    </table>
    <p style="white-space: pre-wrap;">{escape(contact.message)}</p>
</div>
"""
    return subject, text, html


def contact_acknowledgement_email(contact, sender_name: str) -> Tuple[str, str, str]:
    """Reply to the person who used the contact form. Returns (subject, text, html)."""
    subject = f"We received your message - {sender_name}"
    text = (
        f"Hi {contact.first_name},\n\n"
        "Thanks for reaching out. A member of our team will reply shortly.\n\n"
        f"Warm regards,\n{sender_name}"
    )
    html = f"""
<div style="font-family: Arial, sans-serif; color: #333;">
    <h2 style="color: {ACCENT_COLOR};">Thanks for reaching out!</h2>
    <p>Hi {escape(contact.first_name)},</p>
    <p>A member of our team will reply shortly.</p>
    <p>Warm regards,<br>{escape(sender_name)}</p>
</div>
"""
    return subject, text, html
