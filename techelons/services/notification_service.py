"""
Participant notification service.

After a new registration is persisted, every participant receives a
confirmation email. Delivery is best-effort: failures are logged with the
recipient and the transport error, never raised, because the registration
is already stored by the time we get here.
"""
from __future__ import annotations

import logging
from datetime import datetime
from html import escape
from typing import Any, Dict, Iterable, List, Optional

from techelons.models.models import Event, Registration, WorkshopRegistration
from techelons.services.mailer import MailDeliveryError

logger = logging.getLogger(__name__)


def _items(tag: str, values: Iterable[str]) -> str:
    rows = "".join(f"<li>{escape(str(v))}</li>" for v in values)
    return f"<{tag}>{rows}</{tag}>"


def _section(title: str, body: str) -> str:
    return f"<h2>{escape(title)}</h2>{body}"


def render_registration_email(
    registration: Registration,
    event: Event,
    recipient: Dict[str, Any],
    is_team_member: bool = False,
) -> str:
    """HTML confirmation for one recipient of a fest registration."""
    team = escape(registration.team_name or "N/A")
    if is_team_member:
        intro = f"<p>You have been registered as a team member for team <strong>{team}</strong>.</p>"
    elif registration.is_team_event:
        intro = f"<p>You have successfully registered your team <strong>{team}</strong>.</p>"
    else:
        intro = "<p>Your registration has been confirmed.</p>"

    details = [f"<li><strong>Event:</strong> {escape(event.name)}</li>"]
    if event.tagline:
        details.append(f"<li><strong>Tagline:</strong> <em>{escape(event.tagline)}</em></li>")
    details += [
        f"<li><strong>Date:</strong> {escape(event.date or 'TBA')}</li>",
        f"<li><strong>Time:</strong> {escape(event.time or 'TBA')}</li>",
        f"<li><strong>Venue:</strong> {escape(event.venue or 'TBA')}</li>",
    ]
    if event.category:
        details.append(f"<li><strong>Category:</strong> {escape(event.category)}</li>")

    parts: List[str] = [
        f"<p>Dear {escape(recipient.get('name', 'Participant'))},</p>",
        f"<p>Thank you for registering for <strong>{escape(event.name)}</strong> at Techelons!</p>",
        intro,
        _section("Event Details", f"<ul>{''.join(details)}</ul>"),
    ]
    if registration.is_team_event and not is_team_member:
        parts.append(
            "<h3>Team Information</h3>"
            f"<p><strong>Team Name:</strong> {team}</p>"
            f"<p><strong>Team Size:</strong> {registration.team_size}</p>"
        )
    if event.instructions:
        parts.append(_section("Instructions", f"<p>{escape(event.instructions)}</p>"))
    if event.rules:
        parts.append(_section("Rules", _items("ul", event.rules)))
    if event.competition_structure:
        parts.append(_section("Competition Structure", _items("ol", event.competition_structure)))
    if event.evaluation_criteria:
        parts.append(_section("Evaluation Criteria", _items("ul", event.evaluation_criteria)))
    if event.whatsapp_group:
        parts.append(
            "<p>Join our WhatsApp group for updates and communication:</p>"
            f'<p><a href="{escape(event.whatsapp_group)}">Join WhatsApp Group</a></p>'
        )
    if event.coordinators:
        coordinators = "".join(
            f"<li><strong>{escape(c.get('name', ''))}</strong> - "
            f"{escape(c.get('phone', ''))} ({escape(c.get('email', ''))})</li>"
            for c in event.coordinators
        )
        parts.append(
            "<p>If you have any questions, please feel free to contact the event coordinators:</p>"
            f"<ul>{coordinators}</ul>"
        )
    parts.append("<p>We look forward to seeing you at the event!</p><p>Best regards,<br>Techelons Team</p>")
    parts.append(
        "<p><small>This is an automated email. Please do not reply to this message. "
        f"&copy; {datetime.now().year} Techelons, Shivaji College.</small></p>"
    )
    return "<html><body>" + "".join(parts) + "</body></html>"


async def _deliver(mailer, to_email: str, subject: str, html: str) -> bool:
    try:
        await mailer.send(to_email, subject, html)
    except MailDeliveryError as e:
        logger.warning("Could not send confirmation to %s (%s): %s", to_email, subject, e)
        return False
    return True


async def notify_registration_confirmed(
    mailer,
    registration: Registration,
    event: Event,
) -> bool:
    """
    Email the main participant and, for team registrations, each team
    member individually. Every recipient is attempted even if an earlier
    one failed. Returns True only if all messages were delivered.

    ``mailer`` must expose ``async send(to_email, subject, html_content)``
    and report every delivery problem as MailDeliveryError; anything else
    it raises propagates to the caller.
    """
    subject = f"Registration Confirmation: {event.name} - Techelons"
    recipients = [(registration.main_participant, False)]
    if registration.is_team_event:
        recipients += [(member, True) for member in registration.team_members or []]

    delivered = 0
    for person, is_member in recipients:
        html = render_registration_email(registration, event, person, is_team_member=is_member)
        if await _deliver(mailer, person["email"], subject, html):
            delivered += 1

    if delivered < len(recipients):
        logger.warning(
            "Registration %s for %s: %d of %d confirmation emails failed",
            registration.id, registration.event_id, len(recipients) - delivered, len(recipients),
        )
    return delivered == len(recipients)


def render_workshop_email(registration: WorkshopRegistration, workshop: Dict[str, Any]) -> str:
    details = "".join(
        f"<p><strong>{escape(str(d.get('label', '')))}:</strong> {escape(str(d.get('value', '')))}</p>"
        for d in workshop.get("details", [])
    )
    link: Optional[str] = workshop.get("whatsappGroupLink")
    whatsapp = (
        f'<p>Please join our WhatsApp group for further updates: '
        f'<a href="{escape(link)}">Join WhatsApp Group</a></p>'
        if link else ""
    )
    return (
        "<html><body>"
        "<h1>Workshop Registration Confirmation</h1>"
        f"<p>Dear {escape(registration.name)},</p>"
        f"<p>Thank you for registering for the {escape(workshop.get('title', 'workshop'))} workshop. "
        "Your registration has been confirmed.</p>"
        f"<h2>Workshop Details:</h2>{details}"
        f"{whatsapp}"
        "<p>If you have any questions, feel free to contact us.</p>"
        "<p>Best regards,<br>Websters - Shivaji College</p>"
        "</body></html>"
    )


async def notify_workshop_registration(
    mailer,
    registration: WorkshopRegistration,
    workshop: Dict[str, Any],
) -> bool:
    subject = (workshop.get("emailNotification") or {}).get(
        "subject", "Workshop Registration Confirmation"
    )
    html = render_workshop_email(registration, workshop)
    return await _deliver(mailer, registration.email, subject, html)
