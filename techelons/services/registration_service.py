"""
Registration service — the fest registration workflow.

Submission flow:
  RECEIVED → VALIDATED → POLICY_CHECKED → DUPLICATE_FOUND (terminal)
                                        → PERSISTED → NOTIFIED → COMPLETE
  Any validation or policy failure ends in REJECTED and raises.

Exactly one registration exists per (event_id, main participant email).
The pre-write duplicate check is an optimisation; the store's unique
constraint is the final arbiter, and a uniqueness violation at write time
is answered exactly like a pre-check duplicate.

All functions receive an AsyncSession parameter and are plain async
functions (no class coupling) for easy unit testing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.errors import (
    EventNotFoundError,
    FestDataMissingError,
    PolicyViolationError,
    RegistrationClosedError,
    RegistrationConflictError,
    RegistrationNotFoundError,
    StorageError,
)
from techelons.models.models import Event, FestInfo, Registration
from techelons.services.event_service import get_event, get_fest_info
from techelons.services.notification_service import notify_registration_confirmed
from techelons.services.token_service import encode_registration_token
from techelons.validators import RegistrationData, normalize_email, validate_registration

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Registration successful"
ALREADY_REGISTERED_MESSAGE = "You are already registered for this event"


class SubmissionState:
    RECEIVED        = "received"
    VALIDATED       = "validated"
    POLICY_CHECKED  = "policy_checked"
    DUPLICATE_FOUND = "duplicate_found"
    PERSISTED       = "persisted"
    NOTIFIED        = "notified"
    COMPLETE        = "complete"
    REJECTED        = "rejected"


@dataclass
class SubmissionOutcome:
    """
    Terminal result of a submission. Both success paths carry the same
    token shape; ``already_registered`` tells them apart.
    """

    state: str
    registration: Registration
    token: str
    already_registered: bool
    email_sent: Optional[bool] = None

    def to_response(self) -> Dict[str, Any]:
        if self.already_registered:
            return {
                "alreadyRegistered": True,
                "registrationToken": self.token,
                "message": ALREADY_REGISTERED_MESSAGE,
            }
        return {
            "success": True,
            "registrationToken": self.token,
            "message": REGISTERED_MESSAGE,
            "emailSent": bool(self.email_sent),
        }


# ── Lookups ───────────────────────────────────────────────────────────────────

async def find_registration(
    session: AsyncSession,
    event_id: str,
    email: str,
) -> Optional[Registration]:
    """Existing registration for (event, main participant email), case-insensitive."""
    result = await session.execute(
        select(Registration).where(
            Registration.event_id == event_id,
            Registration.main_email == normalize_email(email),
        )
    )
    return result.scalar_one_or_none()


async def get_registration_details(
    session: AsyncSession,
    email: str,
    event_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Registration of the given main participant plus its event's metadata.
    Without event_id the most recent registration is returned.
    """
    q = select(Registration).where(Registration.main_email == normalize_email(email))
    if event_id:
        q = q.where(Registration.event_id == event_id)
    q = q.order_by(Registration.created_at.desc(), Registration.id.desc()).limit(1)
    result = await session.execute(q)
    registration = result.scalar_one_or_none()
    if registration is None:
        raise RegistrationNotFoundError()

    event = await get_event(session, registration.event_id)
    return {
        "registration": registration.to_dict(),
        "event": event.to_dict() if event else None,
    }


# ── Policy ────────────────────────────────────────────────────────────────────

def check_event_open(fest: FestInfo, event: Event) -> None:
    if not fest.registration_enabled:
        raise RegistrationClosedError("Registration for Techelons is currently closed")
    if not event.accepts_registrations:
        raise RegistrationClosedError(
            f"Registration is closed for this event. Current status: {event.registration_status}"
        )


def check_team_size(event: Event, data: RegistrationData) -> None:
    """Team size is recomputed from the submitted members, never taken from the client."""
    size = data.team_size
    if not event.is_team_event:
        if size > 1:
            raise PolicyViolationError(
                "This event only accepts individual registrations", code="TEAM_SIZE"
            )
        return
    if size < event.team_min:
        raise PolicyViolationError(
            f"Team must have at least {event.team_min} members", code="TEAM_SIZE"
        )
    if size > event.team_max:
        raise PolicyViolationError(
            f"Team cannot have more than {event.team_max} members", code="TEAM_SIZE"
        )


def check_internal_duplicates(data: RegistrationData) -> None:
    """
    No two people in one submission may share an email or a phone number.
    Members are checked in submission order, email before phone, so the
    first collision in array order is the one reported.
    """
    emails = {data.main_participant.email}
    phones = {data.main_participant.phone}
    for member in data.team_members:
        if member.email in emails:
            raise PolicyViolationError(
                f"You cannot use the same email address ({member.email}) for multiple team "
                f"members. Each team member must have a unique email address.",
                code="DUPLICATE_EMAIL",
            )
        if member.phone in phones:
            raise PolicyViolationError(
                f"You cannot use the same phone number ({member.phone}) for multiple team "
                f"members. Each team member must have a unique phone number.",
                code="DUPLICATE_PHONE",
            )
        emails.add(member.email)
        phones.add(member.phone)


def _describe(registration: Registration, event: Event) -> str:
    if registration.is_team_event:
        return f'for "{event.name}" as part of team "{registration.team_name or "Unnamed Team"}"'
    return f'for "{event.name}" as an individual participant'


async def check_members_already_registered(
    session: AsyncSession,
    event: Event,
    data: RegistrationData,
) -> None:
    """
    Reject a team whose members already appear (as leader or member) in
    another registration for the same event.
    """
    if not data.team_members:
        return
    result = await session.execute(
        select(Registration).where(Registration.event_id == event.id)
    )
    member_emails = [m.email for m in data.team_members]
    member_phones = [m.phone for m in data.team_members]
    for other in result.scalars():
        people = other.participants()
        taken_emails = {normalize_email(p.get("email", "")) for p in people}
        taken_phones = {p.get("phone") for p in people}
        for email in member_emails:
            if email in taken_emails:
                raise PolicyViolationError(
                    f"The email address {email} is already registered {_describe(other, event)}.",
                    code="MEMBER_ALREADY_REGISTERED",
                )
        for phone in member_phones:
            if phone in taken_phones:
                raise PolicyViolationError(
                    f"The phone number {phone} is already registered {_describe(other, event)}.",
                    code="MEMBER_ALREADY_REGISTERED",
                )


# ── Submission ────────────────────────────────────────────────────────────────

def _transition(submission_id: str, old: str, new: str) -> str:
    logger.debug("Submission %s: %s -> %s", submission_id, old, new)
    return new


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate" in text


def _duplicate_outcome(existing: Registration) -> SubmissionOutcome:
    logger.info(
        "Already registered: event=%s email=%s (registration %s)",
        existing.event_id, existing.main_email, existing.id,
    )
    return SubmissionOutcome(
        state=SubmissionState.DUPLICATE_FOUND,
        registration=existing,
        token=encode_registration_token(existing.main_email),
        already_registered=True,
    )


def _build_registration(event: Event, data: RegistrationData) -> Registration:
    return Registration(
        event_id=event.id,
        event_name=event.name,
        is_team_event=event.is_team_event,
        team_name=data.team_name if event.is_team_event else None,
        main_email=data.main_participant.email,
        main_participant=data.main_participant.model_dump(by_alias=True, exclude_none=True),
        team_members=[m.model_dump(by_alias=True, exclude_none=True) for m in data.team_members],
        college_id_url=data.college_id_url,
        query=data.query,
        created_at=datetime.now(),
    )


async def _persist(
    session: AsyncSession,
    registration: Registration,
) -> Optional[Registration]:
    """
    Write the registration. Returns None when written, or the conflicting
    existing record when the unique key was taken in the meantime.
    """
    event_id, email = registration.event_id, registration.main_email
    session.add(registration)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Write-time conflict for event=%s email=%s: %s", event_id, email, exc.orig)
        existing = await find_registration(session, event_id, email)
        if existing is not None:
            return existing
        if _is_unique_violation(exc):
            raise RegistrationConflictError() from exc
        logger.error("Integrity error persisting registration: %s", exc)
        raise StorageError() from exc
    return None


async def submit_registration(
    session: AsyncSession,
    raw: Any,
    mailer,
) -> SubmissionOutcome:
    """
    Validate, police, de-duplicate, persist and notify one submission.

    Raises
    ------
    RegistrationValidationError : malformed payload (every violation listed)
    FestDataMissingError / EventNotFoundError : nothing to register for
    RegistrationClosedError     : fest or event not open
    PolicyViolationError        : team size or duplicate people
    RegistrationConflictError   : unresolvable uniqueness conflict at write time
    StorageError                : the store failed; safe to retry
    """
    try:
        return await _submit(session, raw, mailer)
    except SQLAlchemyError as exc:
        logger.exception("Storage failure during registration: %s", exc)
        await session.rollback()
        raise StorageError() from exc


async def _submit(session: AsyncSession, raw: Any, mailer) -> SubmissionOutcome:
    event_id = raw.get("eventId") if isinstance(raw, dict) else None
    sid = str(event_id or "?")
    state = SubmissionState.RECEIVED

    event = None
    if isinstance(event_id, str) and event_id.strip():
        event = await get_event(session, event_id.strip())

    try:
        data = validate_registration(raw, event)
        state = _transition(sid, state, SubmissionState.VALIDATED)

        fest = await get_fest_info(session)
        if fest is None:
            raise FestDataMissingError()
        if event is None:
            raise EventNotFoundError(data.event_id)

        check_event_open(fest, event)
        check_team_size(event, data)
        check_internal_duplicates(data)
        state = _transition(sid, state, SubmissionState.POLICY_CHECKED)
    except Exception:
        _transition(sid, state, SubmissionState.REJECTED)
        raise

    existing = await find_registration(session, event.id, data.main_participant.email)
    if existing is not None:
        _transition(sid, state, SubmissionState.DUPLICATE_FOUND)
        return _duplicate_outcome(existing)

    await check_members_already_registered(session, event, data)

    registration = _build_registration(event, data)
    existing = await _persist(session, registration)
    if existing is not None:
        _transition(sid, state, SubmissionState.DUPLICATE_FOUND)
        return _duplicate_outcome(existing)
    state = _transition(sid, state, SubmissionState.PERSISTED)
    logger.info(
        "New registration %s: event=%s email=%s team_size=%d",
        registration.id, registration.event_id, registration.main_email, registration.team_size,
    )

    email_sent = await notify_registration_confirmed(mailer, registration, event)
    state = _transition(sid, state, SubmissionState.NOTIFIED)
    _transition(sid, state, SubmissionState.COMPLETE)

    return SubmissionOutcome(
        state=SubmissionState.COMPLETE,
        registration=registration,
        token=encode_registration_token(registration.main_email),
        already_registered=False,
        email_sent=email_sent,
    )


# ── Admin tooling ─────────────────────────────────────────────────────────────

async def list_registrations(
    session: AsyncSession,
    event_id: Optional[str] = None,
) -> List[Registration]:
    """Newest first."""
    q = select(Registration).order_by(Registration.created_at.desc(), Registration.id.desc())
    if event_id:
        q = q.where(Registration.event_id == event_id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def delete_registration(session: AsyncSession, registration_id: int) -> bool:
    registration = await session.get(Registration, registration_id)
    if registration is None:
        return False
    await session.delete(registration)
    await session.flush()
    logger.info("Registration %s deleted", registration_id)
    return True


async def flush_registrations(session: AsyncSession) -> int:
    result = await session.execute(delete(Registration))
    logger.warning("All registrations flushed: %d removed", result.rowcount)
    return result.rowcount
