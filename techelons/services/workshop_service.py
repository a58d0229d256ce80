"""
Workshop service — single-participant workshop sign-ups.

A person may hold at most one workshop registration, identified by email
or phone. Repeating a sign-up returns the existing registration's token
instead of failing, the same way fest registrations behave.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.errors import RegistrationClosedError, RegistrationConflictError, StorageError
from techelons.models.models import WorkshopRegistration
from techelons.services.content_service import get_workshop_config
from techelons.services.notification_service import notify_workshop_registration
from techelons.services.token_service import encode_registration_token
from techelons.validators import WorkshopRegistrationData, validate_workshop_registration

logger = logging.getLogger(__name__)


@dataclass
class WorkshopOutcome:
    registration: WorkshopRegistration
    token: str
    already_registered: bool
    whatsapp_link: Optional[str] = None
    email_sent: Optional[bool] = None

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": True,
            "registrationToken": self.token,
            "whatsappLink": self.whatsapp_link,
        }
        if self.already_registered:
            body["alreadyRegistered"] = True
            body["message"] = "You are already registered for this workshop"
        else:
            body["message"] = "Registration successful"
            body["emailSent"] = bool(self.email_sent)
        return body


async def find_workshop_registration(
    session: AsyncSession,
    email: str,
    phone: str,
) -> Optional[WorkshopRegistration]:
    result = await session.execute(
        select(WorkshopRegistration)
        .where(or_(WorkshopRegistration.email == email, WorkshopRegistration.phone == phone))
        .order_by(WorkshopRegistration.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


def _existing_outcome(existing: WorkshopRegistration, workshop: Dict[str, Any]) -> WorkshopOutcome:
    logger.info("Workshop sign-up repeated by %s (registration %s)", existing.email, existing.id)
    return WorkshopOutcome(
        registration=existing,
        token=encode_registration_token(existing.email),
        already_registered=True,
        whatsapp_link=workshop.get("whatsappGroupLink"),
    )


async def register_for_workshop(
    session: AsyncSession,
    raw: Any,
    mailer,
) -> WorkshopOutcome:
    """
    Raises RegistrationValidationError, RegistrationClosedError,
    RegistrationConflictError or StorageError.
    """
    data: WorkshopRegistrationData = validate_workshop_registration(raw)
    try:
        workshop = await get_workshop_config(session)
        if not workshop.get("isRegistrationOpen", False):
            raise RegistrationClosedError("Workshop registration is currently closed")

        existing = await find_workshop_registration(session, data.email, data.phone)
        if existing is not None:
            return _existing_outcome(existing, workshop)

        registration = WorkshopRegistration(
            email=data.email,
            phone=data.phone,
            name=data.name,
            roll_no=data.roll_no,
            course=data.course,
            college=data.college,
            year=data.year,
            query=data.query,
            created_at=datetime.now(),
        )
        session.add(registration)
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            existing = await find_workshop_registration(session, data.email, data.phone)
            if existing is not None:
                return _existing_outcome(existing, workshop)
            raise RegistrationConflictError(
                "You are already registered for this workshop"
            ) from exc
    except SQLAlchemyError as exc:
        logger.exception("Storage failure during workshop registration: %s", exc)
        await session.rollback()
        raise StorageError() from exc

    logger.info("New workshop registration %s: %s", registration.id, registration.email)
    email_sent = await notify_workshop_registration(mailer, registration, workshop)
    return WorkshopOutcome(
        registration=registration,
        token=encode_registration_token(registration.email),
        already_registered=False,
        whatsapp_link=workshop.get("whatsappGroupLink"),
        email_sent=email_sent,
    )


async def list_workshop_registrations(session: AsyncSession) -> List[WorkshopRegistration]:
    result = await session.execute(
        select(WorkshopRegistration).order_by(
            WorkshopRegistration.created_at.desc(), WorkshopRegistration.id.desc()
        )
    )
    return list(result.scalars().all())


async def flush_workshop_registrations(session: AsyncSession) -> int:
    result = await session.execute(delete(WorkshopRegistration))
    logger.warning("All workshop registrations flushed: %d removed", result.rowcount)
    return result.rowcount
