"""
Fest registration endpoints.

  POST /api/techelonsregistration                       submit (idempotent)
  GET  /api/techelonsregistration?token=                look up by token
  GET  /api/techelons/registration-details?email=&eventId=
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.errors import RegistrationValidationError, StorageError
from techelons.handlers.common import get_mailer, read_json_body
from techelons.middlewares.db_middleware import get_session
from techelons.services import registration_service
from techelons.services.token_service import decode_registration_token

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["registration"])


@router.post("/techelonsregistration")
async def submit(
    request: Request,
    session: AsyncSession = Depends(get_session),
    mailer=Depends(get_mailer),
) -> dict:
    raw = await read_json_body(request)
    outcome = await registration_service.submit_registration(session, raw, mailer)
    return outcome.to_response()


async def _details(session: AsyncSession, email: str, event_id: Optional[str]) -> dict:
    try:
        return await registration_service.get_registration_details(session, email, event_id)
    except SQLAlchemyError as e:
        logger.exception("Lookup failed for %s: %s", email, e)
        raise StorageError("Failed to fetch registration details") from e


@router.get("/techelonsregistration")
async def lookup_by_token(
    token: str = Query(default=""),
    event_id: Optional[str] = Query(default=None, alias="eventId"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    email = decode_registration_token(token)
    return await _details(session, email, event_id)


@router.get("/techelons/registration-details")
async def lookup_by_email(
    email: str = Query(default=""),
    event_id: Optional[str] = Query(default=None, alias="eventId"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    if not email.strip():
        raise RegistrationValidationError([{"field": "email", "message": "Email is required"}])
    return await _details(session, email, event_id)
