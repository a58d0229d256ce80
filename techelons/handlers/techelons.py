"""
Public fest data and its admin maintenance.

  GET   /api/techelons                      fest info + events (cached)
  PUT   /api/techelons                      admin: replace fest info + events
  PATCH /api/techelons/events/{event_id}    admin: change one event's status
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.errors import EventNotFoundError, FestDataMissingError
from techelons.handlers.common import get_content_cache, read_json_body
from techelons.middlewares.auth_middleware import require_admin
from techelons.middlewares.db_middleware import get_session
from techelons.services import event_service
from techelons.services.content_cache import ContentCache
from techelons.validators import EventStatusData, FestDataPayload, parse_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/techelons", tags=["techelons"])

FEST_CACHE_KEY = "techelons"


@router.get("")
async def get_fest_data(
    session: AsyncSession = Depends(get_session),
    cache: ContentCache = Depends(get_content_cache),
) -> dict:
    document = await cache.get_or_load(
        FEST_CACHE_KEY, lambda: event_service.load_fest_document(session)
    )
    if document is None:
        raise FestDataMissingError()
    return document


@router.put("", dependencies=[Depends(require_admin)])
async def replace_fest_data(
    request: Request,
    session: AsyncSession = Depends(get_session),
    cache: ContentCache = Depends(get_content_cache),
) -> dict:
    payload = parse_payload(FestDataPayload, await read_json_body(request))
    await event_service.replace_fest_data(session, payload)
    await session.commit()
    cache.invalidate(FEST_CACHE_KEY)
    return {"success": True, "events": len(payload.events)}


@router.patch("/events/{event_id}", dependencies=[Depends(require_admin)])
async def update_event_status(
    event_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    cache: ContentCache = Depends(get_content_cache),
) -> dict:
    data = parse_payload(EventStatusData, await read_json_body(request))
    event = await event_service.set_event_status(session, event_id, data.registration_status)
    if event is None:
        raise EventNotFoundError(event_id)
    await session.commit()
    cache.invalidate(FEST_CACHE_KEY)
    logger.info("Event %s status set to %s", event_id, data.registration_status)
    return {"success": True, "event": event.to_dict()}
