"""
Editable public site content.

  GET   /api/content    public, cached
  PUT   /api/content    admin: replace the whole document
  PATCH /api/content    admin: one edit (set a value, replace or remove a list item)
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.errors import RegistrationValidationError
from techelons.handlers.common import get_content_cache, read_json_body
from techelons.middlewares.auth_middleware import require_admin
from techelons.middlewares.db_middleware import get_session
from techelons.services import content_service
from techelons.services.content_cache import ContentCache
from techelons.validators import ContentEditData, parse_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/content", tags=["content"])

CONTENT_CACHE_KEY = "content"


@router.get("")
async def get_content(
    session: AsyncSession = Depends(get_session),
    cache: ContentCache = Depends(get_content_cache),
) -> dict:
    document = await cache.get_or_load(
        CONTENT_CACHE_KEY, lambda: content_service.get_site_content(session)
    )
    return document or {}


@router.put("", dependencies=[Depends(require_admin)])
async def replace_content(
    request: Request,
    session: AsyncSession = Depends(get_session),
    cache: ContentCache = Depends(get_content_cache),
) -> dict:
    document = await read_json_body(request)
    if not isinstance(document, dict):
        raise RegistrationValidationError(
            [{"field": "body", "message": "Content must be a JSON object"}]
        )
    await content_service.replace_site_content(session, document)
    await session.commit()
    cache.invalidate(CONTENT_CACHE_KEY)
    return {"success": True}


@router.patch("", dependencies=[Depends(require_admin)])
async def edit_content(
    request: Request,
    session: AsyncSession = Depends(get_session),
    cache: ContentCache = Depends(get_content_cache),
) -> dict:
    edit = parse_payload(ContentEditData, await read_json_body(request))
    try:
        document = await content_service.edit_site_content(session, edit)
    except (IndexError, KeyError) as e:
        raise RegistrationValidationError(
            [{"field": "path", "message": str(e.args[0]) if e.args else str(e)}]
        ) from e
    await session.commit()
    cache.invalidate(CONTENT_CACHE_KEY)
    return {"success": True, "content": document}
