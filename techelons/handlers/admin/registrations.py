"""
Admin registration management.

  GET    /api/admin/techelons-registrations?eventId=   list, newest first
  DELETE /api/admin/techelons-registrations/{id}       delete one
  DELETE /api/admin/techelons-registrations            flush all
  GET    /api/admin/workshop-registrations             list
  DELETE /api/admin/workshop-registrations             flush all
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.errors import RegistrationNotFoundError
from techelons.middlewares.auth_middleware import require_admin
from techelons.middlewares.db_middleware import get_session
from techelons.services import registration_service, workshop_service

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


# ── Fest registrations ────────────────────────────────────────────────────────

@router.get("/techelons-registrations")
async def list_registrations(
    event_id: Optional[str] = Query(default=None, alias="eventId"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    registrations = await registration_service.list_registrations(session, event_id)
    return {
        "count": len(registrations),
        "registrations": [r.to_dict() for r in registrations],
    }


@router.delete("/techelons-registrations/{registration_id}")
async def delete_registration(
    registration_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    if not await registration_service.delete_registration(session, registration_id):
        raise RegistrationNotFoundError()
    return {"success": True}


@router.delete("/techelons-registrations")
async def flush_registrations(session: AsyncSession = Depends(get_session)) -> dict:
    removed = await registration_service.flush_registrations(session)
    return {"success": True, "deletedCount": removed}


# ── Workshop registrations ────────────────────────────────────────────────────

@router.get("/workshop-registrations")
async def list_workshop_registrations(session: AsyncSession = Depends(get_session)) -> dict:
    registrations = await workshop_service.list_workshop_registrations(session)
    return {
        "count": len(registrations),
        "registrations": [r.to_dict() for r in registrations],
    }


@router.delete("/workshop-registrations")
async def flush_workshop_registrations(session: AsyncSession = Depends(get_session)) -> dict:
    removed = await workshop_service.flush_workshop_registrations(session)
    return {"success": True, "deletedCount": removed}
