"""
Workshop sign-up endpoint.

  POST /api/workshop/register
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.handlers.common import get_mailer, read_json_body
from techelons.middlewares.db_middleware import get_session
from techelons.services import workshop_service

router = APIRouter(prefix="/api/workshop", tags=["workshop"])


@router.post("/register")
async def register(
    request: Request,
    session: AsyncSession = Depends(get_session),
    mailer=Depends(get_mailer),
) -> dict:
    raw = await read_json_body(request)
    outcome = await workshop_service.register_for_workshop(session, raw, mailer)
    return outcome.to_response()
