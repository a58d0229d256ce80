"""
Event service — fest info and event configuration.

Events are configured by admins and are read-only to the registration
workflow. All functions receive an AsyncSession parameter and are plain
async functions for easy unit testing.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techelons.models.models import Event, FestInfo
from techelons.validators import EventConfigData, FestDataPayload

logger = logging.getLogger(__name__)


async def get_fest_info(session: AsyncSession) -> Optional[FestInfo]:
    result = await session.execute(select(FestInfo).order_by(FestInfo.id).limit(1))
    return result.scalar_one_or_none()


async def get_event(session: AsyncSession, event_id: str) -> Optional[Event]:
    result = await session.execute(select(Event).where(Event.id == event_id))
    return result.scalar_one_or_none()


async def list_events(
    session: AsyncSession,
    status: Optional[str] = None,
) -> List[Event]:
    q = select(Event).order_by(Event.fest_day, Event.name)
    if status:
        q = q.where(Event.registration_status == status)
    result = await session.execute(q)
    return list(result.scalars().all())


def _apply_config(event: Event, cfg: EventConfigData) -> Event:
    for attr, value in dict(
        name=cfg.name,
        registration_status=cfg.registration_status,
        team_min=cfg.team_size.min,
        team_max=cfg.team_size.max,
        tagline=cfg.tagline,
        category=cfg.category,
        date=cfg.date,
        time=cfg.time,
        venue=cfg.venue,
        fest_day=cfg.fest_day,
        instructions=cfg.instructions,
        whatsapp_group=cfg.whatsapp_group,
        rules=list(cfg.rules),
        coordinators=[c.model_dump(exclude_none=True) for c in cfg.coordinators],
        competition_structure=list(cfg.competition_structure),
        evaluation_criteria=list(cfg.evaluation_criteria),
    ).items():
        setattr(event, attr, value)
    return event


async def replace_fest_data(session: AsyncSession, payload: FestDataPayload) -> None:
    """
    Replace fest info and the full event list.
    Existing registrations are left untouched.
    """
    fest = await get_fest_info(session)
    if fest is None:
        fest = FestInfo()
        session.add(fest)
    fest.registration_enabled = payload.fest_info.registration_enabled
    fest.day1 = payload.fest_info.dates.day1
    fest.day2 = payload.fest_info.dates.day2
    fest.registration_deadline = payload.fest_info.dates.registration_deadline

    existing = {e.id: e for e in await list_events(session)}
    for cfg in payload.events:
        event = existing.pop(cfg.id, None)
        if event is None:
            event = Event(id=cfg.id)
            session.add(event)
        _apply_config(event, cfg)
    for stale in existing.values():
        await session.delete(stale)
    await session.flush()
    logger.info("Fest data replaced: %d events", len(payload.events))


async def set_event_status(session: AsyncSession, event_id: str, status: str) -> Optional[Event]:
    event = await get_event(session, event_id)
    if event is None:
        return None
    event.registration_status = status
    await session.flush()
    return event


async def load_fest_document(session: AsyncSession) -> Optional[Dict[str, Any]]:
    """Public fest document (fest info + events). None when nothing is configured."""
    fest = await get_fest_info(session)
    if fest is None:
        return None
    events = await list_events(session)
    return {
        "festInfo": fest.to_dict(),
        "events": [e.to_dict() for e in events],
    }
