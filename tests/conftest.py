"""
Shared pytest fixtures for Techelons tests.

Sets required environment variables BEFORE any techelons module is imported so
that pydantic-settings and SQLAlchemy engine initialisation use safe test values.
"""
from __future__ import annotations

import os
from typing import Any, AsyncGenerator, Dict, List, Optional

# ── Set env vars before any techelons import ──────────────────────────────────
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_REQUESTS", "10000")

# ── Third-party ───────────────────────────────────────────────────────────────
import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# ── Techelons imports (safe after env vars are set) ────────────────────────────
from techelons.models.base import Base
from techelons.models.models import Event, FestInfo, RegistrationStatus
from techelons.services.mailer import MailDeliveryError


# ── DB fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a fresh AsyncSession backed by an isolated in-memory SQLite database.
    Schema is created fresh for every test function; engine is always disposed
    on teardown, even if the test raises an exception.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


# ── Seed helpers ──────────────────────────────────────────────────────────────

async def make_fest(session: AsyncSession, enabled: bool = True) -> FestInfo:
    fest = FestInfo(registration_enabled=enabled, day1="March 27, 2025", day2="March 28, 2025")
    session.add(fest)
    await session.commit()
    return fest


async def make_event(
    session: AsyncSession,
    event_id: str = "hackathon",
    name: str = "Hackathon",
    team_min: int = 1,
    team_max: int = 1,
    status: str = RegistrationStatus.OPEN,
    **extra: Any,
) -> Event:
    event = Event(
        id=event_id,
        name=name,
        registration_status=status,
        team_min=team_min,
        team_max=team_max,
        rules=extra.pop("rules", []),
        coordinators=extra.pop("coordinators", []),
        competition_structure=extra.pop("competition_structure", []),
        evaluation_criteria=extra.pop("evaluation_criteria", []),
        **extra,
    )
    session.add(event)
    await session.commit()
    return event


def person(n: int, **overrides: Any) -> Dict[str, Any]:
    """Valid participant payload; ``n`` keeps email and phone unique."""
    data = {
        "name": f"Student {n}",
        "email": f"student{n}@du.ac.in",
        "phone": f"98765432{n:02d}",
        "rollNo": f"R{n:03d}",
        "course": "B.Sc. Computer Science",
        "year": "2nd Year",
        "college": "Shivaji College",
    }
    data.update(overrides)
    return data


def registration_payload(
    event_id: str = "hackathon",
    main: Optional[Dict[str, Any]] = None,
    members: Optional[List[Dict[str, Any]]] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    data = {
        "eventId": event_id,
        "eventName": "Hackathon",
        "isTeamEvent": bool(members),
        "mainParticipant": main or person(1),
        "teamMembers": members or [],
        "collegeIdUrl": "https://files.example.org/ids/1.png",
    }
    if members:
        data["teamName"] = "Null Pointers"
    data.update(overrides)
    return data


# ── Mailers ───────────────────────────────────────────────────────────────────

class FakeMailer:
    """Records every message; raises for addresses listed in ``fail_for``."""

    def __init__(self, fail_for: Optional[set] = None) -> None:
        self.fail_for = set(fail_for or ())
        self.sent: List[Dict[str, str]] = []
        self.attempted: List[str] = []

    async def send(self, to_email: str, subject: str, html_content: str, text_content=None) -> None:
        self.attempted.append(to_email)
        if to_email in self.fail_for:
            raise MailDeliveryError(f"mailbox unavailable: {to_email}")
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})


class FailingMailer(FakeMailer):
    """Transport that is down for everyone."""

    async def send(self, to_email: str, subject: str, html_content: str, text_content=None) -> None:
        self.attempted.append(to_email)
        raise MailDeliveryError("Connection refused")


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


# ── HTTP client ───────────────────────────────────────────────────────────────

ADMIN_AUTH = ("admin", "test-admin-password")


@pytest.fixture
async def client(async_session, mailer) -> AsyncGenerator[httpx.AsyncClient, None]:
    """ASGI client whose requests share the test's session, mailer and a no-TTL cache."""
    from techelons.handlers.common import get_content_cache, get_mailer
    from techelons.main import app
    from techelons.middlewares.db_middleware import get_session
    from techelons.services.content_cache import ContentCache

    async def _session_override():
        yield async_session

    cache = ContentCache(ttl=0)
    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_content_cache] = lambda: cache
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
