from techelons.models.base import Base, engine, AsyncSessionFactory
from techelons.models.models import (
    FestInfo,
    Event,
    Registration,
    WorkshopRegistration,
    SiteContent,
    RegistrationStatus,
    StudyYear,
    OTHER_COLLEGE,
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionFactory",
    "FestInfo",
    "Event",
    "Registration",
    "WorkshopRegistration",
    "SiteContent",
    "RegistrationStatus",
    "StudyYear",
    "OTHER_COLLEGE",
]
