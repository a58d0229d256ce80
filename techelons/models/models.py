"""
ORM models for the Techelons registration backend.

Domain overview
---------------
FestInfo      — singleton row: is the fest taking registrations at all
Event         — a fest event (individual or team) with team-size bounds
Registration  — one team/individual entry for an event, keyed by
                (event_id, main_email)
WorkshopRegistration — single-participant workshop sign-up
SiteContent   — singleton JSON document of editable public site content
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from techelons.models.base import Base

# ─────────────────────────── Constants ────────────────────────────────────────

class RegistrationStatus:
    OPEN        = "open"
    COMING_SOON = "coming-soon"
    CLOSED      = "closed"

    ALL = (OPEN, COMING_SOON, CLOSED)


class StudyYear:
    FIRST  = "1st Year"
    SECOND = "2nd Year"
    THIRD  = "3rd Year"

    ALL = (FIRST, SECOND, THIRD)


# College value that requires the supplementary "otherCollege" field
OTHER_COLLEGE = "Other"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ─────────────────────────── Models ───────────────────────────────────────────

class FestInfo(Base):
    """Fest-wide switches and dates. Exactly one row is expected."""
    __tablename__ = "fest_info"

    id:                    Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    registration_enabled:  Mapped[bool]          = mapped_column(Boolean, default=True)
    day1:                  Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    day2:                  Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    registration_deadline: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    updated_at:            Mapped[datetime]      = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "registrationEnabled": self.registration_enabled,
            "dates": {
                "day1": self.day1,
                "day2": self.day2,
                "registrationDeadline": self.registration_deadline,
            },
        }


class Event(Base):
    """A fest event. Read-only to the registration workflow."""
    __tablename__ = "events"

    id:                  Mapped[str]           = mapped_column(String(100), primary_key=True)
    name:                Mapped[str]           = mapped_column(String(255))
    registration_status: Mapped[str]           = mapped_column(String(20), default=RegistrationStatus.COMING_SOON)
    team_min:            Mapped[int]           = mapped_column(Integer, default=1)
    team_max:            Mapped[int]           = mapped_column(Integer, default=1)
    tagline:             Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category:            Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    date:                Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    time:                Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    venue:               Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    fest_day:            Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    instructions:        Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    whatsapp_group:      Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    rules:                 Mapped[List[str]]             = mapped_column(JSON, default=list)
    coordinators:          Mapped[List[Dict[str, str]]]  = mapped_column(JSON, default=list)
    competition_structure: Mapped[List[str]]             = mapped_column(JSON, default=list)
    evaluation_criteria:   Mapped[List[str]]             = mapped_column(JSON, default=list)

    @property
    def is_team_event(self) -> bool:
        return self.team_max > 1

    @property
    def accepts_registrations(self) -> bool:
        return self.registration_status == RegistrationStatus.OPEN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "registrationStatus": self.registration_status,
            "teamSize": {"min": self.team_min, "max": self.team_max},
            "tagline": self.tagline,
            "category": self.category,
            "date": self.date,
            "time": self.time,
            "venue": self.venue,
            "festDay": self.fest_day,
            "instructions": self.instructions,
            "whatsappGroup": self.whatsapp_group,
            "rules": list(self.rules or []),
            "coordinators": list(self.coordinators or []),
            "competitionStructure": list(self.competition_structure or []),
            "evaluationCriteria": list(self.evaluation_criteria or []),
        }


class Registration(Base):
    """
    A fest registration. Created once, never updated by the public workflow.
    Participants are stored as JSON in their camelCase wire shape.
    """
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "main_email", name="uq_registration_event_email"),
    )

    id:               Mapped[int]                  = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id:         Mapped[str]                  = mapped_column(String(100), index=True)
    event_name:       Mapped[str]                  = mapped_column(String(255))
    is_team_event:    Mapped[bool]                 = mapped_column(Boolean, default=False)
    team_name:        Mapped[Optional[str]]        = mapped_column(String(255), nullable=True)
    main_email:       Mapped[str]                  = mapped_column(String(255), index=True)
    main_participant: Mapped[Dict[str, Any]]       = mapped_column(JSON)
    team_members:     Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    college_id_url:   Mapped[str]                  = mapped_column(String(1000))
    query:            Mapped[Optional[str]]        = mapped_column(Text, nullable=True)
    created_at:       Mapped[datetime]             = mapped_column(DateTime, default=func.now())

    @property
    def team_size(self) -> int:
        return 1 + len(self.team_members or [])

    def participants(self) -> List[Dict[str, Any]]:
        """Main participant first, then team members in submission order."""
        return [self.main_participant, *(self.team_members or [])]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "eventName": self.event_name,
            "isTeamEvent": self.is_team_event,
            "teamName": self.team_name,
            "mainParticipant": dict(self.main_participant),
            "teamMembers": [dict(m) for m in self.team_members or []],
            "collegeIdUrl": self.college_id_url,
            "query": self.query,
            "registrationDate": _iso(self.created_at),
        }


class WorkshopRegistration(Base):
    """Workshop sign-up. One per email and one per phone number."""
    __tablename__ = "workshop_registrations"

    id:                Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    email:             Mapped[str]           = mapped_column(String(255), unique=True)
    phone:             Mapped[str]           = mapped_column(String(20), unique=True)
    name:              Mapped[str]           = mapped_column(String(255))
    roll_no:           Mapped[str]           = mapped_column(String(50))
    course:            Mapped[str]           = mapped_column(String(255))
    college:           Mapped[str]           = mapped_column(String(255), default="Shivaji College")
    year:              Mapped[str]           = mapped_column(String(20))
    query:             Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    registration_type: Mapped[str]           = mapped_column(String(50), default="Workshop")
    created_at:        Mapped[datetime]      = mapped_column(DateTime, default=func.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "phone": self.phone,
            "name": self.name,
            "rollNo": self.roll_no,
            "course": self.course,
            "college": self.college,
            "year": self.year,
            "query": self.query,
            "registrationType": self.registration_type,
            "registrationDate": _iso(self.created_at),
        }


class SiteContent(Base):
    """Editable public site content (banner, about, council, workshop...)."""
    __tablename__ = "site_content"

    id:         Mapped[int]            = mapped_column(Integer, primary_key=True, autoincrement=True)
    document:   Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime]       = mapped_column(DateTime, default=func.now(), onupdate=func.now())
