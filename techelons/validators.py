"""
Input validation for registration payloads — Pydantic v2 models.

Used to validate client-supplied JSON before anything touches the database.
Field names are snake_case in Python and camelCase on the wire.
Validation is never fail-fast: every violation in the payload is reported
together so the client can fix all of them in one round trip.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from techelons.config import settings
from techelons.errors import RegistrationValidationError
from techelons.models.models import OTHER_COLLEGE, Event, RegistrationStatus, StudyYear

_EMAIL_LOCAL = r"[a-zA-Z0-9][a-zA-Z0-9._%+-]*"
_GENERIC_DOMAIN = r"[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"


def build_email_pattern(academic_domains: List[str]) -> re.Pattern:
    """Generic ``user@domain.tld`` or any of the allow-listed institutional domains."""
    alternatives = [_GENERIC_DOMAIN] + [re.escape(d) for d in academic_domains]
    return re.compile(rf"^{_EMAIL_LOCAL}@({'|'.join(alternatives)})$")


_EMAIL_RE = build_email_pattern(settings.academic_domains_list)

# National mobile format: 10 digits, first digit 6–9
_PHONE_RE = re.compile(r"^[6-9]\d{9}$")


def normalize_email(value: str) -> str:
    return value.strip().lower()


def check_email(value: str) -> str:
    value = normalize_email(value)
    if not value:
        raise ValueError("Email is required")
    if not _EMAIL_RE.match(value):
        raise ValueError("Please use a valid email address")
    return value


def check_phone(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Phone number is required")
    if len(value) != 10:
        raise ValueError("Phone number must be exactly 10 digits")
    if not _PHONE_RE.match(value):
        raise ValueError("Please enter a valid Indian mobile number")
    return value


def _check_min_length(value: str, message: str, minimum: int = 2) -> str:
    if len(value) < minimum:
        raise ValueError(message)
    return value


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ParticipantData(_WireModel):
    """
    One person in a registration (main participant or team member).

    Attributes
    ----------
    email         : normalised to lower case; uniqueness key within a team
    phone         : 10-digit mobile number; uniqueness key within a team
    year          : one of StudyYear.ALL
    other_college : required when college == "Other"
    """

    name: str
    email: str
    phone: str
    roll_no: str
    course: str
    year: str
    college: str
    other_college: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_min_length(v, "Name is required")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return check_phone(v)

    @field_validator("roll_no")
    @classmethod
    def validate_roll_no(cls, v: str) -> str:
        return _check_min_length(v, "Roll No. is required")

    @field_validator("course")
    @classmethod
    def validate_course(cls, v: str) -> str:
        return _check_min_length(v, "Course is required")

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: str) -> str:
        if v not in StudyYear.ALL:
            raise ValueError("Please select your year")
        return v

    @field_validator("college")
    @classmethod
    def validate_college(cls, v: str) -> str:
        return _check_min_length(v, "College is required")

    @field_validator("other_college")
    @classmethod
    def validate_other_college(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("college") == OTHER_COLLEGE and not v:
            raise ValueError("Please enter your college name")
        return v or None


class RegistrationData(_WireModel):
    """Fest event registration payload."""

    event_id: str
    event_name: str
    is_team_event: bool = False
    team_name: Optional[str] = None
    main_participant: ParticipantData
    team_members: List[ParticipantData] = Field(default_factory=list)
    college_id_url: str
    query: Optional[str] = None

    @field_validator("event_id")
    @classmethod
    def validate_event_id(cls, v: str) -> str:
        return _check_min_length(v, "Event ID is required", minimum=1)

    @field_validator("event_name")
    @classmethod
    def validate_event_name(cls, v: str) -> str:
        return _check_min_length(v, "Event name is required", minimum=1)

    @field_validator("college_id_url")
    @classmethod
    def validate_college_id_url(cls, v: str) -> str:
        return _check_min_length(v, "College ID is required", minimum=1)

    @field_validator("team_members", mode="before")
    @classmethod
    def none_means_no_members(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("team_name", "query")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def team_size(self) -> int:
        return 1 + len(self.team_members)


class WorkshopRegistrationData(_WireModel):
    """Workshop sign-up payload (always a single participant)."""

    email: str
    name: str
    roll_no: str
    course: str
    year: str
    phone: str
    college: str = "Shivaji College"
    query: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return check_phone(v)

    @field_validator("name", "roll_no", "course", "year")
    @classmethod
    def required_text(cls, v: str) -> str:
        return _check_min_length(v, "This field is required", minimum=1)

    @field_validator("college", mode="before")
    @classmethod
    def default_college(cls, v: Any) -> Any:
        return v or "Shivaji College"


class TeamSizeData(BaseModel):
    min: int = Field(default=1, ge=1)
    max: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def check_bounds(self) -> "TeamSizeData":
        if self.min > self.max:
            raise ValueError("Team size min cannot exceed max")
        return self


class CoordinatorData(_WireModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class EventConfigData(_WireModel):
    """Admin-supplied event configuration."""

    id: str
    name: str
    registration_status: str = RegistrationStatus.COMING_SOON
    team_size: TeamSizeData = Field(default_factory=TeamSizeData)
    tagline: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    fest_day: Optional[str] = None
    instructions: Optional[str] = None
    whatsapp_group: Optional[str] = None
    rules: List[str] = Field(default_factory=list)
    coordinators: List[CoordinatorData] = Field(default_factory=list)
    competition_structure: List[str] = Field(default_factory=list)
    evaluation_criteria: List[str] = Field(default_factory=list)

    @field_validator("id", "name")
    @classmethod
    def required_text(cls, v: str) -> str:
        return _check_min_length(v, "This field is required", minimum=1)

    @field_validator("registration_status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in RegistrationStatus.ALL:
            raise ValueError(f"Registration status must be one of {list(RegistrationStatus.ALL)}")
        return v


class FestDatesData(_WireModel):
    day1: Optional[str] = None
    day2: Optional[str] = None
    registration_deadline: Optional[str] = None


class FestInfoData(_WireModel):
    registration_enabled: bool = True
    dates: FestDatesData = Field(default_factory=FestDatesData)


class FestDataPayload(_WireModel):
    """Full replacement of fest info and the event list."""

    fest_info: FestInfoData = Field(default_factory=FestInfoData)
    events: List[EventConfigData] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_event_ids(self) -> "FestDataPayload":
        ids = [e.id for e in self.events]
        if len(ids) != len(set(ids)):
            raise ValueError("Event ids must be unique")
        return self


# ── Error formatting ──────────────────────────────────────────────────────────

def format_violations(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic ValidationError into ``{"field", "message"}`` pairs."""
    violations = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        if err["type"] == "value_error":
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        violations.append({"field": field, "message": message})
    return violations


def validate_registration(raw: Any, event: Optional[Event] = None) -> RegistrationData:
    """
    Validate a raw fest registration payload.

    When the target event is known, team-event requirements that depend on
    it (a team name) are checked in the same pass.

    Raises RegistrationValidationError listing every violation.
    """
    if not isinstance(raw, dict):
        raise RegistrationValidationError(
            [{"field": "body", "message": "Invalid request body"}]
        )

    data: Optional[RegistrationData] = None
    violations: List[Dict[str, str]] = []
    try:
        data = RegistrationData.model_validate(raw)
    except ValidationError as exc:
        violations.extend(format_violations(exc))

    if event is not None and event.is_team_event:
        if data is not None:
            team_name = data.team_name
        else:
            team_name = raw.get("teamName", raw.get("team_name"))
        already_flagged = any(v["field"] == "teamName" for v in violations)
        if not already_flagged and not (isinstance(team_name, str) and team_name.strip()):
            violations.append(
                {"field": "teamName", "message": "Team name is required for team events"}
            )

    if violations:
        raise RegistrationValidationError(violations)
    return data


def validate_workshop_registration(raw: Any) -> WorkshopRegistrationData:
    if not isinstance(raw, dict):
        raise RegistrationValidationError(
            [{"field": "body", "message": "Invalid request body"}]
        )
    try:
        return WorkshopRegistrationData.model_validate(raw)
    except ValidationError as exc:
        raise RegistrationValidationError(format_violations(exc)) from exc


class ContentEditData(BaseModel):
    """
    A single admin edit of the site content document.

    path   : keys (and list indices) leading to the target value
    value  : new value; ignored when remove is set
    index  : when given, the target is an item of the list at path
    remove : drop the list item at index instead of replacing it
    """

    path: List[Union[str, int]] = Field(min_length=1)
    value: Any = None
    index: Optional[int] = Field(default=None, ge=0)
    remove: bool = False

    @model_validator(mode="after")
    def remove_needs_index(self) -> "ContentEditData":
        if self.remove and self.index is None:
            raise ValueError("An index is required to remove a list item")
        return self


class EventStatusData(_WireModel):
    registration_status: str

    @field_validator("registration_status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in RegistrationStatus.ALL:
            raise ValueError(f"Registration status must be one of {list(RegistrationStatus.ALL)}")
        return v


def parse_payload(model: type[BaseModel], raw: Any) -> Any:
    """Validate an admin payload, reporting violations like registrations do."""
    if not isinstance(raw, dict):
        raise RegistrationValidationError(
            [{"field": "body", "message": "Invalid request body"}]
        )
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise RegistrationValidationError(format_violations(exc)) from exc
