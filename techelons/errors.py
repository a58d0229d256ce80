"""
Exception taxonomy for the registration backend.

Every error carries the HTTP status it maps to, a machine-readable code and
optional details; the app renders them as ``{"error": ..., "details": ...}``.

Usage:
    from techelons.errors import EventNotFoundError

    if event is None:
        raise EventNotFoundError(event_id)
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class TechelonsError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "type": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


# ── Input errors (400) ────────────────────────────────────────────────────────

class RegistrationValidationError(TechelonsError):
    """
    Malformed or missing fields. ``violations`` lists every problem found,
    each as ``{"field": "mainParticipant.email", "message": "..."}``.
    """

    status_code = 400

    def __init__(self, violations: List[Dict[str, str]]):
        super().__init__("Validation error", code="VALIDATION_ERROR", details=violations)
        self.violations = violations


class InvalidTokenError(TechelonsError):
    status_code = 400

    def __init__(self, message: str = "Invalid registration token"):
        super().__init__(message, code="INVALID_TOKEN")


# ── Policy errors ─────────────────────────────────────────────────────────────

class PolicyViolationError(TechelonsError):
    """Team size, intra-team duplicate or already-registered member."""

    status_code = 400

    def __init__(self, message: str, code: str = "POLICY_VIOLATION"):
        super().__init__(message, code=code)


class RegistrationClosedError(TechelonsError):
    status_code = 403

    def __init__(self, message: str):
        super().__init__(message, code="REGISTRATION_CLOSED")


# ── Not found (404) ───────────────────────────────────────────────────────────

class EventNotFoundError(TechelonsError):
    status_code = 404

    def __init__(self, event_id: str):
        super().__init__("Event not found", code="EVENT_NOT_FOUND", details={"eventId": event_id})


class FestDataMissingError(TechelonsError):
    status_code = 404

    def __init__(self, message: str = "Techelons data not found"):
        super().__init__(message, code="FEST_DATA_MISSING")


class RegistrationNotFoundError(TechelonsError):
    status_code = 404

    def __init__(self):
        super().__init__("Registration not found", code="REGISTRATION_NOT_FOUND")


# ── Storage ───────────────────────────────────────────────────────────────────

class RegistrationConflictError(TechelonsError):
    """Uniqueness violation at write time that could not be resolved to a record."""

    status_code = 409

    def __init__(self, message: str = "You are already registered for this event"):
        super().__init__(message, code="DUPLICATE_REGISTRATION")


class StorageError(TechelonsError):
    """The store failed or was unreachable. Safe for the client to retry."""

    status_code = 500

    def __init__(self, message: str = "Failed to process registration. Please try again later."):
        super().__init__(message, code="STORAGE_ERROR")

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["retryable"] = True
        return body
