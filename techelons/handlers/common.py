"""
Shared request plumbing: provider dependencies, body parsing, health check.
"""
import json
import logging
from typing import Any

from fastapi import APIRouter, Request

from techelons.errors import RegistrationValidationError
from techelons.services.content_cache import ContentCache, content_cache
from techelons.services.mailer import SmtpMailer

logger = logging.getLogger(__name__)
router = APIRouter(tags=["common"])

_mailer = SmtpMailer()


def get_mailer() -> SmtpMailer:
    return _mailer


def get_content_cache() -> ContentCache:
    return content_cache


async def read_json_body(request: Request) -> Any:
    """Parsed JSON body; an unparsable body is a validation error on ``body``."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RegistrationValidationError(
            [{"field": "body", "message": "Invalid request body"}]
        ) from e


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}
