"""
Registration token service.

A registration token is the participant's email in URL-safe base64. It lets
the "thank you" page fetch the registration that was just submitted without
a login.

NOT a security credential: anyone who knows an email can compute its token.
Use it only for session-local, non-sensitive lookups of a just-completed
submission. Admin and cross-session access go through the authenticated
admin endpoints instead.
"""
from __future__ import annotations

import base64
import binascii

from techelons.errors import InvalidTokenError


def encode_registration_token(email: str) -> str:
    """Deterministic, reversible token for an email address."""
    return base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii")


def decode_registration_token(token: str) -> str:
    """Inverse of encode_registration_token. Raises InvalidTokenError on garbage."""
    if not token:
        raise InvalidTokenError("Token is required")
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        email = raw.decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidTokenError() from exc
    if "@" not in email:
        raise InvalidTokenError()
    return email
