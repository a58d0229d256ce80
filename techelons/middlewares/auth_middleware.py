"""
Admin authorization dependency.

Admin routers depend on `require_admin`, which checks HTTP Basic
credentials against ADMIN_USERNAME / ADMIN_PASSWORD. The registration token
is never accepted here.
"""
import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from techelons.config import settings

logger = logging.getLogger(__name__)

_basic = HTTPBasic(auto_error=False)


def _matches(given: str, expected: str) -> bool:
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


async def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(_basic),
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )
    ok_user = _matches(credentials.username, settings.ADMIN_USERNAME)
    ok_pass = _matches(credentials.password, settings.ADMIN_PASSWORD)
    if not (ok_user and ok_pass):
        logger.warning("Rejected admin credentials for user %r", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
