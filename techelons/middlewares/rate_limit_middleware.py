"""
Rate-limiting middleware for the Techelons backend.

Protects the public submission endpoints against form spam by limiting how
many POST requests a single client IP can send within a rolling time window.
Reads (GET) and admin routes are never throttled.

Clients that exceed the limit get HTTP 429 until the oldest request in
their window expires.
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

DEFAULT_LIMITED_PATHS = ("/api/techelonsregistration", "/api/workshop/register")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window rate limiter.

    Parameters
    ----------
    rate   : maximum number of requests allowed per client per window
    period : window size in seconds
    paths  : path prefixes whose POST requests are limited
    """

    def __init__(
        self,
        app: ASGIApp,
        rate: int = 20,
        period: float = 60.0,
        paths: Iterable[str] = DEFAULT_LIMITED_PATHS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)
        self._rate   = rate
        self._period = period
        self._paths  = tuple(paths)
        self._clock  = clock
        self._last_prune = clock()
        # client ip → deque of timestamps (most recent first)
        self._history: Dict[str, Deque[float]] = defaultdict(deque)

    def _prune(self, now: float) -> None:
        """Forget clients with no request inside the window. Runs at most once per period."""
        if now - self._last_prune < self._period:
            return
        self._last_prune = now
        idle = [c for c, w in self._history.items() if not w or now - w[0] > self._period]
        for client in idle:
            del self._history[client]

    def _is_limited(self, request: Request) -> bool:
        return request.method == "POST" and request.url.path.startswith(self._paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._is_limited(request):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        now = self._clock()
        self._prune(now)
        window = self._history[client]

        # Evict timestamps outside the current window
        while window and now - window[-1] > self._period:
            window.pop()

        if len(window) >= self._rate:
            logger.warning("Rate limit hit for %s on %s", client, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests. Please wait a moment and try again."},
            )

        window.appendleft(now)
        return await call_next(request)
