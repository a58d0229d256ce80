"""
In-process TTL cache for public documents (fest data, site content).

Each key holds the last successfully loaded value and the time it was
loaded. A fresh value is served without touching the loader. When the
loader fails and an older value is present it is served stale; with
nothing cached the loader's exception propagates.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from techelons.config import settings

logger = logging.getLogger(__name__)


class ContentCache:

    def __init__(
        self,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def peek(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        return entry[1] if entry else None

    def is_fresh(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() - entry[0] < self.ttl

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        if self.is_fresh(key):
            return self._entries[key][1]

        try:
            value = await loader()
        except Exception as e:
            stale = self._entries.get(key)
            if stale is None:
                raise
            logger.warning("Serving stale %r after load failure: %s", key, e)
            return stale[1]

        if value is not None:
            self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)


content_cache = ContentCache(ttl=settings.CONTENT_CACHE_TTL)
