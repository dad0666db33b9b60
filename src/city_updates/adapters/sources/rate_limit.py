"""Per-adapter response cache and rate-limit gate."""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from city_updates.core.entities import UpdateItem
from city_updates.core.errors import RateLimitedError

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[list[UpdateItem]]]


@dataclass
class CacheEntry:
    expires_at: float
    items: list[UpdateItem]


class AdapterCache:
    """Short-TTL result cache plus a single "blocked until" gate.

    One instance belongs to one adapter for the lifetime of the process.
    Expired entries are kept so a rate-limited adapter can still serve the
    last value it saw.
    """

    def __init__(
        self,
        name: str = "adapter",
        ttl: float = 60.0,
        fallback_window: float = 15 * 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.name = name
        self.ttl = ttl
        self.fallback_window = fallback_window
        self.clock = clock
        self.entries: dict[str, CacheEntry] = {}
        self.rate_limited_until: Optional[float] = None

    def is_rate_limited(self) -> bool:
        return self.rate_limited_until is not None and self.clock() < self.rate_limited_until

    def block(self, reset_at: Optional[float] = None) -> None:
        """Close the gate until `reset_at`, or for the fallback window."""
        now = self.clock()
        if reset_at is not None and reset_at > now:
            self.rate_limited_until = reset_at
        else:
            self.rate_limited_until = now + self.fallback_window

    def get_fresh(self, key: str) -> Optional[list[UpdateItem]]:
        entry = self.entries.get(key)
        if entry is not None and entry.expires_at > self.clock():
            return entry.items
        return None

    def get_last(self, key: str) -> Optional[list[UpdateItem]]:
        entry = self.entries.get(key)
        return entry.items if entry is not None else None

    def put(self, key: str, items: list[UpdateItem]) -> None:
        self.entries[key] = CacheEntry(expires_at=self.clock() + self.ttl, items=items)

    async def fetch_by_key(self, key: str, loader: Loader) -> list[UpdateItem]:
        """Cached lookup of a keyed resource (e.g. one account's timeline)."""
        return await self._fetch(f"key:{key}", loader)

    async def search_by_query(self, query: str, loader: Loader) -> list[UpdateItem]:
        """Cached search request."""
        return await self._fetch(f"search:{query}", loader)

    async def _fetch(self, cache_key: str, loader: Loader) -> list[UpdateItem]:
        if self.is_rate_limited():
            remaining = int((self.rate_limited_until or 0) - self.clock()) + 1
            logger.warning(
                "[%s] Skipping request due to active rate limit. Retry in ~%ss",
                self.name,
                remaining,
            )
            return self.get_last(cache_key) or []

        cached = self.get_fresh(cache_key)
        if cached is not None:
            return cached

        try:
            items = await loader()
        except RateLimitedError as e:
            self.block(e.reset_at)
            logger.warning(
                "[%s] Rate limit exceeded, will resume after %s",
                self.name,
                time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.rate_limited_until or 0)),
            )
            return self.get_last(cache_key) or []

        self.put(cache_key, items)
        return items
