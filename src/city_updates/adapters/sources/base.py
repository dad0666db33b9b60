"""Shared plumbing for HTTP-backed sources."""

import hashlib
import logging
import time
from abc import abstractmethod
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from city_updates.adapters.sources.filters import KeywordTables, categorize, has_location
from city_updates.adapters.sources.rate_limit import AdapterCache, Loader
from city_updates.core import UpdateItem, UpdateSource
from city_updates.core.errors import RateLimitedError, SourceError

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUES = {"", "changeme", "placeholder", "none", "null", "xxx"}


def is_placeholder(value: Optional[str]) -> bool:
    """True for missing credentials and template values like `your_key_here`."""
    if value is None:
        return True
    normalized = value.strip().lower()
    if normalized in PLACEHOLDER_VALUES:
        return True
    return normalized.startswith("your_") and normalized.endswith("_here")


def stable_id(prefix: str, *parts: str) -> str:
    """Namespaced id for sources without authoritative identifiers."""
    digest = hashlib.md5("|".join(parts).encode()).hexdigest()[:12]
    return f"{prefix}-{digest}"


def clean_html(text: Any) -> str:
    """Strip markup from provider descriptions; non-string values give ""."""
    if not text or not isinstance(text, str):
        return ""
    if "<" not in text:
        return text.strip()
    return BeautifulSoup(text, "html.parser").get_text(separator=" ", strip=True)


def to_iso(value: Any) -> Optional[str]:
    """Normalize ISO-8601 or RFC 822 dates to an ISO-8601 string."""
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value).isoformat()
    except (TypeError, ValueError):
        # Keep the raw value; the aggregator sets undated items aside.
        return value


def reset_hint(response: httpx.Response) -> Optional[float]:
    """Epoch seconds when a throttled provider accepts calls again."""
    reset = response.headers.get("x-rate-limit-reset")
    if reset:
        try:
            return float(reset)
        except ValueError:
            pass
    retry_after = response.headers.get("retry-after")
    if retry_after:
        try:
            return time.time() + float(retry_after)
        except ValueError:
            pass
    return None


class HttpUpdateSource(UpdateSource):
    """Base class: credential gate, timeout, caching and error isolation."""

    emoji = "📰"

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache: Optional[AdapterCache] = None,
        tables: Optional[KeywordTables] = None,
        timeout: float = 10.0,
        search_days: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.cache = cache or AdapterCache(name=self.name)
        self.tables = tables or KeywordTables()
        self.timeout = timeout
        self.search_days = search_days
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return not is_placeholder(self.api_key)

    async def fetch_items(self) -> list[UpdateItem]:
        """Fetch items, degrading to an empty list on any failure."""
        if not self.is_configured:
            logger.info("%s not configured - skipping %s integration", self.name, self.name)
            return []

        try:
            async with self._client() as client:
                items = await self._fetch(client)
        except (httpx.HTTPError, SourceError) as e:
            logger.warning("%s fetch failed: %s", self.name, e)
            return []
        except Exception as e:
            logger.error("%s unexpected error: %s", self.name, e)
            return []

        logger.info("%s: %d items", self.name, len(items))
        return items

    @abstractmethod
    async def _fetch(self, client: httpx.AsyncClient) -> list[UpdateItem]:
        """Provider-specific requests and mapping."""
        pass

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        )

    async def _cached(self, key: str, loader: Loader, search: bool = False) -> list[UpdateItem]:
        """Run `loader` through the adapter cache, isolating its failures."""
        try:
            if search:
                return await self.cache.search_by_query(key, loader)
            return await self.cache.fetch_by_key(key, loader)
        except (httpx.HTTPError, SourceError) as e:
            logger.warning("%s request '%s' failed: %s", self.name, key, e)
            return []

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """GET a JSON document, translating provider status codes to errors."""
        response = await client.get(url, params=params, headers=headers)

        if response.status_code == 429:
            raise RateLimitedError(f"{self.name} rate limit exceeded", reset_hint(response))
        if response.status_code in (401, 403):
            raise SourceError(f"{self.name} authentication failed (HTTP {response.status_code}) - check credentials")
        if response.status_code != 200:
            raise SourceError(f"{self.name} API error: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise SourceError(f"{self.name} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SourceError(f"{self.name} returned unexpected payload")
        return data

    def _since(self) -> datetime:
        return datetime.now(timezone.utc) - timedelta(days=self.search_days)

    def _tag(self, title: str, content: str) -> dict[str, Any]:
        """Category and gazetteer fields shared by every mapped item."""
        text = f"{title} {content}"
        return {
            "category": categorize(text, self.tables.categories),
            "has_location": has_location(text, self.tables.gazetteer),
        }
