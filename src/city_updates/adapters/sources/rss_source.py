"""RSS 2.0 feeds of local newspapers."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional
from xml.etree import ElementTree as ET

import httpx

from city_updates.adapters.sources.base import HttpUpdateSource, clean_html, stable_id, to_iso
from city_updates.adapters.sources.filters import mentions_any
from city_updates.core import MediaType, SourceTag, UpdateItem
from city_updates.core.errors import SourceError

logger = logging.getLogger(__name__)


@dataclass
class Feed:
    """One configured feed."""

    name: str
    url: str


class RSSSource(HttpUpdateSource):
    """Fetch and locality-filter items from a list of RSS feeds."""

    emoji = "📡"
    name = "RSS"
    source_tag = SourceTag.RSS

    def __init__(
        self,
        feeds: Optional[list[Feed]] = None,
        max_items_per_feed: int = 30,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=None, **kwargs)
        self.feeds = feeds or []
        self.max_items_per_feed = max_items_per_feed

    @property
    def is_configured(self) -> bool:
        return bool(self.feeds)

    async def _fetch(self, client: httpx.AsyncClient) -> list[UpdateItem]:
        batches = await asyncio.gather(*(self.fetch_feed(client, feed) for feed in self.feeds))
        return [item for batch in batches for item in batch]

    async def fetch_feed(self, client: httpx.AsyncClient, feed: Feed) -> list[UpdateItem]:
        """One feed, through the adapter cache."""

        async def load() -> list[UpdateItem]:
            response = await client.get(feed.url)
            if response.status_code != 200:
                raise SourceError(f"{feed.name}: HTTP {response.status_code}")
            return self._to_items(feed, self._parse_feed(response.text))

        return await self._cached(feed.url, load)

    def _to_items(self, feed: Feed, entries: list[dict[str, str]]) -> list[UpdateItem]:
        items: list[UpdateItem] = []
        filtered_count = 0

        for entry in entries[: self.max_items_per_feed]:
            title = entry.get("title", "")
            timestamp = to_iso(entry.get("published"))
            if not title or not timestamp:
                continue

            content = entry.get("description") or "No content available"
            if not mentions_any(title, content, self.tables.places):
                filtered_count += 1
                continue

            link = entry.get("link") or None
            image = entry.get("image") or None
            items.append(UpdateItem(
                id=stable_id("rss", link or f"{feed.url}|{title}"),
                source=self.source_tag,
                title=title,
                content=content,
                timestamp=timestamp,
                author=feed.name,
                has_media=bool(image),
                media_url=image,
                media_type=MediaType.IMAGE if image else None,
                source_url=link,
                **self._tag(title, content),
            ))

        if filtered_count > 0:
            logger.info("%s: filtered %d non-local items", feed.name, filtered_count)
        return items

    def _parse_feed(self, xml_content: str) -> list[dict[str, str]]:
        """Parse an RSS 2.0 document into plain dicts; malformed input yields []."""
        entries: list[dict[str, str]] = []

        try:
            root = ET.fromstring(xml_content)
        except ET.ParseError as e:
            logger.warning("RSS parse error: %s", e)
            return entries

        for element in root.findall(".//item"):
            entries.append({
                "title": clean_html(_text(element, "title")),
                "description": clean_html(_text(element, "description")),
                "link": _text(element, "link"),
                "published": _text(element, "pubDate"),
                "image": _enclosure_image(element),
            })

        return entries


def _text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    return child.text.strip() if child is not None and child.text else ""


def _enclosure_image(element: ET.Element) -> str:
    enclosure = element.find("enclosure")
    if enclosure is not None and (enclosure.get("type") or "").startswith("image/"):
        return enclosure.get("url") or ""
    return ""
