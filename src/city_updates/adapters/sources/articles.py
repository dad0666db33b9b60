"""Common mapping for keyword-search news APIs (NewsAPI, GNews)."""

import logging
from abc import abstractmethod
from typing import Any, Optional

import httpx

from city_updates.adapters.sources.base import HttpUpdateSource, clean_html, stable_id, to_iso
from city_updates.adapters.sources.filters import mentions_any
from city_updates.core import MediaType, UpdateItem
from city_updates.core.errors import MalformedItemError

logger = logging.getLogger(__name__)


class NewsSearchSource(HttpUpdateSource):
    """Keyword search against a news API, locality-filtered.

    Subclasses provide the request and the name of the image field.
    """

    id_prefix = "news"
    image_field = "image"

    def __init__(
        self,
        api_key: Optional[str] = None,
        query: str = "",
        language: str = "en",
        max_items: int = 30,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=api_key, **kwargs)
        self.query = query
        self.language = language
        self.max_items = max_items

    async def _fetch(self, client: httpx.AsyncClient) -> list[UpdateItem]:
        async def load() -> list[UpdateItem]:
            data = await self._request(client)
            return self._map_articles(data.get("articles"))

        return await self._cached(self.query, load, search=True)

    @abstractmethod
    async def _request(self, client: httpx.AsyncClient) -> dict[str, Any]:
        """Perform the provider request and return the decoded JSON body."""

    def _map_articles(self, articles: Any) -> list[UpdateItem]:
        if not isinstance(articles, list):
            logger.warning("%s response has no article list", self.name)
            return []

        items: list[UpdateItem] = []
        filtered_count = 0
        skipped_count = 0

        for article in articles:
            try:
                item = self._map_article(article)
            except (MalformedItemError, AttributeError, TypeError, ValueError) as e:
                skipped_count += 1
                logger.debug("%s skipping article: %s", self.name, e)
                continue

            if not mentions_any(item.title, item.content, self.tables.places):
                filtered_count += 1
                continue
            items.append(item)

        logger.info(
            "%s: %d local articles (%d filtered out, %d malformed)",
            self.name,
            len(items),
            filtered_count,
            skipped_count,
        )
        return items

    def _map_article(self, article: Any) -> UpdateItem:
        """Map one article dict; raises MalformedItemError when unusable."""
        if not isinstance(article, dict):
            raise MalformedItemError("article is not an object")

        title = clean_html(article.get("title"))
        if not title:
            raise MalformedItemError("article has no title")

        timestamp = to_iso(article.get("publishedAt"))
        if not timestamp:
            raise MalformedItemError(f"article '{title[:40]}' has no publishedAt")

        description = clean_html(article.get("description"))
        content = description or clean_html(article.get("content")) or "No content available"

        url = article.get("url") if isinstance(article.get("url"), str) else None
        image = article.get(self.image_field) if isinstance(article.get(self.image_field), str) else None
        source = article.get("source")
        author = source.get("name") if isinstance(source, dict) else None
        if not isinstance(author, str):
            author = None

        return UpdateItem(
            id=stable_id(self.id_prefix, url or f"{title}|{timestamp}"),
            source=self.source_tag,
            title=title,
            content=content,
            timestamp=timestamp,
            author=author or None,
            has_media=bool(image),
            media_url=image,
            media_type=MediaType.IMAGE if image else None,
            source_url=url,
            **self._tag(title, description),
        )
