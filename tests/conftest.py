"""Shared fixtures and item builders."""

from typing import Optional

import pytest

from city_updates.adapters.storage import MemoryKeyValueStore
from city_updates.core import Category, SourceTag, UpdateItem, UpdateSource


def make_item(
    item_id: str,
    timestamp: str = "2024-01-01T10:00:00Z",
    source: SourceTag = SourceTag.NEWS_A,
    title: Optional[str] = None,
    content: str = "Some content",
    author: Optional[str] = None,
    category: Category = Category.NEWS,
) -> UpdateItem:
    """Build an item with sensible defaults."""
    return UpdateItem(
        id=item_id,
        source=source,
        title=title or f"Item {item_id}",
        content=content,
        timestamp=timestamp,
        author=author,
        category=category,
    )


@pytest.fixture
def store() -> MemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


class StubSource(UpdateSource):
    """Source returning canned items, or raising `error`."""

    def __init__(
        self,
        items: Optional[list[UpdateItem]] = None,
        configured: bool = True,
        error: Optional[Exception] = None,
        name: str = "stub",
    ) -> None:
        self.items = items or []
        self.configured = configured
        self.error = error
        self.name = name
        self.calls = 0

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def fetch_items(self) -> list[UpdateItem]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.items)
