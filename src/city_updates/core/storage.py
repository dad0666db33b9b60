"""Offline snapshot, preferences and saved items over a key-value store."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from city_updates.core.entities import (
    CacheSnapshot,
    Preferences,
    UpdateItem,
    newest_first,
    parse_timestamp,
)
from city_updates.core.errors import MalformedItemError, StorageError
from city_updates.core.interfaces import KeyValueStore

logger = logging.getLogger(__name__)

CACHED_UPDATES_KEY = "cached_updates"
LAST_REFRESH_KEY = "last_refresh"
USER_PREFERENCES_KEY = "user_preferences"
SAVED_NEWS_KEY = "saved_news"

SNAPSHOT_LIMIT = 20

def most_recent(items: list[UpdateItem], limit: int) -> list[UpdateItem]:
    """Return the `limit` newest items, newest first; undated items sort last."""
    return newest_first(items)[:limit]


def decode_items(raw: Optional[str]) -> list[UpdateItem]:
    """Decode a stored JSON item list, skipping entries that don't map."""
    if not raw:
        return []

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Stored items are corrupt, treating as absent: %s", e)
        return []

    if not isinstance(data, list):
        logger.warning("Stored items are not a list, treating as absent")
        return []

    items: list[UpdateItem] = []
    for entry in data:
        try:
            items.append(UpdateItem.from_dict(entry))
        except MalformedItemError as e:
            logger.warning("Skipping stored item: %s", e)
    return items


def encode_items(items: list[UpdateItem]) -> str:
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


class SnapshotCache:
    """Bounded snapshot of recent items used when the network is unavailable."""

    def __init__(self, store: KeyValueStore, limit: int = SNAPSHOT_LIMIT) -> None:
        self.store = store
        self.limit = limit

    async def save(self, items: list[UpdateItem], now: Optional[datetime] = None) -> None:
        """Persist the most recent `limit` items and the refresh time."""
        now = now or datetime.now(timezone.utc)
        latest = most_recent(items, self.limit)

        try:
            await self.store.set(CACHED_UPDATES_KEY, encode_items(latest))
            await self.store.set(LAST_REFRESH_KEY, now.isoformat())
        except StorageError as e:
            logger.error("Error caching updates: %s", e)

    async def load(self) -> CacheSnapshot:
        """Read the snapshot; absent or corrupt data yields an empty snapshot."""
        try:
            raw_items = await self.store.get(CACHED_UPDATES_KEY)
            raw_refresh = await self.store.get(LAST_REFRESH_KEY)
        except StorageError as e:
            logger.error("Error reading cached updates: %s", e)
            return CacheSnapshot()

        items = decode_items(raw_items)
        if not items:
            return CacheSnapshot()

        return CacheSnapshot(items=items, last_refresh_at=parse_timestamp(raw_refresh))

    async def clear(self) -> None:
        """Drop the snapshot entirely."""
        try:
            await self.store.multi_remove([CACHED_UPDATES_KEY, LAST_REFRESH_KEY])
        except StorageError as e:
            logger.error("Error clearing cache: %s", e)

    async def size_label(self) -> str:
        """Human-readable size of the stored snapshot."""
        try:
            raw = await self.store.get(CACHED_UPDATES_KEY)
        except StorageError as e:
            logger.error("Error calculating cache size: %s", e)
            return "0 KB"
        if not raw:
            return "0 KB"

        size_kb = round(len(raw.encode("utf-8")) / 1024)
        if size_kb < 1024:
            return f"{size_kb} KB"
        return f"{round(size_kb / 1024 * 10) / 10} MB"


class PreferencesStore:
    """Load and persist user preferences."""

    def __init__(self, store: KeyValueStore, defaults: Optional[Preferences] = None) -> None:
        self.store = store
        self.defaults = defaults or Preferences()

    async def load(self) -> Preferences:
        try:
            raw = await self.store.get(USER_PREFERENCES_KEY)
        except StorageError as e:
            logger.error("Error getting user preferences: %s", e)
            return self._defaults()
        if not raw:
            return self._defaults()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Stored preferences are corrupt, using defaults: %s", e)
            return self._defaults()
        if not isinstance(data, dict):
            return self._defaults()

        return Preferences.from_dict(data, self.defaults)

    async def save(self, preferences: Preferences) -> None:
        await self.store.set(USER_PREFERENCES_KEY, json.dumps(preferences.to_dict()))

    def _defaults(self) -> Preferences:
        return Preferences(**vars(self.defaults))


class SavedItemsStore:
    """Items the user bookmarked, kept independently of the snapshot."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def list_items(self) -> list[UpdateItem]:
        try:
            raw = await self.store.get(SAVED_NEWS_KEY)
        except StorageError as e:
            logger.error("Error loading saved news: %s", e)
            return []
        return decode_items(raw)

    async def is_saved(self, item_id: str) -> bool:
        return any(item.id == item_id for item in await self.list_items())

    async def save(self, item: UpdateItem) -> None:
        """Bookmark `item`; saving an already saved id is a no-op."""
        saved = await self.list_items()
        if any(existing.id == item.id for existing in saved):
            return
        saved.append(item)
        await self._write(saved)

    async def remove(self, item_id: str) -> bool:
        """Remove a bookmark. Returns False when it wasn't saved."""
        saved = await self.list_items()
        remaining = [item for item in saved if item.id != item_id]
        if len(remaining) == len(saved):
            return False
        await self._write(remaining)
        return True

    async def toggle(self, item: UpdateItem) -> bool:
        """Save or unsave `item`. Returns the new saved state."""
        if await self.remove(item.id):
            return False
        await self.save(item)
        return True

    async def clear(self) -> None:
        await self.store.remove(SAVED_NEWS_KEY)

    async def _write(self, items: list[UpdateItem]) -> None:
        await self.store.set(SAVED_NEWS_KEY, encode_items(items))


def snapshot_summary(snapshot: CacheSnapshot) -> dict[str, Any]:
    """Small dict describing a snapshot, used by the CLI."""
    return {
        "items": len(snapshot.items),
        "last_refresh_at": snapshot.last_refresh_at.isoformat() if snapshot.last_refresh_at else None,
    }
