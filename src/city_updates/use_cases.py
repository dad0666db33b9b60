"""Business logic use cases."""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from city_updates.core import (
    AggregationResult,
    FallbackTier,
    Identity,
    Preferences,
    PreferencesStore,
    SavedItemsStore,
    SnapshotCache,
    UpdateItem,
    UpdateSource,
    apply_filters,
)
from city_updates.core.entities import newest_first
from city_updates.core.query import ALL

logger = logging.getLogger(__name__)


class UpdateAggregator:
    """Fan out to every source, merge, dedupe, sort and apply fallback tiers."""

    def __init__(
        self,
        sources: list[UpdateSource],
        fallback: Optional[UpdateSource] = None,
    ) -> None:
        self.sources = sources
        self.fallback = fallback

    @property
    def any_configured(self) -> bool:
        return any(source.is_configured for source in self.sources)

    async def aggregate(self) -> list[UpdateItem]:
        """Run one aggregation pass and return the sorted items."""
        result = await self.aggregate_with_status()
        return result.items

    async def aggregate_with_status(self) -> AggregationResult:
        """Run one aggregation pass.

        Tiers, in order:
            1. any item fetched -> LIVE
            2. nothing fetched but some source is configured -> OUTAGE, no items
            3. nothing configured at all -> DEMO, the static dataset
        """
        batches = await asyncio.gather(
            *(source.fetch_items() for source in self.sources),
            return_exceptions=True,
        )

        per_source: dict[str, int] = {}
        merged: list[UpdateItem] = []
        for source, batch in zip(self.sources, batches):
            name = getattr(source, "name", source.__class__.__name__)
            if isinstance(batch, BaseException):
                logger.error("%s raised during fetch: %s", name, batch)
                batch = []
            per_source[name] = len(batch)
            merged.extend(batch)

        items, undated = self._dedupe_and_sort(merged)

        if items or undated:
            logger.info("Aggregated %d items (%d undated) from %d sources", len(items), len(undated), len(self.sources))
            return AggregationResult(items=items, tier=FallbackTier.LIVE, undated=undated, per_source=per_source)

        if self.any_configured:
            logger.warning("Configured sources returned no items - reporting outage, not demo data")
            return AggregationResult(items=[], tier=FallbackTier.OUTAGE, per_source=per_source)

        logger.info("No source configured - serving demonstration dataset")
        demo: list[UpdateItem] = []
        if self.fallback is not None:
            demo = newest_first(await self.fallback.fetch_items())
        return AggregationResult(items=demo, tier=FallbackTier.DEMO, per_source=per_source)

    @staticmethod
    def _dedupe_and_sort(items: list[UpdateItem]) -> tuple[list[UpdateItem], list[UpdateItem]]:
        """First occurrence of an id wins; undated items are set aside."""
        seen_ids: set[str] = set()
        dated: list[UpdateItem] = []
        undated: list[UpdateItem] = []

        for item in items:
            if item.id in seen_ids:
                continue
            seen_ids.add(item.id)
            if item.published_at is None:
                undated.append(item)
            else:
                dated.append(item)

        return newest_first(dated), undated


class RefreshState(str, Enum):
    """Orchestrator state."""

    IDLE = "idle"
    LOADING = "loading"
    REFRESHING = "refreshing"
    OFFLINE = "offline"


class RefreshOrchestrator:
    """Coordinates initial load, manual refresh and auto-refresh."""

    def __init__(
        self,
        aggregator: UpdateAggregator,
        snapshot_cache: SnapshotCache,
        preferences_store: PreferencesStore,
        saved_items: Optional[SavedItemsStore] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.aggregator = aggregator
        self.snapshot_cache = snapshot_cache
        self.preferences_store = preferences_store
        self.saved_items = saved_items
        self._now = now
        self._sleep = sleep

        self.state = RefreshState.IDLE
        self.identity: Optional[Identity] = None
        self.preferences = Preferences()
        self.items: list[UpdateItem] = []
        self.visible: list[UpdateItem] = []
        self.query = ""
        self.source_filter = ALL
        self.category = ALL
        self.is_offline = False
        self.is_demo = False
        self.last_refresh_at: Optional[datetime] = None
        self.last_result: Optional[AggregationResult] = None

    @property
    def is_busy(self) -> bool:
        return self.state in (RefreshState.LOADING, RefreshState.REFRESHING)

    async def start(self, identity: Identity) -> bool:
        """Initial load for an authenticated user.

        Returns:
            False when the identity is not authenticated or a pass is running
        """
        if not identity.authenticated:
            logger.warning("Not authenticated - skipping initial load")
            return False
        if self.is_busy:
            return False

        self.identity = identity
        self.state = RefreshState.LOADING

        self.preferences = await self.preferences_store.load()
        if self.preferences.offline_mode:
            await self._serve_snapshot()

        await self._run_pass()
        return True

    async def refresh(self) -> bool:
        """Manual or timer-driven refresh; skipped while a pass is outstanding."""
        if self.is_busy:
            logger.info("Refresh skipped - a pass is already running")
            return False

        self.state = RefreshState.REFRESHING
        await self._run_pass()
        return True

    async def run_auto_refresh(self, max_cycles: Optional[int] = None) -> int:
        """Refresh every `refresh_interval_minutes` while auto-refresh is on.

        Stops when auto-refresh is switched off or the orchestrator goes
        offline. Returns the number of timer ticks handled.
        """
        ticks = 0
        while self._auto_refresh_active():
            if max_cycles is not None and ticks >= max_cycles:
                break
            await self._sleep(self.preferences.refresh_interval_minutes * 60)
            if not self._auto_refresh_active():
                break
            await self.refresh()
            ticks += 1

        return ticks

    def set_query(self, query: str) -> None:
        self.query = query
        self._recompute()

    def set_source_filter(self, source_filter: str) -> None:
        self.source_filter = source_filter
        self._recompute()

    def set_category(self, category: str) -> None:
        self.category = category
        self._recompute()

    async def update_preferences(self, preferences: Preferences) -> None:
        """Persist then apply new preferences."""
        await self.preferences_store.save(preferences)
        self.preferences = preferences

    async def toggle_saved(self, item_id: str) -> Optional[bool]:
        """Save or unsave a loaded item. Returns None when the id is unknown."""
        if self.saved_items is None:
            return None
        item = next((item for item in self.items if item.id == item_id), None)
        if item is None:
            return None
        return await self.saved_items.toggle(item)

    async def clear_cache(self) -> None:
        """Drop the snapshot and the items it backed."""
        await self.snapshot_cache.clear()
        self._set_items([])
        self.last_refresh_at = None

    async def _run_pass(self) -> None:
        try:
            result = await self.aggregator.aggregate_with_status()
        except Exception as e:
            logger.error("Error fetching updates: %s", e)
            await self._go_offline()
            return

        self.last_result = result
        if result.tier == FallbackTier.OUTAGE:
            await self._go_offline()
            return

        self._set_items(result.items)
        self.is_demo = result.is_demo
        if self.preferences.offline_mode:
            now = self._now()
            await self.snapshot_cache.save(result.items + result.undated, now)
            self.last_refresh_at = now

        self.is_offline = False
        self.state = RefreshState.IDLE

    async def _go_offline(self) -> None:
        """Keep last-known-good items; fall back to the snapshot if none are shown."""
        self.is_offline = True
        self.state = RefreshState.OFFLINE
        if self.items or not self.preferences.offline_mode:
            return

        await self._serve_snapshot()

    async def _serve_snapshot(self) -> None:
        snapshot = await self.snapshot_cache.load()
        if snapshot.is_empty:
            return
        # undated items are persisted but never listed
        self._set_items([item for item in snapshot.items if item.published_at is not None])
        self.last_refresh_at = snapshot.last_refresh_at

    def _auto_refresh_active(self) -> bool:
        return self.preferences.auto_refresh and self.state != RefreshState.OFFLINE

    def _set_items(self, items: list[UpdateItem]) -> None:
        self.items = list(items)
        self._recompute()

    def _recompute(self) -> None:
        self.visible = apply_filters(self.items, self.query, self.source_filter, self.category)
