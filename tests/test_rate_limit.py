"""Tests for the per-adapter cache and rate-limit gate."""

from unittest.mock import AsyncMock

import pytest

from city_updates.adapters.sources import AdapterCache
from city_updates.core.errors import RateLimitedError

from conftest import make_item


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> AdapterCache:
    return AdapterCache(name="test", ttl=60, fallback_window=900, clock=clock)


@pytest.mark.asyncio
async def test_fresh_entry_served_without_loader(cache, clock) -> None:
    """Test a second call within TTL reuses the cached result."""
    loader = AsyncMock(return_value=[make_item("a")])

    first = await cache.fetch_by_key("acct", loader)
    clock.now += 59
    second = await cache.fetch_by_key("acct", loader)

    assert first == second == [make_item("a")]
    loader.assert_awaited_once()


@pytest.mark.asyncio
async def test_expired_entry_refetched(cache, clock) -> None:
    """Test the loader runs again after the TTL."""
    loader = AsyncMock(side_effect=[[make_item("a")], [make_item("b")]])

    await cache.fetch_by_key("acct", loader)
    clock.now += 61
    result = await cache.fetch_by_key("acct", loader)

    assert result == [make_item("b")]
    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_search_and_key_entries_are_separate(cache) -> None:
    """Test keyed lookups and searches don't share entries."""
    key_loader = AsyncMock(return_value=[make_item("k")])
    search_loader = AsyncMock(return_value=[make_item("s")])

    assert await cache.fetch_by_key("traffic", key_loader) == [make_item("k")]
    assert await cache.search_by_query("traffic", search_loader) == [make_item("s")]


@pytest.mark.asyncio
async def test_rate_limit_uses_reset_hint(cache, clock) -> None:
    """Test a 429 with a reset hint blocks until that time."""
    loader = AsyncMock(side_effect=RateLimitedError("slow down", reset_at=clock.now + 120))

    assert await cache.fetch_by_key("acct", loader) == []
    assert cache.is_rate_limited()
    assert cache.rate_limited_until == clock.now + 120

    clock.now += 121
    assert not cache.is_rate_limited()


@pytest.mark.asyncio
async def test_rate_limit_fallback_window(cache, clock) -> None:
    """Test a 429 without a hint blocks for the fallback window."""
    loader = AsyncMock(side_effect=RateLimitedError("slow down"))

    await cache.search_by_query("q", loader)

    assert cache.rate_limited_until == clock.now + 900


@pytest.mark.asyncio
async def test_gate_blocks_all_keys_and_serves_last_value(cache, clock) -> None:
    """Test no loader runs while blocked; stale values are served."""
    await cache.fetch_by_key("acct", AsyncMock(return_value=[make_item("old")]))
    clock.now += 61

    limited = AsyncMock(side_effect=RateLimitedError("slow down"))
    assert await cache.fetch_by_key("acct", limited) == [make_item("old")]

    blocked_loader = AsyncMock(return_value=[make_item("new")])
    assert await cache.fetch_by_key("acct", blocked_loader) == [make_item("old")]
    assert await cache.search_by_query("other", blocked_loader) == []
    blocked_loader.assert_not_awaited()

    clock.now += 901
    assert await cache.fetch_by_key("acct", blocked_loader) == [make_item("new")]
    blocked_loader.assert_awaited_once()


@pytest.mark.asyncio
async def test_other_errors_propagate_without_blocking(cache) -> None:
    """Test non-rate-limit failures are left to the adapter."""
    loader = AsyncMock(side_effect=ValueError("boom"))

    with pytest.raises(ValueError):
        await cache.fetch_by_key("acct", loader)
    assert not cache.is_rate_limited()
