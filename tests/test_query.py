"""Tests for the query/filter layer."""

from city_updates.core import Category, SourceTag, apply_filters
from city_updates.core.query import ALL, filter_by_source, search

from conftest import make_item

ITEMS = [
    make_item("1", source=SourceTag.SOCIAL, title="Traffic jam on Kashmir Highway",
              author="@IsbTraffic", category=Category.TRAFFIC),
    make_item("2", source=SourceTag.NEWS_A, title="Rain forecast", content="Showers in Rawalpindi",
              category=Category.WEATHER),
    make_item("3", source=SourceTag.NEWS_B, title="Book fair", content="At Pak-China centre",
              author="Dawn", category=Category.EVENT),
    make_item("4", source=SourceTag.SOCIAL, title="Water supply suspended", content="Sector G-9"),
]


def test_no_filters_is_identity() -> None:
    """Test empty query and 'all' return the input unchanged."""
    assert apply_filters(ITEMS) == ITEMS
    assert apply_filters(ITEMS, "", ALL, ALL) == ITEMS
    assert apply_filters(ITEMS, "   ") == ITEMS


def test_search_title_content_author_case_insensitive() -> None:
    """Test search over each searchable field."""
    assert [i.id for i in search(ITEMS, "TRAFFIC")] == ["1"]
    assert [i.id for i in search(ITEMS, "rawalpindi")] == ["2"]
    assert [i.id for i in search(ITEMS, "dawn")] == ["3"]
    assert [i.id for i in search(ITEMS, "  water ")] == ["4"]
    assert search(ITEMS, "lahore") == []


def test_source_filter() -> None:
    """Test filtering by source tag keeps order."""
    assert [i.id for i in filter_by_source(ITEMS, "social")] == ["1", "4"]
    assert filter_by_source(ITEMS, "rss") == []


def test_filters_compose() -> None:
    """Test source filter and search compose as an intersection."""
    result = apply_filters(ITEMS, "supply", "social")
    assert [i.id for i in result] == ["4"]
    assert apply_filters(ITEMS, "rain", "social") == []


def test_category_filter() -> None:
    """Test filtering by category."""
    assert [i.id for i in apply_filters(ITEMS, category="weather")] == ["2"]
    assert [i.id for i in apply_filters(ITEMS, category="news")] == ["4"]


def test_filters_idempotent() -> None:
    """Test re-applying the same filters changes nothing."""
    once = apply_filters(ITEMS, "a", "social")
    assert apply_filters(once, "a", "social") == once
