"""Keyword search and source/category filtering over aggregated items."""

from typing import Iterable

from city_updates.core.entities import UpdateItem

ALL = "all"


def filter_by_source(items: Iterable[UpdateItem], source: str) -> list[UpdateItem]:
    """Keep items whose source tag equals `source` ("all" keeps everything)."""
    if source == ALL:
        return list(items)
    return [item for item in items if item.source.value == source]


def filter_by_category(items: Iterable[UpdateItem], category: str) -> list[UpdateItem]:
    """Keep items in `category` ("all" keeps everything)."""
    if category == ALL:
        return list(items)
    return [item for item in items if item.category.value == category]


def search(items: Iterable[UpdateItem], query: str) -> list[UpdateItem]:
    """Case-insensitive substring search over title, content and author."""
    term = query.strip().lower()
    if not term:
        return list(items)

    return [
        item
        for item in items
        if term in item.title.lower()
        or term in item.content.lower()
        or (item.author is not None and term in item.author.lower())
    ]


def apply_filters(
    items: Iterable[UpdateItem],
    query: str = "",
    source_filter: str = ALL,
    category: str = ALL,
) -> list[UpdateItem]:
    """Compute the visible subset: source filter, then category, then search.

    Order of `items` is preserved and the result is idempotent under
    re-application with the same arguments.
    """
    filtered = filter_by_source(items, source_filter)
    filtered = filter_by_category(filtered, category)
    return search(filtered, query)
