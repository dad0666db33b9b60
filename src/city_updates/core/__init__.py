"""Core domain layer."""

from city_updates.core.entities import (
    AggregationResult,
    CacheSnapshot,
    Category,
    FallbackTier,
    Identity,
    Location,
    MediaType,
    Preferences,
    SourceTag,
    UpdateItem,
)
from city_updates.core.interfaces import KeyValueStore, UpdateSource
from city_updates.core.query import apply_filters
from city_updates.core.storage import PreferencesStore, SavedItemsStore, SnapshotCache

__all__ = [
    "UpdateItem",
    "SourceTag",
    "MediaType",
    "Category",
    "Location",
    "Preferences",
    "CacheSnapshot",
    "Identity",
    "AggregationResult",
    "FallbackTier",
    "UpdateSource",
    "KeyValueStore",
    "apply_filters",
    "SnapshotCache",
    "PreferencesStore",
    "SavedItemsStore",
]
