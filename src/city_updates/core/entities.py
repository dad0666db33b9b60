"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from city_updates.core.errors import MalformedItemError


class SourceTag(str, Enum):
    """Provenance of an update item."""

    SOCIAL = "social"
    NEWS_A = "news-a"
    NEWS_B = "news-b"
    MESSAGING = "messaging"
    RSS = "rss"


class MediaType(str, Enum):
    """Kind of attachment carried by an item."""

    IMAGE = "image"
    VIDEO = "video"
    LINK = "link"


class Category(str, Enum):
    """Topic tag derived from item text."""

    TRAFFIC = "traffic"
    WEATHER = "weather"
    EMERGENCIES = "emergencies"
    EVENT = "event"
    BUSINESS = "business"
    COMMUNITY = "community"
    TRAVEL = "travel"
    NEWS = "news"


class FallbackTier(str, Enum):
    """Which fallback tier produced an aggregation result."""

    LIVE = "live"
    OUTAGE = "outage"
    DEMO = "demo"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning None when it is unusable."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Location:
    """Structured place attached to an item."""

    name: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.address is not None:
            data["address"] = self.address
        if self.latitude is not None and self.longitude is not None:
            data["coordinates"] = {"latitude": self.latitude, "longitude": self.longitude}
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Location":
        if not isinstance(data, dict):
            raise MalformedItemError(f"Invalid location: {data!r}")
        coordinates = data.get("coordinates")
        if not isinstance(coordinates, dict):
            coordinates = {}
        return cls(
            name=str(data["name"]),
            address=data.get("address"),
            latitude=coordinates.get("latitude"),
            longitude=coordinates.get("longitude"),
        )


@dataclass(frozen=True)
class UpdateItem:
    """Normalized content unit shared by every source."""

    id: str
    source: SourceTag
    title: str
    content: str
    timestamp: str
    author: Optional[str] = None
    has_media: bool = False
    media_url: Optional[str] = None
    media_type: Optional[MediaType] = None
    likes: Optional[int] = None
    shares: Optional[int] = None
    category: Category = Category.NEWS
    has_location: bool = False
    location: Optional[Location] = None
    source_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ID cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")

    @property
    def published_at(self) -> Optional[datetime]:
        """Parsed timestamp, or None when the source sent garbage."""
        return parse_timestamp(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON layout used in persistent storage."""
        data: dict[str, Any] = {
            "id": self.id,
            "source": self.source.value,
            "title": self.title,
            "content": self.content,
            "timestamp": self.timestamp,
            "hasMedia": self.has_media,
            "category": self.category.value,
            "hasLocation": self.has_location,
        }
        optional = {
            "author": self.author,
            "mediaUrl": self.media_url,
            "mediaType": self.media_type.value if self.media_type else None,
            "likes": self.likes,
            "shares": self.shares,
            "location": self.location.to_dict() if self.location else None,
            "sourceUrl": self.source_url,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "UpdateItem":
        """Build an item from its stored mapping.

        Raises:
            MalformedItemError: required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise MalformedItemError(f"Expected mapping, got {type(data).__name__}")

        try:
            location = data.get("location")
            media_type = data.get("mediaType")
            return cls(
                id=str(data["id"]),
                source=SourceTag(data["source"]),
                title=str(data["title"]),
                content=str(data.get("content") or ""),
                timestamp=str(data["timestamp"]),
                author=data.get("author"),
                has_media=bool(data.get("hasMedia", False)),
                media_url=data.get("mediaUrl"),
                media_type=MediaType(media_type) if media_type else None,
                likes=data.get("likes"),
                shares=data.get("shares"),
                category=Category(data.get("category") or Category.NEWS.value),
                has_location=bool(data.get("hasLocation", False)),
                location=Location.from_dict(location) if location else None,
                source_url=data.get("sourceUrl"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedItemError(f"Invalid stored item: {e}") from e


@dataclass
class Preferences:
    """User settings owned by the refresh orchestrator."""

    dark_mode: bool = False
    push_notifications: bool = True
    offline_mode: bool = True
    auto_refresh: bool = True
    refresh_interval_minutes: int = 5

    def to_dict(self) -> dict[str, Any]:
        return {
            "darkMode": self.dark_mode,
            "pushNotifications": self.push_notifications,
            "offlineMode": self.offline_mode,
            "autoRefresh": self.auto_refresh,
            "refreshInterval": self.refresh_interval_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: Optional["Preferences"] = None) -> "Preferences":
        """Merge stored values over defaults, ignoring unknown keys."""
        base = defaults or cls()
        interval = data.get("refreshInterval", base.refresh_interval_minutes)
        if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
            interval = base.refresh_interval_minutes
        return cls(
            dark_mode=bool(data.get("darkMode", base.dark_mode)),
            push_notifications=bool(data.get("pushNotifications", base.push_notifications)),
            offline_mode=bool(data.get("offlineMode", base.offline_mode)),
            auto_refresh=bool(data.get("autoRefresh", base.auto_refresh)),
            refresh_interval_minutes=interval,
        )


@dataclass
class CacheSnapshot:
    """Persisted copy of the most recent aggregated items."""

    items: list[UpdateItem] = field(default_factory=list)
    last_refresh_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class Identity:
    """Opaque signal from the identity provider."""

    user_id: str
    authenticated: bool = True


@dataclass
class AggregationResult:
    """Outcome of one aggregation pass."""

    items: list[UpdateItem]
    tier: FallbackTier
    undated: list[UpdateItem] = field(default_factory=list)
    per_source: dict[str, int] = field(default_factory=dict)

    @property
    def is_demo(self) -> bool:
        return self.tier == FallbackTier.DEMO


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def newest_first(items: list[UpdateItem]) -> list[UpdateItem]:
    """Sort by parsed timestamp, newest first; unparseable timestamps go last."""
    return sorted(items, key=lambda item: item.published_at or _EPOCH, reverse=True)
