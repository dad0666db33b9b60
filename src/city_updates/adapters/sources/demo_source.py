"""Static demonstration dataset used when no provider is configured."""

from typing import Optional

from city_updates.adapters.sources.filters import KeywordTables, categorize, has_location
from city_updates.core import MediaType, SourceTag, UpdateItem, UpdateSource

DEMO_ENTRIES = [
    {
        "id": "1",
        "source": SourceTag.SOCIAL,
        "title": "City Council Meeting Update",
        "content": "The city council approved the new community center project with unanimous support. "
                   "Construction begins next month with an estimated completion date of December 2024.",
        "timestamp": "2024-01-15T10:30:00Z",
        "author": "@TwinCityGov",
        "likes": 45,
        "shares": 12,
    },
    {
        "id": "2",
        "source": SourceTag.SOCIAL,
        "title": "Public Transportation Schedule Changes",
        "content": "Metro bus routes 15 and 22 will have temporary schedule changes due to road construction "
                   "on Main Street. Alternative routes have been established.",
        "timestamp": "2024-01-15T08:15:00Z",
        "author": "Twin City Transit",
        "media_url": "https://images.pexels.com/photos/1756957/pexels-photo-1756957.jpeg?auto=compress&cs=tinysrgb&w=800",
        "likes": 23,
        "shares": 8,
    },
    {
        "id": "3",
        "source": SourceTag.MESSAGING,
        "title": "Emergency Weather Alert",
        "content": "Severe thunderstorm warning issued for Twin City area. Residents advised to stay indoors "
                   "until 8 PM. Emergency shelters are available at City Hall and Community Center.",
        "timestamp": "2024-01-15T06:45:00Z",
        "author": "Emergency Services",
    },
    {
        "id": "4",
        "source": SourceTag.SOCIAL,
        "title": "Local Business Spotlight",
        "content": "Congratulations to Twin City Bakery for winning the Regional Small Business Award! "
                   "Their commitment to the community and quality products makes us proud.",
        "timestamp": "2024-01-14T16:20:00Z",
        "author": "@TwinCityBiz",
        "media_url": "https://images.pexels.com/photos/1070850/pexels-photo-1070850.jpeg?auto=compress&cs=tinysrgb&w=800",
        "likes": 78,
        "shares": 25,
    },
    {
        "id": "5",
        "source": SourceTag.SOCIAL,
        "title": "Community Event Announcement",
        "content": "Join us for the annual Twin City Summer Festival on July 15-17! Live music, local vendors, "
                   "food trucks, and family activities. Free admission for all residents.",
        "timestamp": "2024-01-14T14:10:00Z",
        "author": "Twin City Events",
        "media_url": "https://images.pexels.com/photos/1190298/pexels-photo-1190298.jpeg?auto=compress&cs=tinysrgb&w=800",
        "likes": 156,
        "shares": 89,
    },
    {
        "id": "6",
        "source": SourceTag.MESSAGING,
        "title": "Water Service Maintenance",
        "content": "Scheduled water service maintenance on Oak Street between 9 AM - 3 PM tomorrow. "
                   "Residents may experience low water pressure during this time.",
        "timestamp": "2024-01-14T12:30:00Z",
        "author": "Public Works",
    },
]


def demo_items(tables: Optional[KeywordTables] = None) -> list[UpdateItem]:
    """Build the demonstration items; ids carry a `demo-` prefix."""
    tables = tables or KeywordTables()
    items = []
    for entry in DEMO_ENTRIES:
        text = f"{entry['title']} {entry['content']}"
        media_url = entry.get("media_url")
        items.append(UpdateItem(
            id=f"demo-{entry['id']}",
            source=entry["source"],
            title=entry["title"],
            content=entry["content"],
            timestamp=entry["timestamp"],
            author=entry.get("author"),
            has_media=media_url is not None,
            media_url=media_url,
            media_type=MediaType.IMAGE if media_url else None,
            likes=entry.get("likes"),
            shares=entry.get("shares"),
            category=categorize(text, tables.categories),
            has_location=has_location(text, tables.gazetteer),
        ))
    return items


class DemoSource(UpdateSource):
    """Serves the demonstration dataset. Never configured, never part of the live fan-out."""

    emoji = "🧪"
    name = "Demo"
    source_tag = SourceTag.MESSAGING

    def __init__(self, tables: Optional[KeywordTables] = None) -> None:
        self.tables = tables or KeywordTables()

    @property
    def is_configured(self) -> bool:
        return False

    async def fetch_items(self) -> list[UpdateItem]:
        return demo_items(self.tables)
