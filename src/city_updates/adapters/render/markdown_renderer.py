"""Markdown rendering of a feed."""

from datetime import datetime
from typing import Optional

from city_updates.core import Category, UpdateItem

CATEGORY_HEADINGS = {
    Category.EMERGENCIES: "🚨 Emergencies",
    Category.TRAFFIC: "🚗 Traffic",
    Category.WEATHER: "🌤️ Weather",
    Category.EVENT: "🎉 Events",
    Category.TRAVEL: "✈️ Travel",
    Category.COMMUNITY: "👥 Community",
    Category.BUSINESS: "💼 Business",
    Category.NEWS: "📰 News",
}

CONTENT_PREVIEW = 280


class MarkdownFeedRenderer:
    """Render visible items as a Markdown page grouped by category."""

    def render(
        self,
        items: list[UpdateItem],
        generated_at: datetime,
        last_refresh_at: Optional[datetime] = None,
        is_offline: bool = False,
        is_demo: bool = False,
    ) -> str:
        """Render the feed page."""
        lines = [
            f"# 🏙️ City updates: {generated_at.strftime('%d.%m.%Y %H:%M')}",
            "",
        ]

        if is_offline:
            lines.extend(["> ⚠️ Offline: showing last known updates.", ""])
        if is_demo:
            lines.extend(["> 🧪 Demo data: no news provider is configured.", ""])
        if last_refresh_at:
            lines.extend([f"Last refresh: {last_refresh_at.strftime('%d.%m.%Y %H:%M')}", ""])

        if not items:
            lines.append("No updates found.")
            return "\n".join(lines)

        lines.extend([f"Updates: {len(items)}", ""])

        # Items keep their feed order inside each group
        for category, heading in CATEGORY_HEADINGS.items():
            group = [item for item in items if item.category == category]
            if not group:
                continue
            lines.extend([f"## {heading}", ""])
            for item in group:
                lines.extend(self._format_item(item))

        return "\n".join(lines)

    def _format_item(self, item: UpdateItem) -> list[str]:
        """Format single feed entry."""
        heading = f"[{item.title}]({item.source_url})" if item.source_url else item.title
        content = item.content
        if len(content) > CONTENT_PREVIEW:
            content = content[:CONTENT_PREVIEW].rstrip() + "..."

        lines = [f"### {heading}", "", content, ""]

        meta_parts = [item.source.value, item.timestamp]
        if item.author:
            meta_parts.append(item.author)
        if item.location:
            meta_parts.append(f"📍 {item.location.name}")
        if item.likes is not None:
            meta_parts.append(f"❤️ {item.likes}")
        if item.shares is not None:
            meta_parts.append(f"🔁 {item.shares}")
        lines.append(f"*{' | '.join(meta_parts)}*")
        lines.append("")

        if item.has_media and item.media_url:
            lines.extend([f"![media]({item.media_url})", ""])

        lines.append("---")
        lines.append("")
        return lines
