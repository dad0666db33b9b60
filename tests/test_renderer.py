"""Tests for Markdown feed renderer."""

from datetime import datetime

from city_updates.adapters.render import MarkdownFeedRenderer
from city_updates.core import Category, Location, SourceTag, UpdateItem

from conftest import make_item

GENERATED = datetime(2024, 3, 1, 12, 30)


def test_render_groups_by_category() -> None:
    """Test items appear under their category heading."""
    items = [
        make_item("1", title="Jam on Murree Road", category=Category.TRAFFIC),
        make_item("2", title="Cabinet meets", category=Category.NEWS),
    ]

    markdown = MarkdownFeedRenderer().render(items, GENERATED)

    assert markdown.startswith("# 🏙️ City updates: 01.03.2024 12:30")
    assert "Updates: 2" in markdown
    assert markdown.index("## 🚗 Traffic") < markdown.index("Jam on Murree Road")
    assert markdown.index("## 📰 News") < markdown.index("Cabinet meets")
    assert "Weather" not in markdown


def test_render_item_meta() -> None:
    """Test link, engagement and location in the meta line."""
    item = UpdateItem(
        id="t1",
        source=SourceTag.SOCIAL,
        title="Road closed",
        content="x" * 400,
        timestamp="2024-03-01T08:00:00Z",
        author="@IsbTraffic",
        likes=4,
        shares=1,
        location=Location(name="Saddar"),
        source_url="https://twitter.com/i/status/1",
        has_media=True,
        media_url="https://example.com/m.jpg",
    )

    markdown = MarkdownFeedRenderer().render([item], GENERATED)

    assert "### [Road closed](https://twitter.com/i/status/1)" in markdown
    assert "*social | 2024-03-01T08:00:00Z | @IsbTraffic | 📍 Saddar | ❤️ 4 | 🔁 1*" in markdown
    assert "x" * 280 + "..." in markdown
    assert "![media](https://example.com/m.jpg)" in markdown


def test_render_omits_missing_engagement() -> None:
    """Test absent counts are not shown as zero."""
    markdown = MarkdownFeedRenderer().render([make_item("1")], GENERATED)

    assert "❤️" not in markdown
    assert "🔁" not in markdown


def test_render_banners_and_empty_feed() -> None:
    """Test offline/demo banners and the empty message."""
    markdown = MarkdownFeedRenderer().render(
        [], GENERATED, last_refresh_at=datetime(2024, 3, 1, 11, 0), is_offline=True, is_demo=True
    )

    assert "Offline" in markdown
    assert "Demo data" in markdown
    assert "Last refresh: 01.03.2024 11:00" in markdown
    assert markdown.endswith("No updates found.")
