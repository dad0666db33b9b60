"""Tests for RSS source."""

import httpx
import pytest

from city_updates.adapters.sources import Feed, RSSSource
from city_updates.core import Category, MediaType, SourceTag

FEED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Local news</title>
    <item>
      <title>Rain lashes Rawalpindi</title>
      <link>https://example.com/rain</link>
      <description>&lt;p&gt;Nullah Leh rises after heavy &lt;b&gt;rain&lt;/b&gt;.&lt;/p&gt;</description>
      <pubDate>Fri, 01 Mar 2024 09:00:00 +0500</pubDate>
      <enclosure url="https://example.com/rain.jpg" type="image/jpeg" length="1"/>
    </item>
    <item>
      <title>Lahore metro extended</title>
      <link>https://example.com/lahore</link>
      <description>Punjab transport news</description>
      <pubDate>Fri, 01 Mar 2024 08:00:00 +0500</pubDate>
    </item>
    <item>
      <title>Islamabad item without date</title>
      <link>https://example.com/nodate</link>
    </item>
  </channel>
</rss>
"""


def xml_transport(body: str, status_code: int = 200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_fetch_local_items() -> None:
    """Test parsing, locality filtering and mapping."""
    source = RSSSource(
        feeds=[Feed(name="Dawn", url="https://example.com/feed.xml")],
        transport=xml_transport(FEED_XML),
    )

    items = await source.fetch_items()

    assert len(items) == 1
    item = items[0]
    assert item.source == SourceTag.RSS
    assert item.id.startswith("rss-")
    assert item.title == "Rain lashes Rawalpindi"
    assert item.content == "Nullah Leh rises after heavy rain ."
    assert item.timestamp == "2024-03-01T09:00:00+05:00"
    assert item.author == "Dawn"
    assert item.media_type == MediaType.IMAGE
    assert item.media_url == "https://example.com/rain.jpg"
    assert item.category == Category.WEATHER
    assert item.source_url == "https://example.com/rain"


@pytest.mark.asyncio
async def test_malformed_feed_yields_empty() -> None:
    """Test unparseable XML is treated as an empty feed."""
    source = RSSSource(
        feeds=[Feed(name="Broken", url="https://example.com/broken.xml")],
        transport=xml_transport("<rss><channel><item>"),
    )

    assert await source.fetch_items() == []


@pytest.mark.asyncio
async def test_failing_feed_does_not_affect_others() -> None:
    """Test one failing feed is isolated from the rest."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/down.xml":
            return httpx.Response(503)
        return httpx.Response(200, text=FEED_XML)

    source = RSSSource(
        feeds=[
            Feed(name="Down", url="https://example.com/down.xml"),
            Feed(name="Dawn", url="https://example.com/feed.xml"),
        ],
        transport=httpx.MockTransport(handler),
    )

    items = await source.fetch_items()

    assert [item.author for item in items] == ["Dawn"]


@pytest.mark.asyncio
async def test_no_feeds_is_not_configured() -> None:
    """Test the source is skipped without feeds."""
    calls = []
    source = RSSSource(feeds=[], transport=xml_transport(FEED_XML, calls=calls))

    assert not source.is_configured
    assert await source.fetch_items() == []
    assert calls == []
