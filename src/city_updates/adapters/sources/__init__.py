"""Source adapters for fetching update items."""

from city_updates.adapters.sources.demo_source import DemoSource
from city_updates.adapters.sources.gnews_source import GNewsSource
from city_updates.adapters.sources.newsapi_source import NewsAPISource
from city_updates.adapters.sources.rate_limit import AdapterCache
from city_updates.adapters.sources.rss_source import Feed, RSSSource
from city_updates.adapters.sources.twitter_source import TwitterSource

__all__ = [
    "AdapterCache",
    "DemoSource",
    "Feed",
    "GNewsSource",
    "NewsAPISource",
    "RSSSource",
    "TwitterSource",
]
