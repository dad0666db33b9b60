"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from city_updates.adapters.sources.filters import KeywordTables
from city_updates.adapters.sources.gnews_source import DEFAULT_QUERY as GNEWS_DEFAULT_QUERY
from city_updates.adapters.sources.newsapi_source import DEFAULT_QUERY as NEWSAPI_DEFAULT_QUERY
from city_updates.adapters.sources.twitter_source import DEFAULT_SEARCH_QUERY
from city_updates.core import Preferences


@dataclass
class HttpConfig:
    """Outbound HTTP and caching settings."""
    timeout: float = 10.0
    cache_ttl: float = 60.0
    rate_limit_fallback: float = 15 * 60.0


@dataclass
class PathsConfig:
    """Path settings."""
    storage_dir: Path = Path("data")


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: Optional[Path] = None


@dataclass
class NewsAPIConfig:
    """NewsAPI.org request settings."""
    enabled: bool = True
    query: str = NEWSAPI_DEFAULT_QUERY
    language: str = "en"
    page_size: int = 30
    search_days: int = 2


@dataclass
class GNewsConfig:
    """GNews request settings."""
    enabled: bool = True
    query: str = GNEWS_DEFAULT_QUERY
    language: str = "en"
    country: Optional[str] = "pk"
    max_items: int = 30
    search_days: int = 2


@dataclass
class TwitterConfig:
    """Twitter v2 request settings."""
    enabled: bool = True
    accounts: list[str] = field(default_factory=lambda: ["shaheryarhassan", "IsbTraffic"])
    search_query: Optional[str] = DEFAULT_SEARCH_QUERY
    max_results: int = 40
    search_days: int = 2


@dataclass
class RSSConfig:
    """RSS feeds; each entry is a mapping with `name` and `url`."""
    feeds: list[dict] = field(default_factory=list)
    max_items_per_feed: int = 30


@dataclass
class Settings:
    """Application settings."""

    # API keys (from environment only)
    news_api_key: Optional[str] = None
    gnews_api_key: Optional[str] = None
    twitter_bearer_token: Optional[str] = None
    user_id: str = "local"

    # Config sections
    http: HttpConfig = field(default_factory=HttpConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    newsapi: NewsAPIConfig = field(default_factory=NewsAPIConfig)
    gnews: GNewsConfig = field(default_factory=GNewsConfig)
    twitter: TwitterConfig = field(default_factory=TwitterConfig)
    rss: RSSConfig = field(default_factory=RSSConfig)
    keywords: KeywordTables = field(default_factory=KeywordTables)
    preferences: Preferences = field(default_factory=Preferences)

    @property
    def storage_dir(self) -> Path:
        return self.paths.storage_dir

    @property
    def http_timeout(self) -> float:
        return self.http.timeout


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        news_api_key=os.getenv("NEWS_API_KEY"),
        gnews_api_key=os.getenv("GNEWS_API_KEY"),
        twitter_bearer_token=os.getenv("TWITTER_BEARER_TOKEN"),
        user_id=os.getenv("CITY_UPDATES_USER_ID", "local"),
    )

    for section in ("http", "newsapi", "gnews", "twitter", "rss", "preferences"):
        if section in config:
            target = getattr(settings, section)
            for key, value in (config[section] or {}).items():
                setattr(target, key, value)

    if "paths" in config:
        for key, value in (config["paths"] or {}).items():
            setattr(settings.paths, key, Path(value))

    if "logging" in config:
        section = config["logging"] or {}
        if "level" in section:
            settings.logging.level = str(section["level"])
        if section.get("file"):
            settings.logging.file = Path(section["file"])

    if "keywords" in config:
        settings.keywords = KeywordTables.from_config(config["keywords"] or {})

    return settings
