"""Tests for configuration loading."""

import logging
from pathlib import Path

import pytest

from city_updates.config import get_settings, load_config
from city_updates.logging_setup import setup_logging
from city_updates.core import Category


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("NEWS_API_KEY", "GNEWS_API_KEY", "TWITTER_BEARER_TOKEN", "CITY_UPDATES_USER_ID"):
        monkeypatch.delenv(name, raising=False)


def test_missing_file_gives_defaults(tmp_path) -> None:
    """Test defaults when config.yaml is absent."""
    settings = get_settings(tmp_path / "missing.yaml")

    assert load_config(tmp_path / "missing.yaml") == {}
    assert settings.http.cache_ttl == 60.0
    assert settings.http.rate_limit_fallback == 900.0
    assert settings.storage_dir == Path("data")
    assert settings.twitter.accounts == ["shaheryarhassan", "IsbTraffic"]
    assert settings.preferences.refresh_interval_minutes == 5
    assert settings.news_api_key is None
    assert settings.user_id == "local"


def test_credentials_from_environment(tmp_path, monkeypatch) -> None:
    """Test API keys come from the environment."""
    monkeypatch.setenv("NEWS_API_KEY", "n-key")
    monkeypatch.setenv("TWITTER_BEARER_TOKEN", "t-token")
    monkeypatch.setenv("CITY_UPDATES_USER_ID", "alice")

    settings = get_settings(tmp_path / "missing.yaml")

    assert settings.news_api_key == "n-key"
    assert settings.twitter_bearer_token == "t-token"
    assert settings.gnews_api_key is None
    assert settings.user_id == "alice"


def test_yaml_sections_override_defaults(tmp_path) -> None:
    """Test each YAML section is applied."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
http:
  timeout: 5
  cache_ttl: 30
paths:
  storage_dir: /var/lib/city-updates
logging:
  level: DEBUG
  file: logs/app.log
gnews:
  enabled: false
twitter:
  accounts: [cdaisb]
rss:
  feeds:
    - name: Dawn
      url: https://example.com/feed.xml
keywords:
  places: [murree]
  categories:
    weather: [snow]
preferences:
  auto_refresh: false
  refresh_interval_minutes: 15
""",
        encoding="utf-8",
    )

    settings = get_settings(config_path)

    assert settings.http_timeout == 5
    assert settings.http.cache_ttl == 30
    assert settings.http.rate_limit_fallback == 900.0
    assert settings.storage_dir == Path("/var/lib/city-updates")
    assert settings.logging.level == "DEBUG"
    assert settings.logging.file == Path("logs/app.log")
    assert settings.gnews.enabled is False
    assert settings.newsapi.enabled is True
    assert settings.twitter.accounts == ["cdaisb"]
    assert settings.rss.feeds[0]["name"] == "Dawn"
    assert settings.keywords.places == ["murree"]
    assert settings.keywords.categories == [(Category.WEATHER, ["snow"])]
    assert settings.preferences.auto_refresh is False
    assert settings.preferences.refresh_interval_minutes == 15


def test_example_config_loads() -> None:
    """Test the shipped example config is valid."""
    example = Path(__file__).resolve().parent.parent / "config.example.yaml"

    settings = get_settings(example)

    assert settings.twitter.max_results == 40
    assert [category for category, _ in settings.keywords.categories][0] == Category.TRAFFIC


def test_setup_logging_writes_log_file(tmp_path) -> None:
    """Test the configured level, file handler and quiet httpx logger."""
    config_path = tmp_path / "config.yaml"
    log_file = tmp_path / "logs" / "city.log"
    config_path.write_text(f"logging:\n  level: debug\n  file: {log_file}\n", encoding="utf-8")
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)

    try:
        setup_logging(get_settings(config_path))
        logging.getLogger("city_updates.test").debug("refresh started")

        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        for handler in root.handlers:
            handler.flush()
        assert "refresh started" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)
