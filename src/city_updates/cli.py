"""CLI entry point for city updates."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from city_updates.adapters.render import MarkdownFeedRenderer
from city_updates.adapters.sources import (
    AdapterCache,
    DemoSource,
    Feed,
    GNewsSource,
    NewsAPISource,
    RSSSource,
    TwitterSource,
)
from city_updates.adapters.storage import FileKeyValueStore
from city_updates.config import Settings, get_settings
from city_updates.core import (
    Category,
    Identity,
    KeyValueStore,
    PreferencesStore,
    SavedItemsStore,
    SnapshotCache,
    SourceTag,
    UpdateItem,
    UpdateSource,
)
from city_updates.core.query import ALL
from city_updates.core.storage import snapshot_summary
from city_updates.logging_setup import setup_logging
from city_updates.use_cases import RefreshOrchestrator, UpdateAggregator

app = typer.Typer(help="Twin-city news and community updates feed")
saved_app = typer.Typer(help="Manage saved items")
cache_app = typer.Typer(help="Inspect or clear the offline snapshot")
app.add_typer(saved_app, name="saved")
app.add_typer(cache_app, name="cache")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to YAML config")


def build_sources(settings: Settings) -> list[UpdateSource]:
    """Instantiate the live sources enabled in settings, each with its own cache."""

    def cache_for(name: str) -> AdapterCache:
        return AdapterCache(
            name=name,
            ttl=settings.http.cache_ttl,
            fallback_window=settings.http.rate_limit_fallback,
        )

    common = {"tables": settings.keywords, "timeout": settings.http_timeout}
    sources: list[UpdateSource] = []

    if settings.twitter.enabled:
        sources.append(
            TwitterSource(
                bearer_token=settings.twitter_bearer_token,
                accounts=settings.twitter.accounts,
                search_query=settings.twitter.search_query,
                max_results=settings.twitter.max_results,
                search_days=settings.twitter.search_days,
                cache=cache_for("Twitter"),
                **common,
            )
        )

    if settings.newsapi.enabled:
        sources.append(
            NewsAPISource(
                api_key=settings.news_api_key,
                query=settings.newsapi.query,
                language=settings.newsapi.language,
                max_items=settings.newsapi.page_size,
                search_days=settings.newsapi.search_days,
                cache=cache_for("NewsAPI"),
                **common,
            )
        )

    if settings.gnews.enabled:
        sources.append(
            GNewsSource(
                api_key=settings.gnews_api_key,
                query=settings.gnews.query,
                language=settings.gnews.language,
                country=settings.gnews.country,
                max_items=settings.gnews.max_items,
                search_days=settings.gnews.search_days,
                cache=cache_for("GNews"),
                **common,
            )
        )

    if settings.rss.feeds:
        sources.append(
            RSSSource(
                feeds=[Feed(name=feed["name"], url=feed["url"]) for feed in settings.rss.feeds],
                max_items_per_feed=settings.rss.max_items_per_feed,
                cache=cache_for("RSS"),
                **common,
            )
        )

    return sources


def build_orchestrator(settings: Settings, store: Optional[KeyValueStore] = None) -> RefreshOrchestrator:
    """Wire sources, aggregator and stores into an orchestrator."""
    store = store or FileKeyValueStore(settings.storage_dir)
    aggregator = UpdateAggregator(
        sources=build_sources(settings),
        fallback=DemoSource(settings.keywords),
    )
    return RefreshOrchestrator(
        aggregator=aggregator,
        snapshot_cache=SnapshotCache(store),
        preferences_store=PreferencesStore(store, defaults=settings.preferences),
        saved_items=SavedItemsStore(store),
    )


def _load(config: Path) -> Settings:
    settings = get_settings(config)
    setup_logging(settings)
    return settings


def _print_credentials(settings: Settings) -> None:
    print("\n🔑 Credentials:")
    for label, value in (
        ("TWITTER_BEARER_TOKEN", settings.twitter_bearer_token),
        ("NEWS_API_KEY", settings.news_api_key),
        ("GNEWS_API_KEY", settings.gnews_api_key),
    ):
        if value:
            print(f"  ✓ {label}")
        else:
            print(f"  ✗ {label} - not found (source skipped)")
    if settings.rss.feeds:
        print(f"  ✓ RSS - {len(settings.rss.feeds)} feed(s)")


def _print_status(orchestrator: RefreshOrchestrator) -> None:
    result = orchestrator.last_result
    if result is not None:
        for name, count in result.per_source.items():
            print(f"  • {name}: {count}")
    if orchestrator.is_offline:
        print("⚠️  Offline - showing last known updates")
    if orchestrator.is_demo:
        print("🧪 No source configured - showing demo data")
    if orchestrator.last_refresh_at:
        print(f"🕒 Last refresh: {orchestrator.last_refresh_at.strftime('%d.%m.%Y %H:%M')}")


def _print_items(items: list[UpdateItem]) -> None:
    if not items:
        print("\nNo updates found.")
        return
    print()
    for item in items:
        author = f" {item.author}" if item.author else ""
        print(f"[{item.source.value}] {item.timestamp}{author}")
        print(f"  {item.title}")
        print(f"  id: {item.id}")


def _check_choice(value: str, choices: list[str], option: str) -> str:
    if value not in choices:
        raise typer.BadParameter(f"must be one of: {', '.join(choices)}", param_hint=option)
    return value


@app.command()
def feed(
    query: str = typer.Option("", "--query", "-q", help="Search title, content and author"),
    source: str = typer.Option(ALL, "--source", "-s", help="Source tag or 'all'"),
    category: str = typer.Option(ALL, "--category", help="Category or 'all'"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Show at most N items"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write Markdown to this file"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Load the feed once and print the visible items."""
    _check_choice(source, [ALL] + [tag.value for tag in SourceTag], "--source")
    _check_choice(category, [ALL] + [c.value for c in Category], "--category")
    asyncio.run(async_feed(query, source, category, limit, output, config))


async def async_feed(
    query: str,
    source: str,
    category: str,
    limit: Optional[int],
    output: Optional[Path],
    config: Path,
) -> None:
    """Async implementation of feed command."""
    settings = _load(config)

    print("\n" + "=" * 70)
    print("🏙️  CITY UPDATES - Islamabad / Rawalpindi")
    print("=" * 70)
    _print_credentials(settings)

    orchestrator = build_orchestrator(settings)
    if not await orchestrator.start(Identity(user_id=settings.user_id)):
        print("❌ Not authenticated")
        raise typer.Exit(code=1)

    orchestrator.set_source_filter(source)
    orchestrator.set_category(category)
    orchestrator.set_query(query)

    print("\n📡 Sources:")
    _print_status(orchestrator)

    visible = orchestrator.visible[:limit] if limit else orchestrator.visible

    if output is None:
        _print_items(visible)
        return

    markdown = MarkdownFeedRenderer().render(
        visible,
        generated_at=datetime.now(),
        last_refresh_at=orchestrator.last_refresh_at,
        is_offline=orchestrator.is_offline,
        is_demo=orchestrator.is_demo,
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    print(f"\n📄 Feed saved: {output} ({len(visible)} items)")


@app.command()
def watch(
    cycles: Optional[int] = typer.Option(None, "--cycles", min=1, help="Stop after N refreshes"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Initial load, then refresh on the preferences interval."""
    asyncio.run(async_watch(cycles, config))


async def async_watch(cycles: Optional[int], config: Path) -> None:
    """Async implementation of watch command."""
    settings = _load(config)
    orchestrator = build_orchestrator(settings)

    if not await orchestrator.start(Identity(user_id=settings.user_id)):
        print("❌ Not authenticated")
        raise typer.Exit(code=1)

    print(f"🏙️  Loaded {len(orchestrator.visible)} updates")
    _print_status(orchestrator)

    if not orchestrator.preferences.auto_refresh:
        print("⏸️  Auto-refresh is disabled in preferences")
        return

    interval = orchestrator.preferences.refresh_interval_minutes
    print(f"🔄 Refreshing every {interval} min (Ctrl+C to stop)")

    done = 0
    while cycles is None or done < cycles:
        if not await orchestrator.run_auto_refresh(max_cycles=1):
            break
        done += 1
        stamp = datetime.now(timezone.utc).strftime("%H:%M:%S")
        print(f"[{stamp}] {len(orchestrator.visible)} updates")
        _print_status(orchestrator)

    if orchestrator.is_offline:
        print("⚠️  Offline - auto-refresh paused until a manual refresh succeeds")


@saved_app.command("list")
def saved_list(config: Path = CONFIG_OPTION) -> None:
    """Show saved items."""
    settings = _load(config)
    saved = SavedItemsStore(FileKeyValueStore(settings.storage_dir))
    items = asyncio.run(saved.list_items())
    print(f"⭐ Saved items: {len(items)}")
    _print_items(items)


@saved_app.command("add")
def saved_add(item_id: str, config: Path = CONFIG_OPTION) -> None:
    """Save an item from the offline snapshot by id."""
    settings = _load(config)
    store = FileKeyValueStore(settings.storage_dir)

    async def run() -> Optional[UpdateItem]:
        snapshot = await SnapshotCache(store).load()
        item = next((item for item in snapshot.items if item.id == item_id), None)
        if item is not None:
            await SavedItemsStore(store).save(item)
        return item

    item = asyncio.run(run())
    if item is None:
        print(f"❌ No cached item with id {item_id} - run `feed` first")
        raise typer.Exit(code=1)
    print(f"⭐ Saved: {item.title}")


@saved_app.command("remove")
def saved_remove(item_id: str, config: Path = CONFIG_OPTION) -> None:
    """Remove a saved item by id."""
    settings = _load(config)
    saved = SavedItemsStore(FileKeyValueStore(settings.storage_dir))
    if not asyncio.run(saved.remove(item_id)):
        print(f"❌ Item {item_id} is not saved")
        raise typer.Exit(code=1)
    print(f"🗑️  Removed {item_id}")


@saved_app.command("clear")
def saved_clear(config: Path = CONFIG_OPTION) -> None:
    """Remove all saved items."""
    settings = _load(config)
    asyncio.run(SavedItemsStore(FileKeyValueStore(settings.storage_dir)).clear())
    print("🗑️  Saved items cleared")


@cache_app.command("info")
def cache_info(config: Path = CONFIG_OPTION) -> None:
    """Show snapshot size and last refresh time."""
    settings = _load(config)
    cache = SnapshotCache(FileKeyValueStore(settings.storage_dir))

    async def run() -> tuple[dict, str]:
        return snapshot_summary(await cache.load()), await cache.size_label()

    summary, size = asyncio.run(run())
    print(f"💾 Cached items: {summary['items']}")
    print(f"📦 Size: {size}")
    print(f"🕒 Last refresh: {summary['last_refresh_at'] or 'never'}")


@cache_app.command("clear")
def cache_clear(config: Path = CONFIG_OPTION) -> None:
    """Delete the offline snapshot."""
    settings = _load(config)
    asyncio.run(SnapshotCache(FileKeyValueStore(settings.storage_dir)).clear())
    print("🗑️  Cache cleared")


if __name__ == "__main__":
    app()
