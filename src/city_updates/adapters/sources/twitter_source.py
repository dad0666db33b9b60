"""Twitter v2 source for city accounts and a traffic-focused search."""

import asyncio
import logging
import re
from typing import Any, Callable, Optional

import httpx

from city_updates.adapters.sources.base import HttpUpdateSource, to_iso
from city_updates.core import Location, MediaType, SourceTag, UpdateItem
from city_updates.core.entities import newest_first
from city_updates.core.errors import MalformedItemError, SourceError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_QUERY = (
    '(traffic OR road OR accident OR closure OR jam OR diversion) '
    '(Islamabad OR Rawalpindi OR "twin cities") -is:retweet'
)

TWEET_FIELDS = "created_at,public_metrics,attachments,entities,author_id,geo"
USER_FIELDS = "name,username,profile_image_url"
EXPANSIONS = "attachments.media_keys,author_id,geo.place_id"
MEDIA_FIELDS = "url,preview_image_url,type"
PLACE_FIELDS = "full_name,name,geo,country"

_URL_RE = re.compile(r"https?://\S+")
_MENTION_RE = re.compile(r"@[A-Za-z0-9_]+")
_HASHTAG_RE = re.compile(r"#[^\s#]+")
_SPACES_RE = re.compile(r"\s{2,}")


def strip_tweet_text(text: str) -> str:
    """Remove URLs, mentions and hashtags and collapse whitespace."""
    text = _URL_RE.sub("", text)
    text = _MENTION_RE.sub("", text)
    text = _HASHTAG_RE.sub("", text)
    return _SPACES_RE.sub(" ", text).strip()


def extract_title(text: str) -> str:
    title = strip_tweet_text(text)
    if len(title) > 100:
        title = title[:100] + "..."
    return title or "Twitter Update"


def format_content(text: str) -> str:
    cleaned = strip_tweet_text(text)
    if not cleaned:
        return "Update from Twitter."
    return cleaned if cleaned[-1] in ".!?" else cleaned + "."


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _index(entries: Any, key: str) -> dict[str, dict[str, Any]]:
    """Index expansion objects by a string key, dropping malformed ones."""
    if not isinstance(entries, list):
        return {}
    return {
        entry[key]: entry
        for entry in entries
        if isinstance(entry, dict) and isinstance(entry.get(key), str)
    }


def media_type_for(media: Optional[dict[str, Any]]) -> Optional[MediaType]:
    if not media:
        return None
    if media.get("type") == "photo":
        return MediaType.IMAGE
    if media.get("type") in ("video", "animated_gif"):
        return MediaType.VIDEO
    return MediaType.LINK


def place_to_location(place: Optional[dict[str, Any]]) -> Optional[Location]:
    """Build a Location from a Twitter place expansion (bbox centre)."""
    if not place:
        return None
    name = place.get("full_name") or place.get("name")
    if not name or not isinstance(name, str):
        return None

    latitude = longitude = None
    bbox = _mapping(place.get("geo")).get("bbox")
    if isinstance(bbox, list) and len(bbox) == 4 and all(isinstance(v, (int, float)) for v in bbox):
        west, south, east, north = bbox
        longitude = (west + east) / 2
        latitude = (south + north) / 2

    return Location(name=name, address=place.get("country"), latitude=latitude, longitude=longitude)


class TwitterSource(HttpUpdateSource):
    """Fetch recent tweets from configured accounts plus one search query."""

    emoji = "🐦"
    name = "Twitter"
    source_tag = SourceTag.SOCIAL

    def __init__(
        self,
        bearer_token: Optional[str] = None,
        accounts: Optional[list[str]] = None,
        search_query: Optional[str] = DEFAULT_SEARCH_QUERY,
        max_results: int = 40,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=bearer_token, **kwargs)
        self.accounts = accounts if accounts is not None else ["shaheryarhassan", "IsbTraffic"]
        self.search_query = search_query
        # API accepts 5..100
        self.max_results = max(5, min(max_results, 100))
        self.api_base = "https://api.twitter.com/2"

    async def _fetch(self, client: httpx.AsyncClient) -> list[UpdateItem]:
        if not self.accounts and not self.search_query:
            logger.warning("[Twitter] No accounts or search query configured")
            return []

        tasks = [self.fetch_account(client, account) for account in self.accounts]
        if self.search_query:
            tasks.append(self.search(client, self.search_query))

        batches = await asyncio.gather(*tasks)

        unique: dict[str, UpdateItem] = {}
        for batch in batches:
            for item in batch:
                unique.setdefault(item.id, item)

        logger.info("[Twitter] Total tweets fetched: %d", len(unique))
        return newest_first(list(unique.values()))

    async def fetch_account(self, client: httpx.AsyncClient, username: str) -> list[UpdateItem]:
        """Recent tweets of one account, through the adapter cache."""

        async def load() -> list[UpdateItem]:
            logger.info("[Twitter] Fetching tweets from @%s", username)
            user = await self._get_json(
                client,
                f"{self.api_base}/users/by/username/{username}",
                headers=self._headers(),
            )
            user_id = (user.get("data") or {}).get("id")
            if not user_id:
                raise SourceError(f"Twitter user @{username} not found")

            data = await self._get_json(
                client,
                f"{self.api_base}/users/{user_id}/tweets",
                params=self._timeline_params(),
                headers=self._headers(),
            )
            return self._map_response(
                data, lambda tweet_id: f"https://twitter.com/{username}/status/{tweet_id}"
            )

        return await self._cached(username, load)

    async def search(self, client: httpx.AsyncClient, query: str) -> list[UpdateItem]:
        """Recent search, through the adapter cache."""

        async def load() -> list[UpdateItem]:
            logger.info("[Twitter] Searching for: %s", query)
            params = self._timeline_params()
            params["query"] = query
            data = await self._get_json(
                client,
                f"{self.api_base}/tweets/search/recent",
                params=params,
                headers=self._headers(),
            )
            return self._map_response(data, lambda tweet_id: f"https://twitter.com/i/status/{tweet_id}")

        return await self._cached(query, load, search=True)

    def _map_response(self, data: dict[str, Any], link_for: Callable[[str], str]) -> list[UpdateItem]:
        tweets = data.get("data")
        if not isinstance(tweets, list):
            tweets = []
        includes = _mapping(data.get("includes"))
        users = _index(includes.get("users"), "id")
        media = _index(includes.get("media"), "media_key")
        places = _index(includes.get("places"), "id")

        items: list[UpdateItem] = []
        for tweet in tweets:
            try:
                items.append(self._map_tweet(tweet, users, media, places, link_for))
            except (MalformedItemError, AttributeError, TypeError, ValueError) as e:
                logger.debug("[Twitter] Skipping tweet: %s", e)

        logger.info("[Twitter] Found %d tweets", len(items))
        return items

    def _map_tweet(
        self,
        tweet: Any,
        users: dict[Any, dict[str, Any]],
        media: dict[Any, dict[str, Any]],
        places: dict[Any, dict[str, Any]],
        link_for: Callable[[str], str],
    ) -> UpdateItem:
        if not isinstance(tweet, dict):
            raise MalformedItemError("tweet is not an object")

        tweet_id = tweet.get("id")
        text = tweet.get("text")
        timestamp = to_iso(tweet.get("created_at"))
        if not tweet_id or not isinstance(text, str) or not timestamp:
            raise MalformedItemError(f"tweet {tweet_id!r} lacks id, text or created_at")

        media_keys = _mapping(tweet.get("attachments")).get("media_keys")
        if not isinstance(media_keys, list):
            media_keys = []
        attached = [media[key] for key in media_keys if isinstance(key, str) and key in media]
        first_media = attached[0] if attached else None

        author_id = tweet.get("author_id")
        author = users.get(author_id) if isinstance(author_id, str) else None
        metrics = _mapping(tweet.get("public_metrics"))
        place_id = _mapping(tweet.get("geo")).get("place_id")
        place = places.get(place_id) if isinstance(place_id, str) else None

        title = extract_title(text)
        content = format_content(text)

        return UpdateItem(
            id=str(tweet_id),
            source=self.source_tag,
            title=title,
            content=content,
            timestamp=timestamp,
            author=f"@{author['username']}" if author and author.get("username") else None,
            has_media=bool(media_keys),
            media_url=(first_media or {}).get("url") or (first_media or {}).get("preview_image_url"),
            media_type=media_type_for(first_media),
            likes=metrics.get("like_count") if isinstance(metrics.get("like_count"), int) else None,
            shares=metrics.get("retweet_count") if isinstance(metrics.get("retweet_count"), int) else None,
            location=place_to_location(place),
            source_url=link_for(tweet_id),
            **self._tag(title, text),
        )

    def _timeline_params(self) -> dict[str, Any]:
        return {
            "tweet.fields": TWEET_FIELDS,
            "user.fields": USER_FIELDS,
            "expansions": EXPANSIONS,
            "media.fields": MEDIA_FIELDS,
            "place.fields": PLACE_FIELDS,
            "max_results": self.max_results,
            "start_time": self._since().strftime("%Y-%m-%dT%H:%M:%SZ"),
        }

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}
