"""NewsAPI.org source for local news articles."""

from typing import Any

import httpx

from city_updates.adapters.sources.articles import NewsSearchSource
from city_updates.core import SourceTag

DEFAULT_QUERY = "(Islamabad OR Rawalpindi) AND (news OR update OR event OR traffic OR weather)"


class NewsAPISource(NewsSearchSource):
    """Search NewsAPI `/everything` for articles about the configured cities."""

    emoji = "🗞️"
    name = "NewsAPI"
    source_tag = SourceTag.NEWS_A
    id_prefix = "newsapi"
    image_field = "urlToImage"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("query", DEFAULT_QUERY)
        super().__init__(*args, **kwargs)
        self.api_base = "https://newsapi.org/v2"

    async def _request(self, client: httpx.AsyncClient) -> dict[str, Any]:
        return await self._get_json(
            client,
            f"{self.api_base}/everything",
            params={
                "q": self.query,
                "language": self.language,
                "sortBy": "publishedAt",
                "pageSize": self.max_items,
                "from": self._since().strftime("%Y-%m-%dT%H:%M:%S"),
            },
            headers={"X-Api-Key": self.api_key or ""},
        )
