"""GNews source for local news articles."""

from typing import Any, Optional

import httpx

from city_updates.adapters.sources.articles import NewsSearchSource
from city_updates.core import SourceTag

DEFAULT_QUERY = "(Islamabad OR Rawalpindi) twin cities Pakistan"


class GNewsSource(NewsSearchSource):
    """Search GNews `/search`, restricted to one country."""

    emoji = "📰"
    name = "GNews"
    source_tag = SourceTag.NEWS_B
    id_prefix = "gnews"
    image_field = "image"

    def __init__(self, *args: Any, country: Optional[str] = "pk", **kwargs: Any) -> None:
        kwargs.setdefault("query", DEFAULT_QUERY)
        super().__init__(*args, **kwargs)
        self.country = country
        self.api_base = "https://gnews.io/api/v4"

    async def _request(self, client: httpx.AsyncClient) -> dict[str, Any]:
        params: dict[str, Any] = {
            "q": self.query,
            "lang": self.language,
            "max": self.max_items,
            "from": self._since().strftime("%Y-%m-%dT%H:%M:%SZ"),
            "apikey": self.api_key,
        }
        if self.country:
            params["country"] = self.country
        return await self._get_json(client, f"{self.api_base}/search", params=params)
