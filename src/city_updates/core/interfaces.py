"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Optional

from city_updates.core.entities import SourceTag, UpdateItem


class UpdateSource(ABC):
    """Interface for fetching update items from one provider."""

    name: str = "source"
    source_tag: SourceTag = SourceTag.NEWS_A

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials/config allow real network calls."""
        pass

    @abstractmethod
    async def fetch_items(self) -> list[UpdateItem]:
        """Fetch and normalize items. Must not raise."""
        pass


class KeyValueStore(ABC):
    """Durable string key-value store provided by the environment."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        pass

    async def multi_remove(self, keys: list[str]) -> None:
        """Remove several keys."""
        for key in keys:
            await self.remove(key)
