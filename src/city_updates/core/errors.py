"""Error taxonomy for sources and storage."""

from typing import Optional


class CityUpdatesError(Exception):
    """Base error for the package."""


class SourceError(CityUpdatesError):
    """A source request failed (bad status, auth failure, unusable payload)."""


class RateLimitedError(SourceError):
    """Provider signalled throttling.

    Args:
        reset_at: epoch seconds when the provider says calls may resume
    """

    def __init__(self, message: str, reset_at: Optional[float] = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class MalformedItemError(CityUpdatesError):
    """A single provider or stored item could not be mapped."""


class StorageError(CityUpdatesError):
    """Key-value store read or write failed."""
