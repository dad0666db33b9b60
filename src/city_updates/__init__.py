"""City updates: aggregation and offline caching of local news feeds."""

__version__ = "0.1.0"
