"""Key-value store adapters."""

from city_updates.adapters.storage.file_store import FileKeyValueStore, MemoryKeyValueStore

__all__ = ["FileKeyValueStore", "MemoryKeyValueStore"]
