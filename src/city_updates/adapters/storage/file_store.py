"""Key-value stores: one file per key on disk, or a plain dict in memory."""

import re
from pathlib import Path
from typing import Optional

from city_updates.core.errors import StorageError
from city_updates.core.interfaces import KeyValueStore


class FileKeyValueStore(KeyValueStore):
    """Durable store keeping each value as a UTF-8 file under `storage_dir`."""

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir

    async def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Could not write {key}: {e}") from e

    async def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove {key}: {e}") from e

    def _path(self, key: str) -> Path:
        # Create safe filename from key
        safe_key = re.sub(r"[^\w.-]", "_", key)
        return self.storage_dir / f"{safe_key}.json"


class MemoryKeyValueStore(KeyValueStore):
    """Non-durable store, handy for tests and one-shot runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)
