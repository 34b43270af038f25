"""Key/value document storage backed by JSON files in a data directory."""

import json
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from calorie_hound.domain.data import StorageInfo
from calorie_hound.domain.errors import PersistenceError
from calorie_hound.services.data import StorageRepository

USER_SETTINGS_KEY = "userSettings"
MEAL_LOGS_KEY = "mealLogs"
LAST_SYNC_KEY = "lastSync"


@dataclass
class JsonFileStorage(StorageRepository):
    """Stores each key as ``<key>.json`` and rewrites it whole on save."""

    directory: Path

    @classmethod
    def create(cls, directory: str | Path) -> "JsonFileStorage":
        """Create a storage rooted at the given directory."""
        return cls(directory=Path(directory).expanduser())

    def get_item(self, key: str) -> object | None:
        """Return the decoded document for a key, or None if absent."""
        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Failed to read {key}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt document {key}: {exc}") from exc

    def set_item(self, key: str, value: object) -> None:
        """Atomically replace the document for a key."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(value, handle, indent=2)
                os.replace(tmp_name, self._path(key))
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Failed to write {key}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        """Delete the document for a key if it exists."""
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Failed to remove {key}: {exc}") from exc

    def touch_last_sync(self) -> None:
        """Record the current time as the last successful write."""
        self.set_item(LAST_SYNC_KEY, time.time_ns() // 1_000_000)

    def get_last_sync(self) -> int | None:
        """Return the epoch millis of the last write, if recorded."""
        value = self.get_item(LAST_SYNC_KEY)
        return value if isinstance(value, int) else None

    def clear(self) -> None:
        """Remove the settings, meal log and last sync documents."""
        for key in (USER_SETTINGS_KEY, MEAL_LOGS_KEY, LAST_SYNC_KEY):
            self.remove_item(key)

    def usage(self) -> StorageInfo:
        """Return the total size of the stored documents."""
        try:
            paths = list(self.directory.glob("*.json"))
            used = sum(path.stat().st_size for path in paths)
        except OSError as exc:
            raise PersistenceError(f"Failed to measure storage: {exc}") from exc
        return StorageInfo(used_bytes=used, documents=len(paths))

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"
