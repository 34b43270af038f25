"""Snapshot export/import and local data maintenance."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from pydantic import ValidationError

from calorie_hound.domain.data import (
    EXPORT_VERSION,
    ExportDocument,
    ImportResult,
    StorageInfo,
)
from calorie_hound.domain.errors import FormatError, PersistenceError
from calorie_hound.domain.meals import sort_logs
from calorie_hound.services.meals import MealLogRepository, MealLogService
from calorie_hound.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("version", "userSettings", "mealLogs")


class StorageRepository(Protocol):
    """Maintenance interface for the underlying document storage."""

    def clear(self) -> None:
        """Remove every stored document."""

    def get_last_sync(self) -> int | None:
        """Return the epoch millis of the last write, if any."""

    def usage(self) -> StorageInfo:
        """Return how much space the stored documents take."""


@dataclass
class DataService:
    """Exports, imports and clears the complete local state."""

    settings_service: UserSettingsService
    meal_log_service: MealLogService
    settings_repository: UserSettingsRepository
    meal_log_repository: MealLogRepository
    storage: StorageRepository
    clock: Callable[[], datetime] = datetime.now

    def export_snapshot(self) -> dict[str, object]:
        """Return the full state as a portable export document."""
        document = ExportDocument(
            version=EXPORT_VERSION,
            export_date=self.clock().astimezone().isoformat(),
            user_settings=self.settings_service.load(),
            meal_logs=self.meal_log_service.load_all(),
        )
        return document.model_dump(by_alias=True)

    def export_filename(self) -> str:
        """Return the suggested download name for today's export."""
        return f"calorie-hound-export-{self.clock().date().isoformat()}.json"

    def import_snapshot(
        self, document: dict[str, object], confirm: Callable[[], bool]
    ) -> ImportResult:
        """Replace all settings and logs with an export document."""
        if (
            not isinstance(document, dict)
            or any(document.get(key) is None for key in REQUIRED_KEYS)
            or not document["version"]
        ):
            raise FormatError("Invalid data format")
        try:
            snapshot = ExportDocument.model_validate({"exportDate": "", **document})
        except ValidationError as exc:
            raise FormatError(f"Invalid data format: {exc}") from exc

        if not confirm():
            return ImportResult(success=False, message="Import cancelled")

        settings_document = snapshot.user_settings.model_dump(by_alias=True)
        log_documents = [
            log.model_dump(by_alias=True) for log in sort_logs(snapshot.meal_logs)
        ]
        previous_settings = self._current_settings()
        try:
            self.settings_repository.save(settings_document)
        except PersistenceError as exc:
            logger.exception("Error importing user settings")
            return ImportResult(False, f"Failed to import data: {exc}")
        try:
            self.meal_log_repository.save_all(log_documents)
        except PersistenceError as exc:
            logger.exception("Error importing meal logs, restoring settings")
            self._restore_settings(previous_settings)
            return ImportResult(False, f"Failed to import data: {exc}")
        return ImportResult(success=True, message="Data imported successfully")

    def clear_all(self, confirm: Callable[[], bool]) -> bool:
        """Delete every stored document after confirmation."""
        if not confirm():
            return False
        try:
            self.storage.clear()
        except PersistenceError:
            logger.exception("Error clearing stored data")
            return False
        return True

    def last_sync(self) -> int | None:
        """Return when settings or logs were last written."""
        try:
            return self.storage.get_last_sync()
        except PersistenceError:
            logger.exception("Error reading last sync time")
            return None

    def storage_info(self) -> StorageInfo | None:
        """Return storage usage, or None when it cannot be measured."""
        try:
            return self.storage.usage()
        except PersistenceError:
            logger.exception("Error measuring storage usage")
            return None

    def _current_settings(self) -> dict[str, object] | None:
        try:
            return self.settings_repository.load()
        except PersistenceError:
            logger.exception("Error reading user settings before import")
            return None

    def _restore_settings(self, previous: dict[str, object] | None) -> None:
        try:
            if previous is None:
                self.settings_repository.delete()
            else:
                self.settings_repository.save(previous)
        except PersistenceError:
            logger.exception("Error restoring user settings after failed import")
