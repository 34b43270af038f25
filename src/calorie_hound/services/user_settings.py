"""User settings service."""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calorie_hound.domain.errors import ConfigurationError, PersistenceError
from calorie_hound.domain.settings import UserSettings

logger = logging.getLogger(__name__)


class UserSettingsRepository(Protocol):
    """Persistence interface for the settings document."""

    def load(self) -> dict[str, object] | None:
        """Return the stored settings document, if any."""

    def save(self, document: dict[str, object]) -> None:
        """Replace the stored settings document."""

    def delete(self) -> None:
        """Remove the stored settings document."""


@dataclass
class UserSettingsService:
    """Service for the singleton user settings record."""

    repository: UserSettingsRepository

    def load(self) -> UserSettings:
        """Return stored settings, or defaults when absent or unreadable."""
        try:
            document = self.repository.load()
            if document is not None:
                return UserSettings.model_validate(document)
        except (PersistenceError, ValidationError):
            logger.exception("Error loading user settings")
        return _defaults()

    def save(self, partial: dict[str, object]) -> UserSettings | None:
        """Merge fields over the current settings and persist the result."""
        current = self.load().model_dump(by_alias=True)
        merged = {
            **current,
            **_aliased(partial),
            "updatedAt": _now_ms(),
        }
        try:
            settings = UserSettings.model_validate(merged)
            self.repository.save(settings.model_dump(by_alias=True))
        except (PersistenceError, ValidationError):
            logger.exception("Error saving user settings")
            return None
        return settings

    def is_setup_complete(self) -> bool:
        """Return True when a calorie target and an API key are configured."""
        settings = self.load()
        return settings.daily_calorie_target > 0 and bool(
            settings.gemini_api_key.strip()
        )

    def get_api_key(self) -> str:
        """Return the configured API key or raise ConfigurationError."""
        api_key = self.load().gemini_api_key.strip()
        if not api_key:
            raise ConfigurationError(
                "API key not configured. Please set it in Settings."
            )
        return api_key


def _defaults() -> UserSettings:
    now = _now_ms()
    return UserSettings(created_at=now, updated_at=now)


def _aliased(partial: dict[str, object]) -> dict[str, object]:
    """Map snake_case field names to their stored camelCase aliases."""
    fields = UserSettings.model_fields
    return {
        (fields[key].alias or key) if key in fields else key: value
        for key, value in partial.items()
    }


def _now_ms() -> int:
    return time.time_ns() // 1_000_000
