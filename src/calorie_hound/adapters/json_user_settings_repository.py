"""JSON file repository for user settings."""

from dataclasses import dataclass

from calorie_hound.adapters.json_file_storage import USER_SETTINGS_KEY, JsonFileStorage
from calorie_hound.domain.errors import PersistenceError
from calorie_hound.services.user_settings import UserSettingsRepository


@dataclass
class JsonUserSettingsRepository(UserSettingsRepository):
    """Stores the settings document under the ``userSettings`` key."""

    storage: JsonFileStorage

    def load(self) -> dict[str, object] | None:
        """Return the stored settings document."""
        document = self.storage.get_item(USER_SETTINGS_KEY)
        if document is None:
            return None
        if not isinstance(document, dict):
            raise PersistenceError("Settings document is not an object")
        return document

    def save(self, document: dict[str, object]) -> None:
        """Replace the settings document and stamp the sync time."""
        self.storage.set_item(USER_SETTINGS_KEY, document)
        self.storage.touch_last_sync()

    def delete(self) -> None:
        """Remove the settings document."""
        self.storage.remove_item(USER_SETTINGS_KEY)
