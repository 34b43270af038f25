"""JSON file repository for the day log collection."""

from dataclasses import dataclass

from calorie_hound.adapters.json_file_storage import MEAL_LOGS_KEY, JsonFileStorage
from calorie_hound.domain.errors import PersistenceError
from calorie_hound.services.meals import MealLogRepository


@dataclass
class JsonMealLogRepository(MealLogRepository):
    """Stores every day log as one array under the ``mealLogs`` key."""

    storage: JsonFileStorage

    def load_all(self) -> list[dict[str, object]]:
        """Return the stored day logs."""
        document = self.storage.get_item(MEAL_LOGS_KEY)
        if document is None:
            return []
        if not isinstance(document, list):
            raise PersistenceError("Meal log document is not an array")
        return document

    def save_all(self, logs: list[dict[str, object]]) -> None:
        """Rewrite the whole collection and stamp the sync time."""
        self.storage.set_item(MEAL_LOGS_KEY, logs)
        self.storage.touch_last_sync()
