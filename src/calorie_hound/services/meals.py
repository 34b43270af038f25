"""Meal logging service."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

from pydantic import ValidationError

from calorie_hound.domain.errors import PersistenceError
from calorie_hound.domain.meals import DayLog, Meal, sort_logs

logger = logging.getLogger(__name__)

_IMMUTABLE_MEAL_FIELDS = frozenset({"id", "timestamp"})


class MealLogRepository(Protocol):
    """Persistence interface for the day log collection."""

    def load_all(self) -> list[dict[str, object]]:
        """Return every stored day log document."""

    def save_all(self, logs: list[dict[str, object]]) -> None:
        """Replace the stored collection with the given day logs."""


@dataclass
class MealLogService:
    """Service that stores meals by local date and aggregates totals."""

    repository: MealLogRepository
    clock: Callable[[], datetime] = datetime.now
    _last_id: int = field(default=0, init=False, repr=False)

    def today(self) -> str:
        """Return today's local date key (YYYY-MM-DD)."""
        return self.clock().date().isoformat()

    def load_all(self) -> list[DayLog]:
        """Return every stored day log, or an empty list when unreadable."""
        try:
            return self._load_logs()
        except (PersistenceError, ValidationError):
            logger.exception("Error loading meal logs")
            return []

    def load_by_date(self, date_key: str | None = None) -> DayLog:
        """Return the log for a date, or a fresh unsaved one."""
        key = date_key or self.today()
        for log in self.load_all():
            if log.date == key:
                return log
        return DayLog(date=key)

    def add_meal(self, partial: dict[str, object]) -> Meal | None:
        """Append a meal to today's log and persist the collection."""
        today = self.today()
        logs = self._load_for_write("Error adding meal")
        if logs is None:
            return None
        log = next((entry for entry in logs if entry.date == today), None)
        if log is None:
            log = DayLog(date=today)
            logs.append(log)

        now = self._now_ms()
        try:
            meal = Meal.model_validate(
                {**partial, "id": self._next_id(now), "timestamp": now}
            )
        except ValidationError:
            logger.exception("Rejected invalid meal")
            return None

        log.meals.append(meal)
        if not self._persist(logs, "Error adding meal"):
            return None
        return meal

    def update_meal(self, meal_id: str, patch: dict[str, object]) -> Meal | None:
        """Patch a meal found in any day log and persist the collection."""
        logs = self._load_for_write("Error updating meal")
        if logs is None:
            return None
        for log in logs:
            for index, meal in enumerate(log.meals):
                if meal.id != meal_id:
                    continue
                changes = {
                    key: value
                    for key, value in patch.items()
                    if key not in _IMMUTABLE_MEAL_FIELDS
                }
                try:
                    updated = Meal.model_validate(
                        {
                            **meal.model_dump(),
                            **changes,
                            "updated_at": self._now_ms(),
                        }
                    )
                except ValidationError:
                    logger.exception("Rejected invalid update for meal %s", meal_id)
                    return None
                log.meals[index] = updated
                if not self._persist(logs, "Error updating meal"):
                    return None
                return updated
        return None

    def delete_meal(self, meal_id: str) -> bool:
        """Remove the first meal with the given id from any day log."""
        logs = self._load_for_write("Error deleting meal")
        if logs is None:
            return False
        for log in logs:
            for index, meal in enumerate(log.meals):
                if meal.id == meal_id:
                    del log.meals[index]
                    return self._persist(logs, "Error deleting meal")
        return False

    def recent_logs(self, days: int = 7) -> list[DayLog]:
        """Return logs dated on or after today minus the given days."""
        cutoff = (self.clock().date() - timedelta(days=days)).isoformat()
        return [log for log in self.load_all() if log.date >= cutoff]

    def weekly_average(self) -> int:
        """Return the rounded mean daily total over the last seven days."""
        logs = self.recent_logs(7)
        if not logs:
            return 0
        total = sum(log.total_calories for log in logs)
        return math.floor(total / len(logs) + 0.5)

    def _load_logs(self) -> list[DayLog]:
        return [DayLog.model_validate(raw) for raw in self.repository.load_all()]

    def _load_for_write(self, failure_message: str) -> list[DayLog] | None:
        # An unreadable collection must never be overwritten.
        try:
            return self._load_logs()
        except (PersistenceError, ValidationError):
            logger.exception(failure_message)
            return None

    def _persist(self, logs: list[DayLog], failure_message: str) -> bool:
        # Rebuilding each log recomputes its total from the current meals.
        rebuilt = [DayLog(date=log.date, meals=log.meals) for log in logs]
        documents = [log.model_dump(by_alias=True) for log in sort_logs(rebuilt)]
        try:
            self.repository.save_all(documents)
        except PersistenceError:
            logger.exception(failure_message)
            return False
        return True

    def _next_id(self, now_ms: int) -> str:
        self._last_id = max(now_ms, self._last_id + 1)
        return str(self._last_id)

    def _now_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)
