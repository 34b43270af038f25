"""Domain models for meal logging."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Confidence = Literal["high", "medium", "low"]

_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel, populate_by_name=True, extra="ignore"
)


class Meal(BaseModel):
    """A single confirmed meal entry."""

    model_config = _MODEL_CONFIG

    id: str
    timestamp: int
    description: str
    calories: int = Field(ge=1)
    confidence: Confidence = "low"
    portions: str = ""
    updated_at: int | None = None


class DayLog(BaseModel):
    """All meals recorded for one calendar date."""

    model_config = _MODEL_CONFIG

    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    meals: list[Meal] = Field(default_factory=list)
    total_calories: int = 0

    @model_validator(mode="after")
    def _recompute_total(self) -> "DayLog":
        self.total_calories = sum(meal.calories for meal in self.meals)
        return self


def sort_logs(logs: list[DayLog]) -> list[DayLog]:
    """Return logs ordered newest date first."""
    return sorted(logs, key=lambda log: log.date, reverse=True)
