"""User settings domain model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_DAILY_CALORIE_TARGET = 2000


class UserSettings(BaseModel):
    """Persisted user configuration, stored under camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    daily_calorie_target: int = Field(default=DEFAULT_DAILY_CALORIE_TARGET, gt=0)
    gemini_api_key: str = ""
    current_weight: float | None = None
    goal_weight: float | None = None
    timeline: float | None = None
    gender: Literal["male", "female"] | None = None
    age: int | None = None
    height_feet: int | None = None
    height_inches: int | None = None
    activity_level: str | None = None
    created_at: int = 0
    updated_at: int = 0
