"""Request and response models for the local API."""

from pydantic import BaseModel, Field

from calorie_hound.domain.meals import Confidence


class MealCreate(BaseModel):
    """A confirmed analysis result or manual entry to store."""

    description: str
    calories: int = Field(ge=1)
    confidence: Confidence = "low"
    portions: str = ""


class MealPatch(BaseModel):
    """Editable meal fields."""

    description: str | None = None
    calories: int | None = Field(default=None, ge=1)
    confidence: Confidence | None = None
    portions: str | None = None


class SetupStatus(BaseModel):
    """Whether onboarding is complete and the suggested daily target."""

    complete: bool
    daily_calorie_target: int
    suggested_target: int


class DailySummary(BaseModel):
    """Today's consumption against the target plus the weekly average."""

    date: str
    total_calories: int
    meal_count: int
    target: int
    remaining: int
    percent_complete: int
    status: str
    status_text: str
    weekly_average: int
