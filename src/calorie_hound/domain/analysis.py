"""Models for meal photo analysis results."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from calorie_hound.domain.meals import Confidence

FALLBACK_CALORIES = 300


class MealEstimate(BaseModel):
    """Structured estimate extracted from a model reply."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str
    calories: int
    confidence: Confidence = "low"
    portions: str = ""


class AnalysisResult(MealEstimate):
    """Estimate stamped with request timing; never persisted directly."""

    timestamp: int
    processing_time_ms: int
    error: str | None = None
