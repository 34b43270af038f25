"""Daily calorie target and progress calculations."""

import math
from dataclasses import dataclass

from calorie_hound.domain.settings import UserSettings

DEFAULT_BMR = 1500
POUND_TO_KG = 0.453592
INCH_TO_CM = 2.54
CALORIES_PER_POUND = 3500
WEEKS_PER_MONTH = 4.33
MIN_DAILY_CALORIES = 1200

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "very": 1.725,
    "extreme": 1.9,
}


@dataclass(frozen=True)
class CalorieProgress:
    """Consumption measured against the daily target."""

    consumed: int
    target: int
    remaining: int
    percent_complete: int
    status: str
    status_text: str


def calculate_bmr(settings: UserSettings) -> int:
    """Return basal metabolic rate using the Mifflin-St Jeor equation."""
    if not settings.current_weight or settings.current_weight <= 0:
        return DEFAULT_BMR
    weight_kg = settings.current_weight * POUND_TO_KG
    feet = 5 if settings.height_feet is None else settings.height_feet
    inches = 6 if settings.height_inches is None else settings.height_inches
    height_cm = (feet * 12 + inches) * INCH_TO_CM
    age = 30 if settings.age is None else settings.age
    offset = 5 if settings.gender == "male" else -161
    return _round(10 * weight_kg + 6.25 * height_cm - 5 * age + offset)


def calculate_tdee(bmr: int, activity_level: str | None = "sedentary") -> int:
    """Return total daily energy expenditure for an activity level."""
    multiplier = ACTIVITY_MULTIPLIERS.get(activity_level or "sedentary", 1.2)
    return _round(bmr * multiplier)


def calculate_daily_target(settings: UserSettings) -> int:
    """Return a daily calorie target that reaches the goal weight on time."""
    bmr = calculate_bmr(settings)
    tdee = calculate_tdee(bmr, settings.activity_level)
    current, goal = settings.current_weight, settings.goal_weight
    if not goal or goal == current:
        return tdee

    timeline = settings.timeline or 12
    weekly_change = (goal - (current or 0)) / (timeline * WEEKS_PER_MONTH)
    daily_adjustment = weekly_change * CALORIES_PER_POUND / 7
    lower = max(MIN_DAILY_CALORIES, bmr * 0.8)
    upper = tdee * 1.2
    return _round(max(lower, min(upper, tdee + daily_adjustment)))


def calorie_progress(consumed: int, target: int) -> CalorieProgress:
    """Classify consumption as under, at or over the target."""
    remaining = target - consumed
    percent = _round(consumed / target * 100) if target else 0
    if consumed < target * 0.9:
        status, text = "under", f"{abs(remaining)} calories remaining"
    elif consumed <= target * 1.1:
        status, text = "at", "At target - great job!"
    else:
        status, text = "over", f"{abs(remaining)} calories over"
    return CalorieProgress(
        consumed=consumed,
        target=target,
        remaining=remaining,
        percent_complete=percent,
        status=status,
        status_text=text,
    )


def _round(value: float) -> int:
    """Round half up, matching the figures users see in the app."""
    return math.floor(value + 0.5)
