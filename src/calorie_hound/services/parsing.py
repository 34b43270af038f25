"""Parsing of free-text vision replies into meal estimates."""

import re

from calorie_hound.domain.analysis import FALLBACK_CALORIES, MealEstimate
from calorie_hound.domain.errors import ParseError

UNAVAILABLE_DESCRIPTION = "Food item (description unavailable)"
DESCRIPTION_LIMIT = 100
CONFIDENCE_TIERS = frozenset({"high", "medium", "low"})

_INTEGER = re.compile(r"\d+")
_CALORIE_MENTION = re.compile(r"(\d+)\s*calories?", re.IGNORECASE)
_BARE_NUMBER = re.compile(r"\b(\d+)\b")


def extract_text(api_response: dict[str, object]) -> str:
    """Return the first candidate's text or raise ParseError."""
    try:
        candidate = api_response["candidates"][0]  # type: ignore[index]
        text = candidate["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError("No response text from API") from exc
    if not isinstance(text, str) or not text.strip():
        raise ParseError("No response text from API")
    return text


def parse_reply(api_response: dict[str, object]) -> MealEstimate:
    """Parse a generateContent response into an estimate."""
    return parse_text(extract_text(api_response))


def parse_text(text: str) -> MealEstimate:
    """Parse FOOD/CALORIES/CONFIDENCE/PORTIONS lines, falling back to heuristics."""
    description = ""
    calories: int | None = None
    confidence = "low"
    portions = ""

    lines = [line.strip() for line in text.split("\n")]
    for line in filter(None, lines):
        if line.startswith("FOOD:"):
            description = line.removeprefix("FOOD:").strip()
        elif line.startswith("CALORIES:"):
            match = _INTEGER.search(line.removeprefix("CALORIES:"))
            calories = int(match.group()) if match else None
        elif line.startswith("CONFIDENCE:"):
            tier = line.removeprefix("CONFIDENCE:").strip().lower()
            if tier in CONFIDENCE_TIERS:
                confidence = tier
        elif line.startswith("PORTIONS:"):
            portions = line.removeprefix("PORTIONS:").strip()

    if not description and text:
        description = text[:DESCRIPTION_LIMIT]
        if len(text) > DESCRIPTION_LIMIT:
            description += "..."
        match = _CALORIE_MENTION.search(text) or _BARE_NUMBER.search(text)
        if match:
            guess = int(match.group(1))
            if 10 < guess < 5000:
                calories = guess

    if not description:
        description = UNAVAILABLE_DESCRIPTION
    if calories is None or calories < 1:
        calories = FALLBACK_CALORIES
        confidence = "low"

    return MealEstimate(
        description=description,
        calories=calories,
        confidence=confidence,
        portions=portions,
    )
