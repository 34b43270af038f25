"""Meal photo analysis via a remote vision model.

Internal steps raise the typed errors from ``calorie_hound.domain.errors``.
The UI-facing calls (``analyze``, ``analyze_photo`` and ``test_connection``)
never raise: they always hand back a renderable value, falling back to a
low-confidence default estimate that carries the error message.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from calorie_hound.domain.analysis import FALLBACK_CALORIES, AnalysisResult
from calorie_hound.services.images import ImagePreprocessor, ImageSource
from calorie_hound.services.parsing import parse_reply
from calorie_hound.services.user_settings import UserSettingsService

logger = logging.getLogger(__name__)

FAILED_DESCRIPTION = "Food item (analysis failed)"
FAILED_PORTIONS = "Standard serving"
IN_PROGRESS_MESSAGE = "Analysis already in progress."
CONNECTION_PROBE = 'Hello, can you respond with just "OK"?'

CALORIE_PROMPT = """Analyze this meal photo and provide a calorie estimate. \
Please respond in exactly this format:

FOOD: [Brief description of the food items you see]
CALORIES: [Total calorie estimate as a number only]
CONFIDENCE: [high/medium/low]
PORTIONS: [Brief note about portion sizes observed]

Instructions:
- Assume standard serving sizes unless portions look obviously large/small
- Be specific about what food items you can identify
- Consider typical restaurant/home portions
- Only estimate calories for food items, ignore drinks unless specifically asked
- If multiple items, provide total combined calories"""

GENERATION_CONFIG: dict[str, object] = {
    "temperature": 0.1,
    "maxOutputTokens": 1000,
    "topP": 0.8,
    "topK": 10,
}

SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
]


class GeminiClient(Protocol):
    """Interface for the remote generateContent endpoint."""

    async def generate_content(
        self, body: dict[str, object], api_key: str
    ) -> dict[str, object]:
        """Send a request body and return the decoded JSON response."""


def build_request(image_b64: str) -> dict[str, object]:
    """Build the generateContent body for a base64 JPEG."""
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": CALORIE_PROMPT},
                    {"inline_data": {"mime_type": "image/jpeg", "data": image_b64}},
                ],
            }
        ],
        "generationConfig": GENERATION_CONFIG,
        "safetySettings": SAFETY_SETTINGS,
    }


@dataclass
class AnalysisService:
    """Runs the compress, request and parse chain for one photo at a time."""

    client: GeminiClient
    settings_service: UserSettingsService
    preprocessor: ImagePreprocessor = field(default_factory=ImagePreprocessor)
    clock: Callable[[], float] = time.time
    _in_flight: bool = field(default=False, init=False, repr=False)

    @property
    def is_analyzing(self) -> bool:
        """Return True while an analysis request is pending."""
        return self._in_flight

    async def estimate(
        self, image_payload: bytes, credential: str, started: int | None = None
    ) -> AnalysisResult:
        """Request an estimate for compressed JPEG bytes; raises on failure."""
        started = self._now_ms() if started is None else started
        body = build_request(self.preprocessor.to_base64(image_payload))
        response = await self.client.generate_content(body, credential)
        estimate = parse_reply(response)
        return AnalysisResult(
            **estimate.model_dump(),
            timestamp=started,
            processing_time_ms=self._now_ms() - started,
        )

    async def analyze(
        self, image_payload: bytes, credential: str | None = None
    ) -> AnalysisResult:
        """Estimate calories for compressed JPEG bytes, never raising."""
        return await self._guarded(lambda: self._estimate(image_payload, credential))

    async def analyze_photo(
        self, image: ImageSource, credential: str | None = None
    ) -> AnalysisResult:
        """Compress an arbitrary photo and estimate it, never raising."""

        async def run() -> AnalysisResult:
            started = self._now_ms()
            payload = await asyncio.to_thread(self.preprocessor.compress, image)
            logger.info("Image compressed to %d bytes", len(payload))
            return await self._estimate(payload, credential, started)

        return await self._guarded(run)

    async def test_connection(self, credential: str | None = None) -> bool:
        """Send a text-only probe and report whether the endpoint answered."""
        body: dict[str, object] = {
            "contents": [{"parts": [{"text": CONNECTION_PROBE}]}]
        }
        try:
            api_key = credential or self.settings_service.get_api_key()
            await self.client.generate_content(body, api_key)
        except Exception:
            logger.exception("API connection test failed")
            return False
        logger.info("API connection test successful")
        return True

    async def _estimate(
        self,
        image_payload: bytes,
        credential: str | None,
        started: int | None = None,
    ) -> AnalysisResult:
        api_key = credential or self.settings_service.get_api_key()
        return await self.estimate(image_payload, api_key, started)

    async def _guarded(
        self, run: Callable[[], Awaitable[AnalysisResult]]
    ) -> AnalysisResult:
        started = self._now_ms()
        if self._in_flight:
            return self._fallback(started, IN_PROGRESS_MESSAGE)
        self._in_flight = True
        try:
            result = await run()
        except Exception as exc:
            logger.exception("Meal analysis failed")
            return self._fallback(started, str(exc) or type(exc).__name__)
        finally:
            self._in_flight = False
        logger.info(
            "Analysis completed in %d ms: %s (%d kcal)",
            result.processing_time_ms,
            result.description,
            result.calories,
        )
        return result

    def _fallback(self, started: int, message: str) -> AnalysisResult:
        return AnalysisResult(
            description=FAILED_DESCRIPTION,
            calories=FALLBACK_CALORIES,
            confidence="low",
            portions=FAILED_PORTIONS,
            error=message,
            timestamp=self._now_ms(),
            processing_time_ms=self._now_ms() - started,
        )

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)
