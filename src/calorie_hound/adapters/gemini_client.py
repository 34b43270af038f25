"""Gemini generateContent API client."""

import asyncio
import logging
from dataclasses import dataclass

import httpx

from calorie_hound.domain.errors import (
    ApiError,
    AuthError,
    HttpStatusError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    RequestTimeoutError,
)
from calorie_hound.services.analysis import GeminiClient

logger = logging.getLogger(__name__)


@dataclass
class HttpxGeminiClient(GeminiClient):
    """HTTPX-backed client for a Gemini vision model."""

    base_url: str
    model: str
    timeout: float
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, model: str, timeout: float = 10.0
    ) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            base_url=base_url,
            model=model,
            timeout=timeout,
            http_client=httpx.AsyncClient(),
        )

    @property
    def endpoint(self) -> str:
        """Return the generateContent URL for the configured model."""
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    async def generate_content(
        self, body: dict[str, object], api_key: str
    ) -> dict[str, object]:
        """POST a request body, aborting after the configured timeout."""
        # httpx timeouts apply per phase; the deadline covers the whole call.
        try:
            async with asyncio.timeout(self.timeout):
                response = await self.http_client.post(
                    self.endpoint,
                    params={"key": api_key},
                    json=body,
                    timeout=self.timeout,
                )
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError("Request timed out. Please try again.") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Network error: {exc}") from exc

        if not response.is_success:
            logger.error("API error response: %s", response.text)
            raise self._status_error(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError("API returned invalid JSON") from exc
        if isinstance(payload, dict) and payload.get("error"):
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else None
            raise ApiError(message or "API returned an error")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _status_error(self, response: httpx.Response) -> Exception:
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            return RateLimitError("API rate limit exceeded. Please try again later.")
        if response.status_code == httpx.codes.FORBIDDEN:
            return AuthError("API key invalid or quota exceeded.")
        if response.status_code == httpx.codes.NOT_FOUND:
            return NotFoundError(f"Model {self.model} not found or unavailable.")
        return HttpStatusError(response.status_code, response.reason_phrase)
