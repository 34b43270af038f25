"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from calorie_hound.adapters.gemini_client import HttpxGeminiClient
from calorie_hound.domain.errors import (
    ApiError,
    AuthError,
    HttpStatusError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
)
from tests.conftest import gemini_reply


def _client(  # type: ignore[no-untyped-def]
    handler, timeout: float = 10.0
) -> HttpxGeminiClient:
    transport = httpx.MockTransport(handler)
    return HttpxGeminiClient(
        base_url="https://api.test/v1beta/",
        model="gemini-test",
        timeout=timeout,
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_gemini_client_posts_body_with_key_param() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=gemini_reply("FOOD: Toast"))

    client = _client(handler)
    result = asyncio.run(client.generate_content({"contents": []}, "secret"))

    assert result == gemini_reply("FOOD: Toast")
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/v1beta/models/gemini-test:generateContent"
    assert seen[0].url.params["key"] == "secret"
    assert json.loads(seen[0].content) == {"contents": []}


@pytest.mark.parametrize(
    ("status_code", "error_type", "message"),
    [
        (429, RateLimitError, "API rate limit exceeded. Please try again later."),
        (403, AuthError, "API key invalid or quota exceeded."),
        (404, NotFoundError, "Model gemini-test not found or unavailable."),
        (500, HttpStatusError, "API request failed: 500 Internal Server Error"),
    ],
)
def test_gemini_client_maps_error_statuses(
    status_code: int, error_type: type[Exception], message: str
) -> None:
    client = _client(lambda request: httpx.Response(status_code, text="boom"))

    with pytest.raises(error_type) as excinfo:
        asyncio.run(client.generate_content({}, "secret"))

    assert str(excinfo.value) == message


def test_gemini_client_raises_embedded_error() -> None:
    client = _client(
        lambda request: httpx.Response(200, json={"error": {"message": "bad image"}})
    )

    with pytest.raises(ApiError, match="bad image"):
        asyncio.run(client.generate_content({}, "secret"))


def test_gemini_client_maps_timeouts_and_transport_errors() -> None:
    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("slow", request=request)

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(RequestTimeoutError, match="Request timed out"):
        asyncio.run(_client(timeout).generate_content({}, "secret"))
    with pytest.raises(NetworkError):
        asyncio.run(_client(unreachable).generate_content({}, "secret"))


def test_gemini_client_aborts_slow_body_after_total_deadline() -> None:
    async def trickle():  # type: ignore[no-untyped-def]
        for _ in range(20):
            await asyncio.sleep(0.05)
            yield b" "

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=trickle())

    client = _client(handler, timeout=0.2)

    with pytest.raises(RequestTimeoutError, match="Request timed out"):
        asyncio.run(client.generate_content({}, "key"))


def test_gemini_client_close() -> None:
    client = _client(lambda request: httpx.Response(200, json={}))

    asyncio.run(client.close())

    assert client.http_client.is_closed
