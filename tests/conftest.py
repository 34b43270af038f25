"""Shared test fixtures."""

import asyncio
import io
from dataclasses import dataclass, field
from datetime import datetime

import pytest
from PIL import Image

from calorie_hound.config import Settings
from calorie_hound.containers import AppContainer
from calorie_hound.domain.data import StorageInfo
from calorie_hound.domain.errors import PersistenceError
from calorie_hound.services.analysis import AnalysisService, GeminiClient
from calorie_hound.services.data import DataService, StorageRepository
from calorie_hound.services.meals import MealLogRepository, MealLogService
from calorie_hound.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)

STRUCTURED_REPLY = (
    "FOOD: Grilled chicken\nCALORIES: 450\nCONFIDENCE: high\nPORTIONS: 1 breast"
)


def gemini_reply(text: str) -> dict[str, object]:
    """Build a generateContent response carrying the given text."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def image_bytes(size: tuple[int, int], mode: str = "RGB", fmt: str = "PNG") -> bytes:
    """Render a solid image of the given size."""
    buffer = io.BytesIO()
    Image.new(mode, size).save(buffer, format=fmt)
    return buffer.getvalue()


@dataclass
class FakeClock:
    """Clock returning a settable moment."""

    now: datetime

    def __call__(self) -> datetime:
        return self.now


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory settings repository for tests."""

    document: dict[str, object] | None = None
    fail_writes: bool = False
    fail_reads: bool = False

    def load(self) -> dict[str, object] | None:
        if self.fail_reads:
            raise PersistenceError("read failed")
        return self.document

    def save(self, document: dict[str, object]) -> None:
        if self.fail_writes:
            raise PersistenceError("write failed")
        self.document = document

    def delete(self) -> None:
        self.document = None


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log repository for tests."""

    logs: list[dict[str, object]] = field(default_factory=list)
    fail_writes: bool = False
    fail_reads: bool = False
    saves: int = 0

    def load_all(self) -> list[dict[str, object]]:
        if self.fail_reads:
            raise PersistenceError("read failed")
        return [dict(log) for log in self.logs]

    def save_all(self, logs: list[dict[str, object]]) -> None:
        if self.fail_writes:
            raise PersistenceError("write failed")
        self.saves += 1
        self.logs = logs


@dataclass
class InMemoryStorageRepository(StorageRepository):
    """In-memory storage maintenance backend for tests."""

    settings_repository: InMemoryUserSettingsRepository
    meal_log_repository: InMemoryMealLogRepository
    last_sync: int | None = None

    def clear(self) -> None:
        self.settings_repository.document = None
        self.meal_log_repository.logs = []
        self.last_sync = None

    def get_last_sync(self) -> int | None:
        return self.last_sync

    def usage(self) -> StorageInfo:
        return StorageInfo(used_bytes=0, documents=0)


@dataclass
class FakeGeminiClient(GeminiClient):
    """Fake Gemini client returning a fixed payload or raising an error."""

    payload: dict[str, object] = field(
        default_factory=lambda: gemini_reply(STRUCTURED_REPLY)
    )
    error: Exception | None = None
    gate: asyncio.Event | None = None
    requests: list[tuple[dict[str, object], str]] = field(default_factory=list)

    async def generate_content(
        self, body: dict[str, object], api_key: str
    ) -> dict[str, object]:
        self.requests.append((body, api_key))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=str(tmp_path / "data"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 12, 30))


@pytest.fixture
def settings_repository() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def meal_log_repository() -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository()


@pytest.fixture
def gemini_client() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
def container(
    settings: Settings,
    clock: FakeClock,
    settings_repository: InMemoryUserSettingsRepository,
    meal_log_repository: InMemoryMealLogRepository,
    gemini_client: FakeGeminiClient,
) -> AppContainer:
    user_settings_service = UserSettingsService(settings_repository)
    meal_log_service = MealLogService(meal_log_repository, clock=clock)
    data_service = DataService(
        settings_service=user_settings_service,
        meal_log_service=meal_log_service,
        settings_repository=settings_repository,
        meal_log_repository=meal_log_repository,
        storage=InMemoryStorageRepository(settings_repository, meal_log_repository),
        clock=clock,
    )
    analysis_service = AnalysisService(
        client=gemini_client,
        settings_service=user_settings_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        user_settings_service=user_settings_service,
        meal_log_service=meal_log_service,
        data_service=data_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
