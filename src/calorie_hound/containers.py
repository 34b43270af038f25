"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_hound.adapters.gemini_client import HttpxGeminiClient
from calorie_hound.adapters.json_file_storage import JsonFileStorage
from calorie_hound.adapters.json_meal_log_repository import JsonMealLogRepository
from calorie_hound.adapters.json_user_settings_repository import (
    JsonUserSettingsRepository,
)
from calorie_hound.config import Settings
from calorie_hound.services.analysis import AnalysisService
from calorie_hound.services.data import DataService
from calorie_hound.services.images import ImagePreprocessor
from calorie_hound.services.meals import MealLogService
from calorie_hound.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_settings_service: UserSettingsService
    meal_log_service: MealLogService
    data_service: DataService
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage = JsonFileStorage.create(resolved_settings.data_dir)
    settings_repository = JsonUserSettingsRepository(storage)
    meal_log_repository = JsonMealLogRepository(storage)
    user_settings_service = UserSettingsService(settings_repository)
    meal_log_service = MealLogService(meal_log_repository)
    data_service = DataService(
        settings_service=user_settings_service,
        meal_log_service=meal_log_service,
        settings_repository=settings_repository,
        meal_log_repository=meal_log_repository,
        storage=storage,
    )
    gemini_client = HttpxGeminiClient.create(
        base_url=resolved_settings.gemini_base_url,
        model=resolved_settings.gemini_model,
        timeout=resolved_settings.analysis_timeout_seconds,
    )
    analysis_service = AnalysisService(
        client=gemini_client,
        settings_service=user_settings_service,
        preprocessor=ImagePreprocessor(
            max_width=resolved_settings.max_image_width,
            max_height=resolved_settings.max_image_height,
            quality=resolved_settings.compression_quality,
        ),
    )

    async def close_resources() -> None:
        await gemini_client.close()

    return AppContainer(
        settings=resolved_settings,
        user_settings_service=user_settings_service,
        meal_log_service=meal_log_service,
        data_service=data_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
