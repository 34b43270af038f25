"""Tests for container wiring."""

import asyncio

from calorie_hound.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.analysis_service.preprocessor.max_width == 800
    assert container.meal_log_service.load_by_date().meals == []
    assert container.user_settings_service.save({"dailyCalorieTarget": 1600})
    assert container.data_service.last_sync() is not None
    asyncio.run(container.close_resources())
