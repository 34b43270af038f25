"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Path, Request, UploadFile, status
from fastapi.responses import JSONResponse

from calorie_hound.api.models import DailySummary, MealCreate, MealPatch, SetupStatus
from calorie_hound.app_logging import configure_logging
from calorie_hound.containers import AppContainer
from calorie_hound.domain.analysis import AnalysisResult
from calorie_hound.domain.data import ImportResult
from calorie_hound.domain.errors import FormatError
from calorie_hound.domain.meals import DayLog, Meal
from calorie_hound.domain.settings import UserSettings
from calorie_hound.services.calories import calculate_daily_target, calorie_progress


def create_app(container: AppContainer) -> FastAPI:  # noqa: C901, PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def _container(request: Request) -> AppContainer:
        return request.app.state.container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/settings", response_model=UserSettings, response_model_by_alias=True)
    async def get_settings(request: Request) -> UserSettings:
        """Return the stored user settings."""
        return _container(request).user_settings_service.load()

    @app.put("/settings", response_model=UserSettings, response_model_by_alias=True)
    async def save_settings(
        partial: dict[str, Any], request: Request
    ) -> UserSettings:
        """Merge the given fields into the stored settings."""
        saved = _container(request).user_settings_service.save(partial)
        if saved is None:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save settings",
            )
        return saved

    @app.get("/settings/status")
    async def setup_status(request: Request) -> SetupStatus:
        """Report onboarding completeness and the computed daily target."""
        service = _container(request).user_settings_service
        settings = service.load()
        return SetupStatus(
            complete=service.is_setup_complete(),
            daily_calorie_target=settings.daily_calorie_target,
            suggested_target=calculate_daily_target(settings),
        )

    @app.get("/logs", response_model=list[DayLog], response_model_by_alias=True)
    async def recent_logs(request: Request, days: int = 7) -> list[DayLog]:
        """Return day logs from the last N days, newest first."""
        return _container(request).meal_log_service.recent_logs(days)

    @app.get("/logs/{date_key}", response_model=DayLog, response_model_by_alias=True)
    async def day_log(
        request: Request,
        date_key: str = Path(pattern=r"^\d{4}-\d{2}-\d{2}$"),
    ) -> DayLog:
        """Return the log for a date, empty if nothing was recorded."""
        return _container(request).meal_log_service.load_by_date(date_key)

    @app.post(
        "/meals",
        response_model=Meal,
        response_model_by_alias=True,
        status_code=status.HTTP_201_CREATED,
    )
    async def add_meal(meal: MealCreate, request: Request) -> Meal:
        """Store a meal in today's log."""
        stored = _container(request).meal_log_service.add_meal(meal.model_dump())
        if stored is None:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save meal",
            )
        return stored

    @app.patch("/meals/{meal_id}", response_model=Meal, response_model_by_alias=True)
    async def update_meal(meal_id: str, patch: MealPatch, request: Request) -> Meal:
        """Edit a stored meal."""
        updated = _container(request).meal_log_service.update_meal(
            meal_id, patch.model_dump(exclude_none=True)
        )
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return updated

    @app.delete("/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_meal(meal_id: str, request: Request) -> None:
        """Delete a stored meal."""
        if not _container(request).meal_log_service.delete_meal(meal_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

    @app.get("/summary")
    async def summary(request: Request) -> DailySummary:
        """Return today's progress against the target and the weekly average."""
        state_container = _container(request)
        meals = state_container.meal_log_service
        today = meals.load_by_date()
        target = state_container.user_settings_service.load().daily_calorie_target
        progress = calorie_progress(today.total_calories, target)
        return DailySummary(
            date=today.date,
            total_calories=today.total_calories,
            meal_count=len(today.meals),
            target=target,
            remaining=progress.remaining,
            percent_complete=progress.percent_complete,
            status=progress.status,
            status_text=progress.status_text,
            weekly_average=meals.weekly_average(),
        )

    @app.post(
        "/analyze", response_model=AnalysisResult, response_model_by_alias=True
    )
    async def analyze(photo: UploadFile, request: Request) -> AnalysisResult:
        """Estimate calories for an uploaded photo; always returns a result."""
        image = await photo.read()
        result = await _container(request).analysis_service.analyze_photo(image)
        if result.error:
            logger.warning("Returning fallback estimate: %s", result.error)
        return result

    @app.post("/analyze/test-connection")
    async def test_connection(request: Request) -> dict[str, bool]:
        """Probe the analysis endpoint with the stored API key."""
        return {"ok": await _container(request).analysis_service.test_connection()}

    @app.get("/export")
    async def export_data(request: Request) -> JSONResponse:
        """Download the full snapshot as a JSON attachment."""
        data_service = _container(request).data_service
        return JSONResponse(
            content=data_service.export_snapshot(),
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{data_service.export_filename()}"'
                )
            },
        )

    @app.post("/import")
    async def import_data(
        document: dict[str, Any], request: Request, confirm: bool = False
    ) -> ImportResult:
        """Replace all data with an export document when confirmed."""
        try:
            return _container(request).data_service.import_snapshot(
                document, confirm=lambda: confirm
            )
        except FormatError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Failed to import data: {exc}",
            ) from exc

    @app.delete("/data")
    async def clear_data(request: Request, confirm: bool = False) -> dict[str, bool]:
        """Delete all settings and meal logs when confirmed."""
        cleared = _container(request).data_service.clear_all(lambda: confirm)
        return {"cleared": cleared}

    @app.get("/data/info")
    async def data_info(request: Request) -> dict[str, int | None]:
        """Report the last write time and storage usage."""
        data_service = _container(request).data_service
        info = data_service.storage_info()
        return {
            "last_sync": data_service.last_sync(),
            "used_bytes": info.used_bytes if info else None,
            "documents": info.documents if info else None,
        }

    return app
