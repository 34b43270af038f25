"""Models for snapshot export and import."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from calorie_hound.domain.meals import DayLog
from calorie_hound.domain.settings import UserSettings

EXPORT_VERSION = "1.0"


class ExportDocument(BaseModel):
    """Portable snapshot of settings and the full meal history."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str
    export_date: str
    user_settings: UserSettings
    meal_logs: list[DayLog]


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import attempt."""

    success: bool
    message: str


@dataclass(frozen=True)
class StorageInfo:
    """Disk usage of the local data directory."""

    used_bytes: int
    documents: int
