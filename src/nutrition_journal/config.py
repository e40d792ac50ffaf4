"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_journal.domain.goals import NutritionGoals, validate_goals
from nutrition_journal.services.storage import StorageMode, StorageSettings

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path.home() / ".nutrition_journal"
    state_file: str = "state.json"
    storage_mode: StorageMode = StorageMode.BOTH
    storage_folder: str = "Food Tracker"
    day_file_pattern: str = "%Y-%m-%d"
    include_nutrition_summary: bool = True
    backup_enabled: bool = True
    max_backups: int = 30
    goal_calories: float = 2000
    goal_protein: float = 150
    goal_carbs: float = 250
    goal_fat: float = 65
    goal_fiber: float = 25
    goal_sugar: float = 50
    goal_sodium: float = 2300
    goal_water: float = 2000
    app_version: str = APP_VERSION
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def state_path(self) -> Path:
        return self.data_dir / self.state_file


def storage_settings(settings: Settings) -> StorageSettings:
    """Build the storage configuration from application settings."""
    return StorageSettings(
        storage_method=settings.storage_mode,
        folder_path=settings.storage_folder,
        file_name_pattern=settings.day_file_pattern,
        include_nutrition_summary=settings.include_nutrition_summary,
        backup_enabled=settings.backup_enabled,
        max_backups=settings.max_backups,
    )


def nutrition_goals(settings: Settings) -> NutritionGoals:
    """Build and validate the goal profile from application settings."""
    goals = NutritionGoals(
        calories=settings.goal_calories,
        protein=settings.goal_protein,
        carbs=settings.goal_carbs,
        fat=settings.goal_fat,
        fiber=settings.goal_fiber,
        sugar=settings.goal_sugar,
        sodium=settings.goal_sodium,
        water=settings.goal_water,
    )
    validate_goals(goals)
    return goals
