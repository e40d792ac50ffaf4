"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrition_journal.adapters.local_file_repository import LocalFileRepository
from nutrition_journal.adapters.local_state_repository import LocalStateRepository
from nutrition_journal.config import Settings, nutrition_goals, storage_settings
from nutrition_journal.domain.goals import NutritionGoals
from nutrition_journal.services.backups import BackupManager
from nutrition_journal.services.entries import EntryStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    goals: NutritionGoals
    entry_store: EntryStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    file_repository = LocalFileRepository(resolved_settings.data_dir)
    state_repository = LocalStateRepository(resolved_settings.state_path)
    backups = BackupManager(
        files=file_repository,
        version=resolved_settings.app_version,
    )
    entry_store = EntryStore(
        state_repository=state_repository,
        file_repository=file_repository,
        backups=backups,
        settings=storage_settings(resolved_settings),
        version=resolved_settings.app_version,
    )

    async def close_resources() -> None:
        entry_store.dispose()

    return AppContainer(
        settings=resolved_settings,
        goals=nutrition_goals(resolved_settings),
        entry_store=entry_store,
        close_resources=close_resources,
    )
