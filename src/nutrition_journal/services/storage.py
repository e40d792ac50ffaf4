"""Persistence interfaces the journal is stored through."""

from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from nutrition_journal.domain.storage import StoredFile


class StorageMode(Enum):
    """Which representations a day is written to."""

    JSON = "json"
    MARKDOWN = "markdown"
    BOTH = "both"


class StorageSettings(BaseModel):
    """Storage configuration with a fixed schema.

    Persisted overrides are validated on top of the defaults; unknown keys
    are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    storage_method: StorageMode = Field(default=StorageMode.BOTH, alias="storageMethod")
    folder_path: str = Field(default="Food Tracker", alias="folderPath")
    file_name_pattern: str = Field(default="%Y-%m-%d", alias="fileNamePattern")
    include_nutrition_summary: bool = Field(
        default=True, alias="includeNutritionSummary"
    )
    backup_enabled: bool = Field(default=True, alias="backupEnabled")
    max_backups: int = Field(default=30, ge=0, alias="maxBackups")

    @property
    def writes_json(self) -> bool:
        return self.storage_method in {StorageMode.JSON, StorageMode.BOTH}

    @property
    def writes_markdown(self) -> bool:
        return self.storage_method in {StorageMode.MARKDOWN, StorageMode.BOTH}

    @property
    def backup_folder(self) -> str:
        return f"{self.folder_path}/backups"

    def to_record(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class StateRepository(Protocol):
    """Aggregate structured store, read and written wholesale."""

    async def load_state(self) -> dict[str, object]:
        """Return the whole state object, empty when nothing is stored."""

    async def save_state(self, state: dict[str, object]) -> None:
        """Replace the whole state object."""


class FileRepository(Protocol):
    """File storage addressed by slash-separated relative paths."""

    async def read_text(self, path: str) -> str | None:
        """Return file contents, or None when the file does not exist."""

    async def write_text(self, path: str, content: str) -> None:
        """Create or overwrite a file, creating parent folders as needed."""

    async def delete(self, path: str) -> None:
        """Delete a file if present."""

    async def list_files(self, folder: str) -> list[StoredFile]:
        """Return every file below *folder*, recursively."""
