"""Domain models for storage bookkeeping."""

from dataclasses import dataclass
from datetime import date, datetime

from nutrition_journal.domain.entries import FoodEntry
from nutrition_journal.domain.summary import DailyNutritionSummary


@dataclass(frozen=True)
class StoredFile:
    """A file known to the file repository."""

    path: str
    created_at: datetime


@dataclass(frozen=True)
class ImportResult:
    """Counts produced by a batch import."""

    imported: int
    skipped: int
    errors: int


@dataclass(frozen=True)
class ExportPayload:
    """Entries and summaries for an inclusive date range."""

    entries: list[FoodEntry]
    summaries: list[DailyNutritionSummary]
    exported_at: datetime
    version: str


@dataclass(frozen=True)
class StorageStats:
    """Figures describing what the store currently holds."""

    total_entries: int
    total_days: int
    oldest_entry: date | None
    newest_entry: date | None
    storage_size: int
