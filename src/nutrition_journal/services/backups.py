"""Timestamped day snapshots with global retention."""

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from nutrition_journal.domain.entries import FoodEntry
from nutrition_journal.domain.records import entry_to_record, summary_to_record
from nutrition_journal.domain.summary import DailyNutritionSummary
from nutrition_journal.services.storage import FileRepository, StorageSettings

BACKUP_MARKER = "_backup_"
CAPTURE_FORMAT = "%Y-%m-%d_%H-%M-%S-%f"

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class BackupManager:
    """Writes day snapshots into the backup folder and trims old ones."""

    files: FileRepository
    version: str
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def snapshot(
        self,
        settings: StorageSettings,
        day: date,
        entries: Sequence[FoodEntry],
        summary: DailyNutritionSummary,
    ) -> str | None:
        """Write a snapshot and prune; failures are logged, never raised."""
        if not settings.backup_enabled:
            return None
        captured_at = self.clock()
        path = (
            f"{settings.backup_folder}/{day.isoformat()}{BACKUP_MARKER}"
            f"{captured_at.strftime(CAPTURE_FORMAT)}.json"
        )
        payload = {
            "date": day.isoformat(),
            "entries": [entry_to_record(entry) for entry in entries],
            "summary": summary_to_record(summary),
            "backupTimestamp": captured_at.isoformat(),
            "version": self.version,
        }
        try:
            await self.files.write_text(path, json.dumps(payload, indent=2))
        except Exception:
            _logger.exception("Failed to write backup for %s", day)
            return None
        await self.prune(settings)
        return path

    async def prune(self, settings: StorageSettings) -> list[str]:
        """Delete every backup beyond the newest ``max_backups``."""
        try:
            backups = [
                stored
                for stored in await self.files.list_files(settings.backup_folder)
                if stored.path.endswith(".json")
            ]
        except Exception:
            _logger.exception("Failed to list backups")
            return []
        backups.sort(
            key=lambda stored: (stored.created_at, _capture_stamp(stored.path)),
            reverse=True,
        )
        deleted: list[str] = []
        for stored in backups[settings.max_backups :]:
            try:
                await self.files.delete(stored.path)
            except Exception:
                _logger.exception("Failed to delete backup %s", stored.path)
                continue
            deleted.append(stored.path)
        if deleted:
            _logger.info("Pruned %s old backup(s)", len(deleted))
        return deleted


def _capture_stamp(path: str) -> str:
    """Capture time embedded in an archive name; sorts chronologically."""
    name = path.rsplit("/", 1)[-1].removesuffix(".json")
    _, marker, stamp = name.rpartition(BACKUP_MARKER)
    return stamp if marker else ""
