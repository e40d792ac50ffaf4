"""Entry store with a per-day cache over two persisted representations."""

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from nutrition_journal.domain.entries import FoodEntry, parse_day, validate_entry
from nutrition_journal.domain.errors import StorageError, ValidationError
from nutrition_journal.domain.records import (
    entry_from_record,
    entry_to_record,
    summary_to_record,
)
from nutrition_journal.domain.storage import ExportPayload, ImportResult, StorageStats
from nutrition_journal.domain.summary import DailyNutritionSummary, empty_summary
from nutrition_journal.services.backups import BackupManager
from nutrition_journal.services.documents import (
    parse_day_document,
    render_day_document,
)
from nutrition_journal.services.storage import (
    FileRepository,
    StateRepository,
    StorageSettings,
)
from nutrition_journal.services.summary import calculate_daily_summary

ENTRIES_KEY = "foodEntries"
SUMMARIES_KEY = "nutritionSummaries"
SETTINGS_KEY = "storageSettings"

RECENT_LOOKUP_DAYS = 30
DEFAULT_EXPORT_DAYS = 365

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _by_timestamp(entry: FoodEntry) -> datetime:
    return entry.timestamp


@dataclass
class _StateSnapshot:
    """Aggregate state loaded at most once for a batch of day reads."""

    repository: StateRepository
    _state: dict[str, object] | None = field(default=None, init=False)

    async def load(self) -> dict[str, object]:
        if self._state is None:
            self._state = await self.repository.load_state()
        return self._state


@dataclass
class EntryStore:
    """Owns the entry and summary caches and keeps the backends in step.

    Operations are sequential per caller. Two overlapping writes for the same
    day are not serialized: the in-memory list is last-writer-wins and disk
    ends up with whichever persist finished last.
    """

    state_repository: StateRepository
    file_repository: FileRepository
    backups: BackupManager
    settings: StorageSettings = field(default_factory=StorageSettings)
    version: str = "1.0.0"
    clock: Callable[[], datetime] = field(default=_utc_now)
    _entries: dict[date, list[FoodEntry]] = field(default_factory=dict, init=False)
    _summaries: dict[date, DailyNutritionSummary] = field(
        default_factory=dict, init=False
    )

    # --- Lifecycle -------------------------------------------------------
    async def initialize(self) -> None:
        """Apply persisted settings and eagerly cache the aggregate state."""
        try:
            state = await self.state_repository.load_state()
        except Exception:
            _logger.exception("Failed to load aggregate state")
            return

        raw_settings = state.get(SETTINGS_KEY)
        if isinstance(raw_settings, dict):
            try:
                self.settings = StorageSettings.model_validate(
                    {**self.settings.to_record(), **raw_settings}
                )
            except PydanticValidationError:
                _logger.warning("Ignoring invalid persisted storage settings")

        raw_entries = state.get(ENTRIES_KEY)
        if not isinstance(raw_entries, dict):
            return
        for raw_day, records in raw_entries.items():
            try:
                day = parse_day(raw_day)
            except ValidationError:
                _logger.warning("Ignoring entries stored under bad date %r", raw_day)
                continue
            entries = _entries_from_records(records)
            self._entries[day] = sorted(entries, key=_by_timestamp)
        _logger.info("Loaded %s day(s) from aggregate state", len(self._entries))

    def dispose(self) -> None:
        """Drop both caches; persisted data is untouched."""
        self._entries.clear()
        self._summaries.clear()

    # --- Writes ----------------------------------------------------------
    async def save_entry(self, entry: FoodEntry) -> FoodEntry:
        """Insert or replace an entry by id, then persist and back up its day.

        Raises ``ValidationError`` before any change, and ``StorageError`` when
        persisting fails; in the latter case the cache already holds the
        entry.
        """
        validate_entry(entry, today=self.clock().date())
        if not entry.id:
            entry = replace(entry, id=str(uuid4()))

        bucket = await self._require_day(entry.date)
        for index, existing in enumerate(bucket):
            if existing.id == entry.id:
                bucket[index] = entry
                break
        else:
            bucket.append(entry)
        bucket.sort(key=_by_timestamp)
        self._summaries.pop(entry.date, None)

        await self._persist_day(entry.date)
        _logger.info("Saved entry %s for %s", entry.id, entry.date)
        return entry

    async def update_entry(self, entry: FoodEntry) -> bool:
        """Replace an entry in an already cached day; False when absent."""
        validate_entry(entry, today=self.clock().date())
        bucket = self._entries.get(entry.date)
        if bucket is None:
            return False
        for index, existing in enumerate(bucket):
            if existing.id == entry.id:
                bucket[index] = entry
                break
        else:
            return False
        bucket.sort(key=_by_timestamp)
        self._summaries.pop(entry.date, None)

        await self._persist_day(entry.date)
        _logger.info("Updated entry %s for %s", entry.id, entry.date)
        return True

    async def delete_entry(self, entry_id: str, day: date | str | None = None) -> bool:
        """Remove an entry by id.

        Without *day* only the last ``RECENT_LOOKUP_DAYS`` days are searched,
        so older entries need their date passed explicitly.
        """
        if day is None:
            target = await self._find_entry_day(entry_id)
            if target is None:
                return False
        else:
            target = parse_day(day)

        bucket = await self._require_day(target)
        remaining = [entry for entry in bucket if entry.id != entry_id]
        if len(remaining) == len(bucket):
            return False
        self._entries[target] = remaining
        self._summaries.pop(target, None)

        await self._persist_day(target)
        _logger.info("Deleted entry %s from %s", entry_id, target)
        return True

    async def import_entries(
        self, records: Iterable[dict[str, object]]
    ) -> ImportResult:
        """Save every record whose id is not already stored for its day."""
        imported = skipped = errors = 0
        for record in records:
            try:
                entry = entry_from_record(record)
                existing = await self.get_entries_for_date(entry.date)
                if entry.id and any(item.id == entry.id for item in existing):
                    skipped += 1
                    continue
                await self.save_entry(entry)
                imported += 1
            except Exception:
                _logger.exception("Failed to import entry record")
                errors += 1
        _logger.info(
            "Import finished: imported=%s skipped=%s errors=%s",
            imported,
            skipped,
            errors,
        )
        return ImportResult(imported=imported, skipped=skipped, errors=errors)

    async def clear_all(self) -> None:
        """Drop the caches and delete every persisted artifact. Irreversible."""
        self.dispose()
        try:
            for stored in await self.file_repository.list_files(
                self.settings.folder_path
            ):
                await self.file_repository.delete(stored.path)
            state = await self.state_repository.load_state()
            state.pop(ENTRIES_KEY, None)
            state.pop(SUMMARIES_KEY, None)
            await self.state_repository.save_state(state)
        except Exception as exc:
            _logger.exception("Failed to clear stored data")
            raise StorageError(f"Failed to clear stored data: {exc}") from exc
        _logger.info("Cleared all stored data")

    async def update_settings(self, **changes: object) -> StorageSettings:
        """Override known storage settings and persist them."""
        unknown = sorted(set(changes) - set(StorageSettings.model_fields))
        if unknown:
            raise ValidationError(
                [f"Unknown storage setting: {key}" for key in unknown]
            )
        try:
            updated = StorageSettings.model_validate(
                {**self.settings.model_dump(), **changes}
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                [str(error["msg"]) for error in exc.errors()]
            ) from exc
        self.settings = updated

        try:
            state = await self.state_repository.load_state()
            state[SETTINGS_KEY] = updated.to_record()
            await self.state_repository.save_state(state)
        except Exception as exc:
            _logger.exception("Failed to persist storage settings")
            raise StorageError(f"Failed to persist storage settings: {exc}") from exc
        return updated

    # --- Reads -----------------------------------------------------------
    async def get_entries_for_date(self, day: date | str) -> list[FoodEntry]:
        """Return a copy of a day's entries, loading the day if needed.

        A failed load returns an empty list and leaves the day uncached.
        """
        snapshot = _StateSnapshot(self.state_repository)
        return await self._read_day(parse_day(day), snapshot)

    async def get_entries_for_range(
        self, start: date | str, end: date | str
    ) -> list[FoodEntry]:
        snapshot = _StateSnapshot(self.state_repository)
        entries: list[FoodEntry] = []
        for day in _days_between(start, end):
            entries.extend(await self._read_day(day, snapshot))
        return sorted(entries, key=_by_timestamp)

    async def get_daily_summary(self, day: date | str) -> DailyNutritionSummary:
        """Return the day's summary, zeroed when it cannot be computed."""
        return await self._summarise(
            parse_day(day), _StateSnapshot(self.state_repository)
        )

    async def get_summaries_for_range(
        self, start: date | str, end: date | str
    ) -> list[DailyNutritionSummary]:
        snapshot = _StateSnapshot(self.state_repository)
        return [
            await self._summarise(day, snapshot) for day in _days_between(start, end)
        ]

    async def export_range(
        self, start: date | str | None = None, end: date | str | None = None
    ) -> ExportPayload:
        """Collect entries and summaries; defaults to the trailing year."""
        now = self.clock()
        end_day = parse_day(end) if end is not None else now.date()
        start_day = (
            parse_day(start)
            if start is not None
            else end_day - timedelta(days=DEFAULT_EXPORT_DAYS)
        )
        return ExportPayload(
            entries=await self.get_entries_for_range(start_day, end_day),
            summaries=await self.get_summaries_for_range(start_day, end_day),
            exported_at=now,
            version=self.version,
        )

    async def storage_stats(self) -> StorageStats:
        days = sorted(day for day, entries in self._entries.items() if entries)
        try:
            state = await self.state_repository.load_state()
            size = len(json.dumps(state))
        except Exception:
            _logger.exception("Failed to measure aggregate state")
            size = 0
        return StorageStats(
            total_entries=sum(len(entries) for entries in self._entries.values()),
            total_days=len(days),
            oldest_entry=days[0] if days else None,
            newest_entry=days[-1] if days else None,
            storage_size=size,
        )

    # --- Persistence -----------------------------------------------------
    def day_document_path(self, day: date) -> str:
        file_name = day.strftime(self.settings.file_name_pattern)
        return f"{self.settings.folder_path}/{file_name}.md"

    async def _require_day(self, day: date) -> list[FoodEntry]:
        """Return the live cached bucket, loading it first; raises on failure."""
        bucket = self._entries.get(day)
        if bucket is not None:
            return bucket
        try:
            bucket = await self._load_day(day)
        except Exception as exc:
            _logger.exception("Failed to load %s before writing", day)
            raise StorageError(f"Failed to load entries for {day}: {exc}") from exc
        self._entries[day] = bucket
        return bucket

    async def _read_day(
        self, target: date, snapshot: _StateSnapshot
    ) -> list[FoodEntry]:
        try:
            cached = self._entries.get(target)
            if cached is None:
                cached = await self._load_day(target, snapshot)
                self._entries[target] = cached
            return list(cached)
        except Exception:
            _logger.exception("Failed to load entries for %s", target)
            return []

    async def _summarise(
        self, target: date, snapshot: _StateSnapshot
    ) -> DailyNutritionSummary:
        try:
            cached = self._summaries.get(target)
            if cached is not None:
                return cached
            entries = await self._read_day(target, snapshot)
            summary = calculate_daily_summary(target, entries)
            if target in self._entries:
                self._summaries[target] = summary
            return summary
        except Exception:
            _logger.exception("Failed to summarise %s", target)
            return empty_summary(target)

    async def _load_day(
        self, day: date, snapshot: _StateSnapshot | None = None
    ) -> list[FoodEntry]:
        entries: list[FoodEntry] = []
        if self.settings.writes_markdown:
            content = await self.file_repository.read_text(self.day_document_path(day))
            if content is not None:
                entries = parse_day_document(content).entries
        if not entries:
            if snapshot is None:
                snapshot = _StateSnapshot(self.state_repository)
            state = await snapshot.load()
            stored = state.get(ENTRIES_KEY)
            if isinstance(stored, dict):
                entries = _entries_from_records(stored.get(day.isoformat()))
        return sorted(entries, key=_by_timestamp)

    async def _persist_day(self, day: date) -> None:
        entries = list(self._entries.get(day, []))
        summary = calculate_daily_summary(day, entries)
        self._summaries[day] = summary
        key = day.isoformat()
        try:
            if self.settings.writes_json:
                state = await self.state_repository.load_state()
                stored_entries = state.setdefault(ENTRIES_KEY, {})
                stored_summaries = state.setdefault(SUMMARIES_KEY, {})
                if entries:
                    stored_entries[key] = [entry_to_record(entry) for entry in entries]
                    stored_summaries[key] = summary_to_record(summary)
                else:
                    stored_entries.pop(key, None)
                    stored_summaries.pop(key, None)
                await self.state_repository.save_state(state)
            if self.settings.writes_markdown:
                await self.file_repository.write_text(
                    self.day_document_path(day),
                    render_day_document(
                        day,
                        entries,
                        summary,
                        include_summary=self.settings.include_nutrition_summary,
                    ),
                )
        except Exception as exc:
            _logger.exception("Failed to persist entries for %s", day)
            raise StorageError(f"Failed to persist entries for {day}: {exc}") from exc

        await self.backups.snapshot(self.settings, day, entries, summary)

    async def _find_entry_day(self, entry_id: str) -> date | None:
        today = self.clock().date()
        snapshot = _StateSnapshot(self.state_repository)
        for offset in range(RECENT_LOOKUP_DAYS):
            day = today - timedelta(days=offset)
            entries = await self._read_day(day, snapshot)
            if any(entry.id == entry_id for entry in entries):
                return day
        return None


def _days_between(start: date | str, end: date | str) -> list[date]:
    start_day = parse_day(start)
    end_day = parse_day(end)
    return [
        start_day + timedelta(days=offset)
        for offset in range((end_day - start_day).days + 1)
    ]


def _entries_from_records(records: object) -> list[FoodEntry]:
    if not isinstance(records, list):
        return []
    entries: list[FoodEntry] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        try:
            entries.append(entry_from_record(record))
        except (KeyError, TypeError, ValueError):
            _logger.warning("Skipping unreadable stored entry record")
    return entries
