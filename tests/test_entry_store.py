"""Tests for the entry store."""

import asyncio
from dataclasses import replace
from datetime import date

import pytest

from nutrition_journal.domain.errors import StorageError, ValidationError
from nutrition_journal.domain.records import entry_to_record
from nutrition_journal.services.entries import (
    ENTRIES_KEY,
    SETTINGS_KEY,
    SUMMARIES_KEY,
    EntryStore,
)
from nutrition_journal.services.storage import StorageMode, StorageSettings
from tests.conftest import (
    TODAY,
    InMemoryFileRepository,
    InMemoryStateRepository,
    make_entry,
)

DAY_FILE = "Food Tracker/2024-03-15.md"


def _store_with(store: EntryStore, **settings: object) -> EntryStore:
    return replace(store, settings=StorageSettings(**settings))


def _backups(file_repository: InMemoryFileRepository) -> list[str]:
    return [path for path in file_repository.files if "/backups/" in path]


def test_save_entry_writes_both_representations(
    store: EntryStore,
    state_repository: InMemoryStateRepository,
    file_repository: InMemoryFileRepository,
) -> None:
    entry = make_entry()

    saved = asyncio.run(store.save_entry(entry))
    entries = asyncio.run(store.get_entries_for_date(TODAY))

    assert saved == entry
    assert entries == [entry]
    assert len(state_repository.state[ENTRIES_KEY]["2024-03-15"]) == 1
    assert state_repository.state[SUMMARIES_KEY]["2024-03-15"]["totalCalories"] == 389
    assert DAY_FILE in file_repository.files
    assert len(_backups(file_repository)) == 1


def test_save_entry_assigns_missing_id(store: EntryStore) -> None:
    saved = asyncio.run(store.save_entry(make_entry("")))

    assert saved.id
    assert asyncio.run(store.get_entries_for_date(TODAY))[0].id == saved.id


def test_invalid_entry_changes_nothing(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    with pytest.raises(ValidationError) as error:
        asyncio.run(store.save_entry(make_entry(quantity=0)))

    assert error.value.errors == ["Quantity must be greater than 0"]
    assert state_repository.saves == 0
    assert asyncio.run(store.get_entries_for_date(TODAY)) == []


def test_save_replaces_entry_with_same_id(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry(quantity=1)))
    asyncio.run(store.save_entry(make_entry(quantity=2)))

    entries = asyncio.run(store.get_entries_for_date(TODAY))

    assert [entry.quantity for entry in entries] == [2]


def test_save_keeps_previously_persisted_entries(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    state_repository.state[ENTRIES_KEY] = {
        "2024-03-15": [entry_to_record(make_entry("old"))]
    }

    asyncio.run(store.save_entry(make_entry("new", minute=30)))

    entries = asyncio.run(store.get_entries_for_date(TODAY))
    assert [entry.id for entry in entries] == ["old", "new"]


def test_entries_are_ordered_by_timestamp(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry("late", minute=45)))
    asyncio.run(store.save_entry(make_entry("early", minute=5)))

    entries = asyncio.run(store.get_entries_for_date(TODAY))

    assert [entry.id for entry in entries] == ["early", "late"]


def test_summary_is_recomputed_after_write(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry("a")))
    first = asyncio.run(store.get_daily_summary(TODAY))

    asyncio.run(store.save_entry(make_entry("b", minute=10)))
    second = asyncio.run(store.get_daily_summary(TODAY))

    assert first.total_calories == 389
    assert second.total_calories == 778
    assert second.entry_count == 2


def test_delete_last_entry_zeroes_summary(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    asyncio.run(store.save_entry(make_entry()))

    deleted = asyncio.run(store.delete_entry("e1", TODAY))
    summary = asyncio.run(store.get_daily_summary(TODAY))

    assert deleted is True
    assert summary.entry_count == 0
    assert summary.total_calories == 0
    assert "2024-03-15" not in state_repository.state[ENTRIES_KEY]
    assert "2024-03-15" not in state_repository.state[SUMMARIES_KEY]


def test_delete_without_date_searches_recent_days(store: EntryStore) -> None:
    recent = make_entry("recent", day=date(2024, 3, 1))
    old = make_entry("old", day=date(2024, 2, 4))
    asyncio.run(store.save_entry(recent))
    asyncio.run(store.save_entry(old))

    assert asyncio.run(store.delete_entry("recent")) is True
    assert asyncio.run(store.delete_entry("old")) is False
    assert asyncio.run(store.delete_entry("old", "2024-02-04")) is True


def test_delete_unknown_entry(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry()))

    assert asyncio.run(store.delete_entry("missing", TODAY)) is False


def test_update_entry_only_touches_cached_days(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    entry = make_entry()
    state_repository.state[ENTRIES_KEY] = {"2024-03-15": [entry_to_record(entry)]}
    changed = replace(entry, quantity=2)

    assert asyncio.run(store.update_entry(changed)) is False

    asyncio.run(store.get_entries_for_date(TODAY))
    assert asyncio.run(store.update_entry(changed)) is True
    assert asyncio.run(store.get_daily_summary(TODAY)).total_calories == 778


def test_update_entry_with_unknown_id(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry()))

    assert asyncio.run(store.update_entry(make_entry("other"))) is False


def test_returned_entries_are_copies(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry()))

    asyncio.run(store.get_entries_for_date(TODAY)).clear()

    assert len(asyncio.run(store.get_entries_for_date(TODAY))) == 1


def test_failed_load_is_not_cached(
    store: EntryStore,
    state_repository: InMemoryStateRepository,
    file_repository: InMemoryFileRepository,
) -> None:
    state_repository.state[ENTRIES_KEY] = {
        "2024-03-15": [entry_to_record(make_entry())]
    }
    file_repository.fail_reads = True

    assert asyncio.run(store.get_entries_for_date(TODAY)) == []
    assert asyncio.run(store.get_daily_summary(TODAY)).entry_count == 0

    file_repository.fail_reads = False
    assert len(asyncio.run(store.get_entries_for_date(TODAY))) == 1


def test_failed_persist_raises_after_cache_update(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    asyncio.run(store.get_entries_for_date(TODAY))
    state_repository.fail_saves = True

    with pytest.raises(StorageError):
        asyncio.run(store.save_entry(make_entry()))

    assert len(asyncio.run(store.get_entries_for_date(TODAY))) == 1


def test_save_refuses_when_day_cannot_be_loaded(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    state_repository.fail_loads = True

    with pytest.raises(StorageError):
        asyncio.run(store.save_entry(make_entry()))


def test_malformed_date_is_rejected(store: EntryStore) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(store.get_entries_for_date("15/03/2024"))


def test_import_is_idempotent(store: EntryStore) -> None:
    records = [
        entry_to_record(make_entry("a")),
        entry_to_record(make_entry("b", minute=10)),
        {"id": "broken"},
    ]

    first = asyncio.run(store.import_entries(records))
    second = asyncio.run(store.import_entries(records))

    assert (first.imported, first.skipped, first.errors) == (2, 0, 1)
    assert (second.imported, second.skipped, second.errors) == (0, 2, 1)
    assert len(asyncio.run(store.get_entries_for_date(TODAY))) == 2


def test_range_reads_span_days(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry("a", day=date(2024, 3, 14))))
    asyncio.run(store.save_entry(make_entry("b")))

    entries = asyncio.run(store.get_entries_for_range("2024-03-13", "2024-03-15"))
    summaries = asyncio.run(
        store.get_summaries_for_range("2024-03-13", "2024-03-15")
    )

    assert [entry.id for entry in entries] == ["a", "b"]
    assert [summary.entry_count for summary in summaries] == [0, 1, 1]


def test_export_defaults_to_trailing_year(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry()))

    payload = asyncio.run(store.export_range())

    assert [entry.id for entry in payload.entries] == ["e1"]
    assert len(payload.summaries) == 366
    assert payload.summaries[-1].date == TODAY
    assert payload.version == "1.0.0"


def test_clear_all_removes_everything(
    store: EntryStore,
    state_repository: InMemoryStateRepository,
    file_repository: InMemoryFileRepository,
) -> None:
    asyncio.run(store.update_settings(max_backups=5))
    asyncio.run(store.save_entry(make_entry()))

    asyncio.run(store.clear_all())

    assert file_repository.files == {}
    assert ENTRIES_KEY not in state_repository.state
    assert SETTINGS_KEY in state_repository.state
    assert asyncio.run(store.get_entries_for_date(TODAY)) == []


def test_update_settings_persists_known_keys(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    updated = asyncio.run(store.update_settings(storage_method="json", max_backups=5))

    assert updated.storage_method is StorageMode.JSON
    assert store.settings.max_backups == 5
    assert state_repository.state[SETTINGS_KEY]["storageMethod"] == "json"
    assert state_repository.state[SETTINGS_KEY]["maxBackups"] == 5


def test_update_settings_rejects_bad_input(store: EntryStore) -> None:
    with pytest.raises(ValidationError) as unknown:
        asyncio.run(store.update_settings(colour="blue"))
    assert unknown.value.errors == ["Unknown storage setting: colour"]

    with pytest.raises(ValidationError):
        asyncio.run(store.update_settings(max_backups=-1))
    assert store.settings.max_backups == 3


def test_initialize_applies_persisted_settings_and_entries(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    state_repository.state = {
        SETTINGS_KEY: {"storageMethod": "json", "unknown": True},
        ENTRIES_KEY: {
            "2024-03-15": [entry_to_record(make_entry())],
            "not-a-day": [],
        },
    }

    asyncio.run(store.initialize())
    stats = asyncio.run(store.storage_stats())

    assert store.settings.storage_method is StorageMode.JSON
    assert store.settings.max_backups == 3
    assert stats.total_entries == 1
    assert stats.oldest_entry == TODAY


def test_initialize_survives_unreadable_state(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    state_repository.fail_loads = True

    asyncio.run(store.initialize())

    assert asyncio.run(store.storage_stats()).total_entries == 0


def test_json_only_mode_skips_documents(
    store: EntryStore, file_repository: InMemoryFileRepository
) -> None:
    json_store = _store_with(store, storage_method="json", backup_enabled=False)

    asyncio.run(json_store.save_entry(make_entry()))

    assert file_repository.files == {}


def test_markdown_only_mode_reloads_from_document(
    store: EntryStore,
    state_repository: InMemoryStateRepository,
    file_repository: InMemoryFileRepository,
) -> None:
    markdown_store = _store_with(store, storage_method="markdown")
    asyncio.run(markdown_store.save_entry(make_entry(notes="reheated")))

    fresh = _store_with(store, storage_method="markdown")
    entries = asyncio.run(fresh.get_entries_for_date(TODAY))

    assert ENTRIES_KEY not in state_repository.state
    assert DAY_FILE in file_repository.files
    assert [entry.notes for entry in entries] == ["reheated"]


def test_storage_stats(store: EntryStore) -> None:
    asyncio.run(store.save_entry(make_entry("a", day=date(2024, 3, 10))))
    asyncio.run(store.save_entry(make_entry("b")))
    asyncio.run(store.save_entry(make_entry("c", minute=20)))

    stats = asyncio.run(store.storage_stats())

    assert stats.total_entries == 3
    assert stats.total_days == 2
    assert stats.oldest_entry == date(2024, 3, 10)
    assert stats.newest_entry == TODAY
    assert stats.storage_size > 0


def _out_of_range_record(entry_id: str) -> dict[str, object]:
    record = entry_to_record(make_entry(entry_id))
    record["timestamp"] = 1e20
    return record


def test_initialize_skips_record_with_out_of_range_timestamp(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    state_repository.state = {
        ENTRIES_KEY: {
            "2024-03-15": [
                _out_of_range_record("bad"),
                entry_to_record(make_entry("good")),
            ]
        }
    }

    asyncio.run(store.initialize())

    entries = asyncio.run(store.get_entries_for_date(TODAY))
    assert [entry.id for entry in entries] == ["good"]


def test_import_continues_past_unusable_record(store: EntryStore) -> None:
    records = [_out_of_range_record("bad"), entry_to_record(make_entry("good"))]

    result = asyncio.run(store.import_entries(records))

    assert (result.imported, result.skipped, result.errors) == (1, 0, 1)
    entries = asyncio.run(store.get_entries_for_date(TODAY))
    assert [entry.id for entry in entries] == ["good"]


def test_range_reads_load_state_once(
    store: EntryStore, state_repository: InMemoryStateRepository
) -> None:
    state_repository.state[ENTRIES_KEY] = {
        "2024-03-15": [entry_to_record(make_entry())]
    }

    payload = asyncio.run(store.export_range())

    assert len(payload.summaries) == 366
    assert [entry.id for entry in payload.entries] == ["e1"]
    assert state_repository.loads == 1
