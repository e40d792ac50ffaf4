"""Tests for record conversion."""

from datetime import UTC, datetime

import pytest

from nutrition_journal.domain.records import (
    entry_from_record,
    entry_to_record,
    summary_from_record,
    summary_to_record,
    timestamp_from_value,
    timestamp_to_millis,
)
from nutrition_journal.services.summary import calculate_daily_summary
from tests.conftest import TODAY, make_entry, make_item


def test_entry_record_uses_camel_case_and_epoch_millis() -> None:
    record = entry_to_record(make_entry(item=make_item(fiber=10.0)))

    assert record["timestamp"] == 1710489600000
    assert record["foodItem"]["servingSize"] == 100
    assert record["foodItem"]["nutrition"]["fiber"] == 10.0
    assert "sugar" not in record["foodItem"]["nutrition"]
    assert "notes" not in record


def test_entry_from_record_accepts_iso_timestamp() -> None:
    record = entry_to_record(make_entry())
    record["timestamp"] = "2024-03-15T08:00:00+00:00"

    entry = entry_from_record(record)

    assert entry.timestamp == datetime(2024, 3, 15, 8, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "change",
    [
        {"meal": "brunch"},
        {"quantity": "lots"},
        {"timestamp": True},
        {"date": "yesterday"},
        {"foodItem": "oats"},
    ],
)
def test_entry_from_record_rejects_malformed(change: dict[str, object]) -> None:
    record = {**entry_to_record(make_entry()), **change}

    with pytest.raises(ValueError):
        entry_from_record(record)


def test_entry_from_record_requires_fields() -> None:
    record = entry_to_record(make_entry())
    del record["foodItem"]

    with pytest.raises(KeyError):
        entry_from_record(record)


def test_summary_record_reads_back() -> None:
    summary = calculate_daily_summary(TODAY, [make_entry()])

    record = summary_to_record(summary)

    assert record["totalCalories"] == 389
    assert record["mealBreakdown"]["breakfast"] == 389
    assert summary_from_record(record) == summary


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = datetime(2024, 3, 15, 8, 0)

    assert timestamp_to_millis(naive) == 1710489600000
    assert timestamp_from_value("2024-03-15T08:00:00").tzinfo is UTC


@pytest.mark.parametrize("value", [1e20, -1e20, "not-a-time", ""])
def test_unusable_timestamps_raise_value_error(value: object) -> None:
    with pytest.raises(ValueError):
        timestamp_from_value(value)
