"""Human-readable day documents with an embedded raw data block.

A day document carries a rendered summary and per-meal prose followed by a
``Raw Data`` section. Only the fenced block in that section is read back;
the prose is regenerated on every write, so hand edits to it are lost.
"""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from nutrition_journal.domain.entries import FoodEntry, Meal
from nutrition_journal.domain.records import entry_from_record, entry_to_record
from nutrition_journal.domain.summary import DailyNutritionSummary
from nutrition_journal.services.summary import round_whole

FENCE = "```"
RAW_DATA_HEADING = "## Raw Data"

_logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Entries recovered from a document and how many lines were dropped."""

    entries: list[FoodEntry] = field(default_factory=list)
    skipped: int = 0


def render_day_document(
    day: date,
    entries: Sequence[FoodEntry],
    summary: DailyNutritionSummary,
    include_summary: bool = True,
) -> str:
    """Render the markdown document for one day."""
    lines = [f"# Food Intake - {day.isoformat()}", ""]

    if include_summary:
        lines.extend(
            [
                "## Daily Summary",
                "",
                f"- **Total Calories:** {summary.total_calories:.0f}",
                f"- **Protein:** {summary.total_protein:.1f}g",
                f"- **Carbohydrates:** {summary.total_carbs:.1f}g",
                f"- **Fat:** {summary.total_fat:.1f}g",
            ]
        )
        if summary.total_fiber > 0:
            lines.append(f"- **Fiber:** {summary.total_fiber:.1f}g")
        meals = summary.meal_breakdown
        lines.extend(
            [
                "",
                "### Meal Breakdown",
                "",
                f"- **Breakfast:** {meals.breakfast:.0f} calories",
                f"- **Lunch:** {meals.lunch:.0f} calories",
                f"- **Dinner:** {meals.dinner:.0f} calories",
                f"- **Snacks:** {meals.snack:.0f} calories",
                "",
            ]
        )

    lines.extend(["## Food Entries", ""])
    for meal in Meal:
        meal_entries = [entry for entry in entries if entry.meal is meal]
        if not meal_entries:
            continue
        lines.extend([f"### {meal.value.capitalize()}", ""])
        for entry in meal_entries:
            item = entry.food_item
            lines.append(f"- **{item.name}**")
            lines.append(
                f"  - Quantity: {entry.quantity:g} x {item.serving_size:g} "
                f"{item.serving_unit}"
            )
            lines.append(f"  - Calories: {round_whole(entry.calories)}")
            if entry.notes:
                lines.append(f"  - Notes: {entry.notes}")
            lines.append("")

    lines.extend([RAW_DATA_HEADING, "", f"{FENCE}json"])
    lines.extend(
        json.dumps(entry_to_record(entry), ensure_ascii=False) for entry in entries
    )
    lines.extend([FENCE, ""])
    return "\n".join(lines)


def parse_day_document(content: str) -> ParseResult:
    """Recover entries from the raw data block of a day document.

    Each line inside the fence holds one JSON record (or an array of them).
    Lines that fail to parse, and records that are not valid entries, are
    counted and dropped.
    """
    block = _raw_data_lines(content)
    result = ParseResult()
    records: list[object] = []

    whole: object = None
    if len(block) > 1:
        try:
            whole = json.loads("\n".join(block))
        except json.JSONDecodeError:
            whole = None
    if isinstance(whole, list):
        records.extend(whole)
    else:
        for line in block:
            stripped = line.strip()
            if not stripped:
                continue
            try:
                data = json.loads(stripped)
            except json.JSONDecodeError:
                result.skipped += 1
                continue
            if isinstance(data, list):
                records.extend(data)
            else:
                records.append(data)

    for record in records:
        if not isinstance(record, dict):
            result.skipped += 1
            continue
        try:
            result.entries.append(entry_from_record(record))
        except (KeyError, TypeError, ValueError):
            result.skipped += 1

    if result.skipped:
        _logger.warning("Dropped %s unreadable raw data line(s)", result.skipped)
    return result


def _raw_data_lines(content: str) -> list[str]:
    lines = content.splitlines()
    start = 0
    for index, line in enumerate(lines):
        if line.strip() == RAW_DATA_HEADING:
            start = index + 1
    block: list[str] = []
    inside = False
    for line in lines[start:]:
        stripped = line.strip()
        if not inside:
            if stripped.startswith(FENCE):
                inside = True
            continue
        if stripped == FENCE:
            break
        block.append(line)
    return block
