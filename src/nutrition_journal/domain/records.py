"""Conversion between domain models and camelCase JSON records.

Every persisted representation (aggregate state, day documents, backups,
exports) and the HTTP payloads share this record shape, so a record written
by one can be read back by any other.
"""

from datetime import UTC, date, datetime

from nutrition_journal.domain.entries import FoodEntry, FoodItem, Meal, NutritionFacts
from nutrition_journal.domain.goals import (
    LimitProgress,
    MacroShare,
    NutrientProgress,
    NutritionAnalysis,
)
from nutrition_journal.domain.storage import ExportPayload, ImportResult, StorageStats
from nutrition_journal.domain.summary import DailyNutritionSummary, MealBreakdown
from nutrition_journal.domain.trends import NutrientDeficiency, TrendAnalysis

_OPTIONAL_NUTRIENTS = ("fiber", "sugar", "sodium", "water")


def nutrition_to_record(facts: NutritionFacts) -> dict[str, object]:
    record: dict[str, object] = {
        "calories": facts.calories,
        "protein": facts.protein,
        "carbs": facts.carbs,
        "fat": facts.fat,
    }
    for key in _OPTIONAL_NUTRIENTS:
        value = getattr(facts, key)
        if value is not None:
            record[key] = value
    return record


def nutrition_from_record(record: dict[str, object]) -> NutritionFacts:
    return NutritionFacts(
        calories=_to_float(record["calories"]),
        protein=_to_float(record["protein"]),
        carbs=_to_float(record["carbs"]),
        fat=_to_float(record["fat"]),
        **{
            key: _to_float(record[key])
            for key in _OPTIONAL_NUTRIENTS
            if record.get(key) is not None
        },
    )


def food_item_to_record(item: FoodItem) -> dict[str, object]:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "servingSize": item.serving_size,
        "servingUnit": item.serving_unit,
        "nutrition": nutrition_to_record(item.nutrition),
    }


def food_item_from_record(record: dict[str, object]) -> FoodItem:
    nutrition = record["nutrition"]
    if not isinstance(nutrition, dict):
        raise ValueError("Food item nutrition must be an object")
    return FoodItem(
        id=str(record.get("id") or ""),
        name=str(record["name"]),
        category=str(record.get("category") or ""),
        serving_size=_to_float(record["servingSize"]),
        serving_unit=str(record.get("servingUnit") or ""),
        nutrition=nutrition_from_record(nutrition),
    )


def entry_to_record(entry: FoodEntry) -> dict[str, object]:
    record: dict[str, object] = {
        "id": entry.id,
        "date": entry.date.isoformat(),
        "timestamp": timestamp_to_millis(entry.timestamp),
        "foodItem": food_item_to_record(entry.food_item),
        "quantity": entry.quantity,
        "meal": entry.meal.value,
    }
    if entry.notes:
        record["notes"] = entry.notes
    return record


def entry_from_record(record: dict[str, object]) -> FoodEntry:
    """Parse an entry record; raises ``ValueError``/``KeyError`` when malformed."""
    food_item = record["foodItem"]
    if not isinstance(food_item, dict):
        raise ValueError("Entry foodItem must be an object")
    notes = record.get("notes")
    return FoodEntry(
        id=str(record.get("id") or ""),
        date=date.fromisoformat(str(record["date"])[:10]),
        timestamp=timestamp_from_value(record["timestamp"]),
        food_item=food_item_from_record(food_item),
        quantity=_to_float(record["quantity"]),
        meal=Meal(str(record["meal"])),
        notes=str(notes) if notes else None,
    )


def summary_to_record(summary: DailyNutritionSummary) -> dict[str, object]:
    return {
        "date": summary.date.isoformat(),
        "totalCalories": summary.total_calories,
        "totalProtein": summary.total_protein,
        "totalCarbs": summary.total_carbs,
        "totalFat": summary.total_fat,
        "totalFiber": summary.total_fiber,
        "totalSugar": summary.total_sugar,
        "totalSodium": summary.total_sodium,
        "totalWater": summary.total_water,
        "entryCount": summary.entry_count,
        "mealBreakdown": {
            "breakfast": summary.meal_breakdown.breakfast,
            "lunch": summary.meal_breakdown.lunch,
            "dinner": summary.meal_breakdown.dinner,
            "snack": summary.meal_breakdown.snack,
        },
    }


def summary_from_record(record: dict[str, object]) -> DailyNutritionSummary:
    meals = record.get("mealBreakdown") or {}
    if not isinstance(meals, dict):
        raise ValueError("Summary mealBreakdown must be an object")
    return DailyNutritionSummary(
        date=date.fromisoformat(str(record["date"])[:10]),
        total_calories=_to_float(record.get("totalCalories", 0)),
        total_protein=_to_float(record.get("totalProtein", 0)),
        total_carbs=_to_float(record.get("totalCarbs", 0)),
        total_fat=_to_float(record.get("totalFat", 0)),
        total_fiber=_to_float(record.get("totalFiber", 0)),
        total_sugar=_to_float(record.get("totalSugar", 0)),
        total_sodium=_to_float(record.get("totalSodium", 0)),
        total_water=_to_float(record.get("totalWater", 0)),
        entry_count=int(_to_float(record.get("entryCount", 0))),
        meal_breakdown=MealBreakdown(
            breakfast=_to_float(meals.get("breakfast", 0)),
            lunch=_to_float(meals.get("lunch", 0)),
            dinner=_to_float(meals.get("dinner", 0)),
            snack=_to_float(meals.get("snack", 0)),
        ),
    )


def analysis_to_record(analysis: NutritionAnalysis) -> dict[str, object]:
    progress = analysis.progress
    breakdown = analysis.macro_breakdown
    return {
        "summary": summary_to_record(analysis.summary),
        "goals": {
            "calories": analysis.goals.calories,
            "protein": analysis.goals.protein,
            "carbs": analysis.goals.carbs,
            "fat": analysis.goals.fat,
            "fiber": analysis.goals.fiber,
            "sugar": analysis.goals.sugar,
            "sodium": analysis.goals.sodium,
            "water": analysis.goals.water,
        },
        "progress": {
            "calories": _progress_record(progress.calories),
            "protein": _progress_record(progress.protein),
            "carbs": _progress_record(progress.carbs),
            "fat": _progress_record(progress.fat),
            "fiber": _progress_record(progress.fiber),
            "water": _progress_record(progress.water),
            "sugar": _limit_record(progress.sugar),
            "sodium": _limit_record(progress.sodium),
        },
        "macroBreakdown": {
            "protein": _macro_record(breakdown.protein),
            "carbs": _macro_record(breakdown.carbs),
            "fat": _macro_record(breakdown.fat),
        },
        "recommendations": list(analysis.recommendations),
        "warnings": list(analysis.warnings),
    }


def trend_analysis_to_record(analysis: TrendAnalysis) -> dict[str, object]:
    return {
        "trends": [
            {
                "date": trend.date.isoformat(),
                "calories": trend.calories,
                "protein": trend.protein,
                "carbs": trend.carbs,
                "fat": trend.fat,
                "fiber": trend.fiber,
                "goalsMet": {
                    "calories": trend.goals_met.calories,
                    "protein": trend.goals_met.protein,
                    "carbs": trend.goals_met.carbs,
                    "fat": trend.goals_met.fat,
                },
            }
            for trend in analysis.trends
        ],
        "averages": {
            "calories": analysis.averages.calories,
            "protein": analysis.averages.protein,
            "carbs": analysis.averages.carbs,
            "fat": analysis.averages.fat,
            "fiber": analysis.averages.fiber,
        },
        "consistency": {
            "calorieVariance": analysis.consistency.calorie_variance,
            "proteinConsistency": analysis.consistency.protein_consistency,
            "overallScore": analysis.consistency.overall_score,
        },
        "improvements": list(analysis.improvements),
    }


def deficiency_to_record(deficiency: NutrientDeficiency) -> dict[str, object]:
    return {
        "nutrient": deficiency.nutrient,
        "current": deficiency.current,
        "recommended": deficiency.recommended,
        "deficit": deficiency.deficit,
        "severity": deficiency.severity,
        "suggestions": list(deficiency.suggestions),
    }


def export_to_record(payload: ExportPayload) -> dict[str, object]:
    return {
        "entries": [entry_to_record(entry) for entry in payload.entries],
        "summaries": [summary_to_record(summary) for summary in payload.summaries],
        "exportInstant": payload.exported_at.isoformat(),
        "version": payload.version,
    }


def import_result_to_record(result: ImportResult) -> dict[str, int]:
    return {
        "imported": result.imported,
        "skipped": result.skipped,
        "errors": result.errors,
    }


def stats_to_record(stats: StorageStats) -> dict[str, object]:
    return {
        "totalEntries": stats.total_entries,
        "totalDays": stats.total_days,
        "oldestEntry": stats.oldest_entry.isoformat() if stats.oldest_entry else None,
        "newestEntry": stats.newest_entry.isoformat() if stats.newest_entry else None,
        "storageSize": stats.storage_size,
    }


def timestamp_to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


def timestamp_from_value(value: object) -> datetime:
    """Accept epoch milliseconds or an ISO 8601 string."""
    if isinstance(value, bool):
        raise ValueError("Timestamp must be a number or ISO string")
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"Timestamp out of range: {value!r}") from exc
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp: {value!r}") from exc
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ValueError(f"Invalid timestamp: {value!r}")


def _progress_record(progress: NutrientProgress) -> dict[str, float]:
    return {
        "current": progress.current,
        "target": progress.target,
        "percentage": progress.percentage,
        "remaining": progress.remaining,
    }


def _limit_record(progress: LimitProgress) -> dict[str, object]:
    return {
        "current": progress.current,
        "target": progress.target,
        "percentage": progress.percentage,
        "status": progress.status.value,
    }


def _macro_record(share: MacroShare) -> dict[str, float]:
    return {
        "grams": share.grams,
        "calories": share.calories,
        "percentage": share.percentage,
    }


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        raise ValueError("Expected a number")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        return float(value)
    raise ValueError(f"Expected a number, got {value!r}")
