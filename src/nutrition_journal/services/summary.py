"""Summary calculator for a day's entries."""

import math
from collections.abc import Iterable
from datetime import date

from nutrition_journal.domain.entries import FoodEntry, Meal
from nutrition_journal.domain.summary import (
    DailyNutritionSummary,
    MealBreakdown,
    empty_summary,
)


def round_whole(value: float) -> int:
    """Round half away from zero to a whole unit (calories, percentages)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def round_tenth(value: float) -> float:
    """Round half away from zero to one decimal place (grams, millilitres)."""
    return round_whole(value * 10) / 10


def calculate_daily_summary(
    day: date, entries: Iterable[FoodEntry]
) -> DailyNutritionSummary:
    """Fold one day's entries into rounded totals.

    Total calories is the sum of the rounded meal buckets so the meal
    breakdown always adds up to it.
    """
    entries = list(entries)
    if not entries:
        return empty_summary(day)

    meal_calories = dict.fromkeys(Meal, 0.0)
    totals = {
        "protein": 0.0,
        "carbs": 0.0,
        "fat": 0.0,
        "fiber": 0.0,
        "sugar": 0.0,
        "sodium": 0.0,
        "water": 0.0,
    }
    for entry in entries:
        multiplier = entry.multiplier
        facts = entry.food_item.nutrition
        meal_calories[entry.meal] += facts.calories * multiplier
        totals["protein"] += facts.protein * multiplier
        totals["carbs"] += facts.carbs * multiplier
        totals["fat"] += facts.fat * multiplier
        totals["fiber"] += (facts.fiber or 0) * multiplier
        totals["sugar"] += (facts.sugar or 0) * multiplier
        totals["sodium"] += (facts.sodium or 0) * multiplier
        totals["water"] += (facts.water or 0) * multiplier

    breakdown = MealBreakdown(
        breakfast=round_whole(meal_calories[Meal.BREAKFAST]),
        lunch=round_whole(meal_calories[Meal.LUNCH]),
        dinner=round_whole(meal_calories[Meal.DINNER]),
        snack=round_whole(meal_calories[Meal.SNACK]),
    )
    return DailyNutritionSummary(
        date=day,
        total_calories=breakdown.total(),
        total_protein=round_tenth(totals["protein"]),
        total_carbs=round_tenth(totals["carbs"]),
        total_fat=round_tenth(totals["fat"]),
        total_fiber=round_tenth(totals["fiber"]),
        total_sugar=round_tenth(totals["sugar"]),
        total_sodium=round_tenth(totals["sodium"]),
        total_water=round_tenth(totals["water"]),
        entry_count=len(entries),
        meal_breakdown=breakdown,
    )
