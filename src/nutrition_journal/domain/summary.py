"""Domain models for daily nutrition summaries."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class MealBreakdown:
    """Calories per meal bucket."""

    breakfast: float = 0
    lunch: float = 0
    dinner: float = 0
    snack: float = 0

    def total(self) -> float:
        return self.breakfast + self.lunch + self.dinner + self.snack


@dataclass(frozen=True)
class DailyNutritionSummary:
    """Aggregated nutrient totals for one calendar day."""

    date: date
    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fat: float = 0
    total_fiber: float = 0
    total_sugar: float = 0
    total_sodium: float = 0
    total_water: float = 0
    entry_count: int = 0
    meal_breakdown: MealBreakdown = field(default_factory=MealBreakdown)


def empty_summary(day: date) -> DailyNutritionSummary:
    """Return the all-zero summary for a day."""
    return DailyNutritionSummary(date=day)
