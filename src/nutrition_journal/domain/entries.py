"""Domain models for logged food entries."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum

from nutrition_journal.domain.errors import ValidationError

_logger = logging.getLogger(__name__)

MAX_REASONABLE_QUANTITY = 10
MAX_REASONABLE_CALORIES = 900
MAX_REASONABLE_PROTEIN_G = 100
MAX_REASONABLE_SODIUM_MG = 2000


class Meal(Enum):
    """Meal bucket an entry belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class NutritionFacts:
    """Nutrient values per 100 units of the food's serving unit."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    water: float | None = None


@dataclass(frozen=True)
class FoodItem:
    """A catalog food as it looked when it was logged."""

    id: str
    name: str
    category: str
    serving_size: float
    serving_unit: str
    nutrition: NutritionFacts


@dataclass(frozen=True)
class FoodEntry:
    """One logged consumption event."""

    id: str
    date: date
    timestamp: datetime
    food_item: FoodItem
    quantity: float
    meal: Meal
    notes: str | None = None

    @property
    def multiplier(self) -> float:
        """Ratio converting per-100-unit nutrition into consumed amounts."""
        return serving_multiplier(self.quantity, self.food_item.serving_size)

    @property
    def calories(self) -> float:
        return self.food_item.nutrition.calories * self.multiplier


def serving_multiplier(quantity: float, serving_size: float) -> float:
    """Return ``(quantity * serving_size) / 100``."""
    return (quantity * serving_size) / 100


def parse_day(value: date | str) -> date:
    """Parse an ISO calendar day, accepting ``date`` instances unchanged."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError([f"Invalid date format: {value!r}"]) from exc


def validate_food_item(item: FoodItem) -> None:
    """Reject a food item with missing fields or negative nutrients."""
    errors: list[str] = []
    if not item.name or not item.name.strip():
        errors.append("Food name is required")
    if not item.category:
        errors.append("Food category is required")
    if item.serving_size <= 0:
        errors.append("Serving size must be greater than 0")
    if not item.serving_unit or not item.serving_unit.strip():
        errors.append("Serving unit is required")

    facts = item.nutrition
    for label, value in (
        ("Calories", facts.calories),
        ("Protein", facts.protein),
        ("Carbohydrates", facts.carbs),
        ("Fat", facts.fat),
        ("Fiber", facts.fiber),
        ("Sugar", facts.sugar),
        ("Sodium", facts.sodium),
        ("Water", facts.water),
    ):
        if value is not None and value < 0:
            errors.append(f"{label} cannot be negative")
    if errors:
        raise ValidationError(errors)

    if facts.calories > MAX_REASONABLE_CALORIES:
        _logger.warning("Calories seem unusually high for %s", item.name)
    if facts.protein > MAX_REASONABLE_PROTEIN_G:
        _logger.warning("Protein content seems unusually high for %s", item.name)
    if facts.sodium and facts.sodium > MAX_REASONABLE_SODIUM_MG:
        _logger.warning("Sodium content is very high for %s", item.name)


def validate_entry(entry: FoodEntry, today: date | None = None) -> None:
    """Reject an entry that must not reach the store."""
    errors: list[str] = []
    if entry.food_item is None:
        errors.append("Food item is required")
    if entry.quantity is None or entry.quantity <= 0:
        errors.append("Quantity must be greater than 0")
    if not isinstance(entry.meal, Meal):
        errors.append("Invalid meal type")
    if not isinstance(entry.date, date):
        errors.append("Invalid date format")
    if errors:
        raise ValidationError(errors)

    validate_food_item(entry.food_item)

    if entry.quantity > MAX_REASONABLE_QUANTITY:
        _logger.warning("Quantity seems unusually high: %s servings", entry.quantity)
    current_day = today or datetime.now(tz=UTC).date()
    if entry.date > current_day:
        _logger.warning("Entry %s is dated in the future: %s", entry.id, entry.date)
