"""Domain models for nutrition goals and goal analysis."""

import logging
from dataclasses import dataclass
from enum import Enum

from nutrition_journal.domain.errors import ValidationError
from nutrition_journal.domain.summary import DailyNutritionSummary

_logger = logging.getLogger(__name__)

DEFAULT_FIBER_G = 25
DEFAULT_SUGAR_G = 50
DEFAULT_SODIUM_MG = 2300
DEFAULT_WATER_ML = 2000

MIN_USUAL_CALORIES = 1200
MAX_USUAL_CALORIES = 4000
MAX_USUAL_PROTEIN_G = 300
MAX_USUAL_SODIUM_MG = 3000


@dataclass(frozen=True)
class NutritionGoals:
    """Daily targets and limits; optional nutrients fall back to defaults."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float = DEFAULT_FIBER_G
    sugar: float = DEFAULT_SUGAR_G
    sodium: float = DEFAULT_SODIUM_MG
    water: float = DEFAULT_WATER_ML


class LimitStatus(Enum):
    """Where an intake sits relative to a limit band."""

    UNDER = "under"
    MET = "met"
    OVER = "over"


@dataclass(frozen=True)
class NutrientProgress:
    """Progress towards a target."""

    current: float
    target: float
    percentage: int
    remaining: float


@dataclass(frozen=True)
class LimitProgress:
    """Intake measured against a limit."""

    current: float
    target: float
    percentage: int
    status: LimitStatus


@dataclass(frozen=True)
class NutritionProgress:
    """Per-nutrient progress for one day."""

    calories: NutrientProgress
    protein: NutrientProgress
    carbs: NutrientProgress
    fat: NutrientProgress
    fiber: NutrientProgress
    water: NutrientProgress
    sugar: LimitProgress
    sodium: LimitProgress


@dataclass(frozen=True)
class MacroShare:
    """One macronutrient's contribution to macro calories."""

    grams: float
    calories: int
    percentage: int


@dataclass(frozen=True)
class MacroBreakdown:
    """Calories from protein, carbs and fat."""

    protein: MacroShare
    carbs: MacroShare
    fat: MacroShare


@dataclass(frozen=True)
class NutritionAnalysis:
    """Goal analysis of one day's summary."""

    summary: DailyNutritionSummary
    goals: NutritionGoals
    progress: NutritionProgress
    macro_breakdown: MacroBreakdown
    recommendations: list[str]
    warnings: list[str]


@dataclass(frozen=True)
class MealDistribution:
    """Percentage of calories per meal bucket."""

    breakfast: int
    lunch: int
    dinner: int
    snack: int


@dataclass(frozen=True)
class MealTiming:
    """Actual meal distribution against the ideal split."""

    ideal: MealDistribution
    actual: MealDistribution
    recommendations: list[str]


def goals_from_record(record: dict[str, object]) -> NutritionGoals:
    """Build goals from a partial record, applying defaults first."""
    known = {
        key: float(value)  # type: ignore[arg-type]
        for key, value in record.items()
        if key in NutritionGoals.__dataclass_fields__ and value is not None
    }
    required = ("calories", "protein", "carbs", "fat")
    missing = [key for key in required if key not in known]
    if missing:
        raise ValidationError([f"Missing goal: {key}" for key in missing])
    goals = NutritionGoals(**known)
    validate_goals(goals)
    return goals


def validate_goals(goals: NutritionGoals) -> None:
    """Reject goals with non-positive required targets."""
    errors: list[str] = []
    if goals.calories <= 0:
        errors.append("Daily calories must be greater than 0")
    if goals.protein <= 0:
        errors.append("Protein goal must be greater than 0")
    if goals.carbs <= 0:
        errors.append("Carbohydrate goal must be greater than 0")
    if goals.fat <= 0:
        errors.append("Fat goal must be greater than 0")
    if errors:
        raise ValidationError(errors)

    if goals.calories < MIN_USUAL_CALORIES or goals.calories > MAX_USUAL_CALORIES:
        _logger.warning("Calorie goal seems unusual: %s", goals.calories)
    if goals.protein > MAX_USUAL_PROTEIN_G:
        _logger.warning("Protein goal seems very high: %s", goals.protein)
    if goals.sodium > MAX_USUAL_SODIUM_MG:
        _logger.warning("Sodium limit is higher than recommended: %s", goals.sodium)
