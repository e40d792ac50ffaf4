"""Energy expenditure and hydration estimates for setting goals."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from nutrition_journal.services.summary import round_whole

Sex = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
Intensity = Literal["low", "moderate", "high"]

# Revised Harris-Benedict coefficients: (base, per kg, per cm, per year).
BMR_COEFFICIENTS: dict[str, tuple[float, float, float, float]] = {
    "male": (88.362, 13.397, 4.799, 5.677),
    "female": (447.593, 9.247, 3.098, 4.33),
}

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

MET_VALUES: dict[str, dict[str, float]] = {
    "walking": {"low": 3.0, "moderate": 4.0, "high": 5.0},
    "running": {"low": 6.0, "moderate": 8.0, "high": 11.0},
    "cycling": {"low": 4.0, "moderate": 6.0, "high": 10.0},
    "swimming": {"low": 4.0, "moderate": 6.0, "high": 10.0},
    "strength_training": {"low": 3.0, "moderate": 5.0, "high": 6.0},
    "yoga": {"low": 2.5, "moderate": 3.0, "high": 4.0},
}
DEFAULT_MET = 3.0
DEFAULT_WEIGHT_KG = 70

WATER_ML_PER_KG = 35
HYDRATION_ACTIVITY_BONUS_ML: dict[str, int] = {"low": 0, "moderate": 500, "high": 1000}
HOT_WEATHER_BONUS_ML = 500


@dataclass(frozen=True)
class Activity:
    """One exercise session."""

    activity: str
    duration_minutes: float
    intensity: Intensity


@dataclass(frozen=True)
class HydrationNeeds:
    """Daily water estimate in millilitres."""

    base_water: int
    activity_bonus: int
    temperature_bonus: int
    total_needed: int
    recommendations: list[str]


def calculate_bmr(weight_kg: float, height_cm: float, age: float, sex: Sex) -> float:
    """Basal metabolic rate in kcal/day."""
    base, per_kg, per_cm, per_year = BMR_COEFFICIENTS[sex]
    return base + per_kg * weight_kg + per_cm * height_cm - per_year * age


def calculate_tdee(bmr: float, activity_level: ActivityLevel) -> int:
    """Total daily energy expenditure, rounded to whole kcal."""
    return round_whole(bmr * ACTIVITY_MULTIPLIERS[activity_level])


def calculate_calories_burned(
    activities: Iterable[Activity], weight_kg: float = DEFAULT_WEIGHT_KG
) -> float:
    """Sum of MET x weight x hours; unknown activities count as light effort."""
    total = 0.0
    for session in activities:
        met = MET_VALUES.get(session.activity, {}).get(session.intensity, DEFAULT_MET)
        total += met * weight_kg * (session.duration_minutes / 60)
    return total


def calculate_hydration_needs(
    weight_kg: float,
    activity_level: Intensity,
    temperature: Literal["normal", "hot"] = "normal",
) -> HydrationNeeds:
    base_water = weight_kg * WATER_ML_PER_KG
    activity_bonus = HYDRATION_ACTIVITY_BONUS_ML[activity_level]
    temperature_bonus = HOT_WEATHER_BONUS_ML if temperature == "hot" else 0

    recommendations = [
        "Start your day with a glass of water",
        "Drink water before, during, and after exercise",
        "Keep a water bottle nearby as a reminder",
    ]
    if activity_level == "high":
        recommendations.append(
            "Consider electrolyte replacement during intense exercise"
        )
    if temperature == "hot":
        recommendations.append("Increase water intake in hot weather")

    return HydrationNeeds(
        base_water=round_whole(base_water),
        activity_bonus=activity_bonus,
        temperature_bonus=temperature_bonus,
        total_needed=round_whole(base_water + activity_bonus + temperature_bonus),
        recommendations=recommendations,
    )
