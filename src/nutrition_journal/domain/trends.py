"""Domain models for multi-day trend analysis."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class GoalsMet:
    """Which goals a day landed inside the tolerance band for."""

    calories: bool
    protein: bool
    carbs: bool
    fat: bool


@dataclass(frozen=True)
class DailyTrend:
    """One day's totals with goal flags."""

    date: date
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    goals_met: GoalsMet


@dataclass(frozen=True)
class TrendAverages:
    """Window averages."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0


@dataclass(frozen=True)
class ConsistencyReport:
    """How stable intake was across the window."""

    calorie_variance: int = 0
    protein_consistency: int = 0
    overall_score: int = 0


@dataclass(frozen=True)
class TrendAnalysis:
    """Result of folding a window of daily summaries."""

    trends: list[DailyTrend]
    averages: TrendAverages
    consistency: ConsistencyReport
    improvements: list[str]


@dataclass(frozen=True)
class NutrientDeficiency:
    """A nutrient whose window average falls short of its goal."""

    nutrient: str
    current: float
    recommended: float
    deficit: float
    severity: str
    suggestions: list[str]
