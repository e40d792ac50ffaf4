"""Trend analysis over a window of daily summaries."""

import math
from collections.abc import Sequence

from nutrition_journal.domain.goals import NutritionGoals
from nutrition_journal.domain.summary import DailyNutritionSummary
from nutrition_journal.domain.trends import (
    ConsistencyReport,
    DailyTrend,
    GoalsMet,
    NutrientDeficiency,
    TrendAnalysis,
    TrendAverages,
)
from nutrition_journal.services.goals import is_goal_met
from nutrition_journal.services.summary import round_tenth, round_whole

CALORIE_TOLERANCE = 0.10
PROTEIN_TOLERANCE = 0.10
CARB_TOLERANCE = 0.15
FAT_TOLERANCE = 0.15

PROTEIN_BAND_LOW = 0.8
PROTEIN_BAND_HIGH = 1.2
MIN_CONSISTENCY_DAYS = 2
MIN_GOAL_MET_RATIO = 0.7

PROTEIN_DEFICIENCY_RATIO = 0.8
FIBER_DEFICIENCY_RATIO = 0.6
CALORIE_DEFICIENCY_RATIO = 0.7
MILD_PERCENT = 80
MODERATE_PERCENT = 60


def analyze_trends(
    summaries: Sequence[DailyNutritionSummary], goals: NutritionGoals
) -> TrendAnalysis:
    """Fold an ordered window of daily summaries into trends and scores."""
    trends = [
        DailyTrend(
            date=summary.date,
            calories=summary.total_calories,
            protein=summary.total_protein,
            carbs=summary.total_carbs,
            fat=summary.total_fat,
            fiber=summary.total_fiber,
            goals_met=classify_day(summary, goals),
        )
        for summary in summaries
    ]
    return TrendAnalysis(
        trends=trends,
        averages=calculate_averages(summaries),
        consistency=calculate_consistency(summaries, goals),
        improvements=_improvements(trends),
    )


def classify_day(summary: DailyNutritionSummary, goals: NutritionGoals) -> GoalsMet:
    return GoalsMet(
        calories=is_goal_met(summary.total_calories, goals.calories, CALORIE_TOLERANCE),
        protein=is_goal_met(summary.total_protein, goals.protein, PROTEIN_TOLERANCE),
        carbs=is_goal_met(summary.total_carbs, goals.carbs, CARB_TOLERANCE),
        fat=is_goal_met(summary.total_fat, goals.fat, FAT_TOLERANCE),
    )


def calculate_averages(summaries: Sequence[DailyNutritionSummary]) -> TrendAverages:
    if not summaries:
        return TrendAverages()
    count = len(summaries)
    return TrendAverages(
        calories=round_whole(sum(s.total_calories for s in summaries) / count),
        protein=round_tenth(sum(s.total_protein for s in summaries) / count),
        carbs=round_tenth(sum(s.total_carbs for s in summaries) / count),
        fat=round_tenth(sum(s.total_fat for s in summaries) / count),
        fiber=round_tenth(sum(s.total_fiber for s in summaries) / count),
    )


def calculate_consistency(
    summaries: Sequence[DailyNutritionSummary], goals: NutritionGoals
) -> ConsistencyReport:
    """Score calorie stability and protein adherence across the window.

    Fewer than two days yields an all-zero report.
    """
    if len(summaries) < MIN_CONSISTENCY_DAYS:
        return ConsistencyReport()

    average_calories = calculate_averages(summaries).calories
    squared = [(s.total_calories - average_calories) ** 2 for s in summaries]
    calorie_variance = math.sqrt(sum(squared) / len(squared))

    protein_days = sum(
        1
        for s in summaries
        if goals.protein * PROTEIN_BAND_LOW
        <= s.total_protein
        <= goals.protein * PROTEIN_BAND_HIGH
    )
    protein_consistency = protein_days / len(summaries) * 100

    calorie_score = max(0.0, 100 - calorie_variance / goals.calories * 100)
    overall_score = (calorie_score + protein_consistency) / 2
    return ConsistencyReport(
        calorie_variance=round_whole(calorie_variance),
        protein_consistency=round_whole(protein_consistency),
        overall_score=round_whole(overall_score),
    )


def identify_deficiencies(
    summaries: Sequence[DailyNutritionSummary], goals: NutritionGoals
) -> list[NutrientDeficiency]:
    """Flag nutrients whose window average falls well short of the goal."""
    averages = calculate_averages(summaries)
    deficiencies: list[NutrientDeficiency] = []
    if averages.protein < goals.protein * PROTEIN_DEFICIENCY_RATIO:
        deficiencies.append(
            NutrientDeficiency(
                nutrient="Protein",
                current=averages.protein,
                recommended=goals.protein,
                deficit=round_tenth(goals.protein - averages.protein),
                severity=_severity(averages.protein, goals.protein),
                suggestions=[
                    "Include lean meats, fish, eggs, or legumes in each meal",
                    "Consider protein-rich snacks like Greek yogurt or nuts",
                    "Add protein powder to smoothies if needed",
                ],
            )
        )
    if averages.fiber < goals.fiber * FIBER_DEFICIENCY_RATIO:
        deficiencies.append(
            NutrientDeficiency(
                nutrient="Fiber",
                current=averages.fiber,
                recommended=goals.fiber,
                deficit=round_tenth(goals.fiber - averages.fiber),
                severity=_severity(averages.fiber, goals.fiber),
                suggestions=[
                    "Eat more fruits and vegetables",
                    "Choose whole grains over refined grains",
                    "Include beans and legumes in your meals",
                    "Add chia seeds or flaxseeds to yogurt or smoothies",
                ],
            )
        )
    if averages.calories < goals.calories * CALORIE_DEFICIENCY_RATIO:
        deficiencies.append(
            NutrientDeficiency(
                nutrient="Calories",
                current=averages.calories,
                recommended=goals.calories,
                deficit=round_tenth(goals.calories - averages.calories),
                severity="moderate",
                suggestions=[
                    "Consider adding healthy calorie-dense foods like nuts and "
                    "avocados",
                    "Eat more frequent, smaller meals",
                    "Include healthy fats like olive oil in cooking",
                ],
            )
        )
    return deficiencies


def _improvements(trends: list[DailyTrend]) -> list[str]:
    if not trends:
        return []
    days = len(trends)
    calorie_days = sum(1 for day in trends if day.goals_met.calories)
    protein_days = sum(1 for day in trends if day.goals_met.protein)
    suggestions: list[str] = []
    if calorie_days / days < MIN_GOAL_MET_RATIO:
        suggestions.append("Work on more consistent calorie intake throughout the week")
    if protein_days / days < MIN_GOAL_MET_RATIO:
        suggestions.append("Focus on meeting protein goals more consistently")
    return suggestions


def _severity(current: float, recommended: float) -> str:
    percentage = current / recommended * 100 if recommended > 0 else 0
    if percentage >= MILD_PERCENT:
        return "mild"
    if percentage >= MODERATE_PERCENT:
        return "moderate"
    return "severe"
