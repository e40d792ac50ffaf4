"""Goal analysis for a single day's summary."""

from nutrition_journal.domain.goals import (
    LimitProgress,
    LimitStatus,
    MacroBreakdown,
    MacroShare,
    MealDistribution,
    MealTiming,
    NutrientProgress,
    NutritionAnalysis,
    NutritionGoals,
    NutritionProgress,
)
from nutrition_journal.domain.summary import DailyNutritionSummary
from nutrition_journal.services.summary import round_tenth, round_whole

CALORIES_PER_GRAM_PROTEIN = 4
CALORIES_PER_GRAM_CARBS = 4
CALORIES_PER_GRAM_FAT = 9

IDEAL_MEAL_DISTRIBUTION = MealDistribution(breakfast=25, lunch=35, dinner=30, snack=10)

LOW_CALORIE_PERCENT = 80
HIGH_CALORIE_PERCENT = 110
VERY_LOW_CALORIE_PERCENT = 50
LOW_PROTEIN_PERCENT = 80
LOW_FIBER_PERCENT = 60
MAX_FAT_SHARE = 35
MIN_CARB_SHARE = 45

MIN_BREAKFAST_SHARE = 20
MIN_LUNCH_SHARE = 25
MAX_DINNER_SHARE = 40
MAX_SNACK_SHARE = 20


def analyze_goals(
    summary: DailyNutritionSummary, goals: NutritionGoals
) -> NutritionAnalysis:
    """Compare one day's summary with a goal profile."""
    progress = NutritionProgress(
        calories=calculate_progress(summary.total_calories, goals.calories),
        protein=calculate_progress(summary.total_protein, goals.protein),
        carbs=calculate_progress(summary.total_carbs, goals.carbs),
        fat=calculate_progress(summary.total_fat, goals.fat),
        fiber=calculate_progress(summary.total_fiber, goals.fiber),
        water=calculate_progress(summary.total_water, goals.water),
        sugar=calculate_limit_progress(summary.total_sugar, goals.sugar),
        sodium=calculate_limit_progress(summary.total_sodium, goals.sodium),
    )
    breakdown = macro_breakdown(summary)
    return NutritionAnalysis(
        summary=summary,
        goals=goals,
        progress=progress,
        macro_breakdown=breakdown,
        recommendations=_recommendations(progress, breakdown),
        warnings=_warnings(progress),
    )


def calculate_progress(current: float, target: float) -> NutrientProgress:
    percentage = round_whole(current / target * 100) if target > 0 else 0
    return NutrientProgress(
        current=round_tenth(current),
        target=target,
        percentage=percentage,
        remaining=round_tenth(max(0.0, target - current)),
    )


def calculate_limit_progress(current: float, limit: float) -> LimitProgress:
    """Classify intake against a limit using an inclusive 80%..110% band."""
    percentage = round_whole(current / limit * 100) if limit > 0 else 0
    # Compared in tenths so the band edges are not lost to float error.
    if current * 10 < limit * 8:
        status = LimitStatus.UNDER
    elif current * 10 > limit * 11:
        status = LimitStatus.OVER
    else:
        status = LimitStatus.MET
    return LimitProgress(
        current=round_tenth(current),
        target=limit,
        percentage=percentage,
        status=status,
    )


def macro_breakdown(summary: DailyNutritionSummary) -> MacroBreakdown:
    """Split macro calories independently of the logged calorie total."""
    protein_calories = summary.total_protein * CALORIES_PER_GRAM_PROTEIN
    carb_calories = summary.total_carbs * CALORIES_PER_GRAM_CARBS
    fat_calories = summary.total_fat * CALORIES_PER_GRAM_FAT
    total = protein_calories + carb_calories + fat_calories

    def share(grams: float, calories: float) -> MacroShare:
        return MacroShare(
            grams=grams,
            calories=round_whole(calories),
            percentage=round_whole(calories / total * 100) if total > 0 else 0,
        )

    return MacroBreakdown(
        protein=share(summary.total_protein, protein_calories),
        carbs=share(summary.total_carbs, carb_calories),
        fat=share(summary.total_fat, fat_calories),
    )


def is_goal_met(actual: float, target: float, tolerance: float) -> bool:
    """Return True when *actual* lies within ``target * (1 ± tolerance)``."""
    return target * (1 - tolerance) <= actual <= target * (1 + tolerance)


def meal_timing(summary: DailyNutritionSummary) -> MealTiming:
    """Compare the day's meal distribution with the ideal split."""
    meals = summary.meal_breakdown
    total = meals.total()

    def percent(calories: float) -> int:
        return round_whole(calories / total * 100) if total > 0 else 0

    actual = MealDistribution(
        breakfast=percent(meals.breakfast),
        lunch=percent(meals.lunch),
        dinner=percent(meals.dinner),
        snack=percent(meals.snack),
    )
    recommendations: list[str] = []
    if actual.breakfast < MIN_BREAKFAST_SHARE:
        recommendations.append(
            "Consider eating a larger breakfast to boost morning energy"
        )
    if actual.dinner > MAX_DINNER_SHARE:
        recommendations.append(
            "Try to eat lighter dinners and redistribute calories to earlier meals"
        )
    if actual.snack > MAX_SNACK_SHARE:
        recommendations.append(
            "Consider reducing snack calories and adding them to main meals"
        )
    if actual.lunch < MIN_LUNCH_SHARE:
        recommendations.append(
            "A more substantial lunch can help maintain energy throughout the day"
        )
    return MealTiming(
        ideal=IDEAL_MEAL_DISTRIBUTION,
        actual=actual,
        recommendations=recommendations,
    )


def _recommendations(
    progress: NutritionProgress, breakdown: MacroBreakdown
) -> list[str]:
    recommendations: list[str] = []
    if progress.calories.percentage < LOW_CALORIE_PERCENT:
        recommendations.append(
            "Consider adding nutrient-dense, higher-calorie foods to meet your "
            "energy needs"
        )
    elif progress.calories.percentage > HIGH_CALORIE_PERCENT:
        recommendations.append(
            "Consider reducing portion sizes or choosing lower-calorie alternatives"
        )
    if progress.protein.percentage < LOW_PROTEIN_PERCENT:
        recommendations.append(
            "Include more protein-rich foods like lean meats, fish, eggs, or legumes"
        )
    if progress.fiber.percentage < LOW_FIBER_PERCENT:
        recommendations.append(
            "Increase fiber intake with more fruits, vegetables, and whole grains"
        )
    if breakdown.fat.percentage > MAX_FAT_SHARE:
        recommendations.append(
            "Consider reducing high-fat foods and balancing with more carbs and "
            "protein"
        )
    if breakdown.carbs.percentage < MIN_CARB_SHARE:
        recommendations.append(
            "Include more complex carbohydrates for sustained energy"
        )
    return recommendations


def _warnings(progress: NutritionProgress) -> list[str]:
    warnings: list[str] = []
    if progress.calories.percentage < VERY_LOW_CALORIE_PERCENT:
        warnings.append(
            "Very low calorie intake - consider consulting a healthcare provider"
        )
    if progress.sodium.status is LimitStatus.OVER:
        warnings.append("High sodium intake - limit processed foods and added salt")
    if progress.sugar.status is LimitStatus.OVER:
        warnings.append("High sugar intake - reduce sugary drinks and processed foods")
    return warnings
