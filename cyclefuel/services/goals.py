"""
Phase-aware daily nutrition targets.

Typical usage:
    goals = compute_goals(65, "MODERATELY_ACTIVE", CyclePhase.MENSTRUAL)
    goals.calories  # 2418
"""
import math
from typing import Optional, Union

from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.nutrients import NutrientProfile
from cyclefuel.models.user import ActivityLevel, UserProfile
from cyclefuel.services.constants import (
    ACTIVITY_MULTIPLIERS,
    BASE_CALORIES_PER_KG,
    CALCIUM_TARGET,
    DEFAULT_ACTIVITY_LEVEL,
    DEFICIENCY_WARNING_RATIO,
    FIBER_PER_KG,
    HEALTH_CONDITION_THRESHOLD,
    HIGH_ACTIVITY_THRESHOLD,
    MICRONUTRIENT_BASELINES,
    PHASE_CALORIE_MULTIPLIERS,
    PHASE_MACRO_RATIOS,
    PHASE_NUTRIENT_MULTIPLIERS,
    SENIOR_AGE,
    VITAMIN_D_TARGET,
)
from cyclefuel.services.exceptions import InvalidInputError

def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (22.5 -> 23)."""
    return int(math.floor(value + 0.5))

def activity_multiplier(activity_level: Optional[Union[str, ActivityLevel]]) -> float:
    """
    Resolve an activity level to its calorie multiplier.

    Unknown or missing levels fall back to moderately active, so legacy
    values like "MODERATE" resolve to 1.55.
    """
    try:
        level = ActivityLevel(activity_level)
    except ValueError:
        level = DEFAULT_ACTIVITY_LEVEL
    return ACTIVITY_MULTIPLIERS[level]

def compute_goals(
    weight_kg: float,
    activity_level: Optional[Union[str, ActivityLevel]],
    phase: CyclePhase
) -> NutrientProfile:
    """
    Compute daily nutrient targets for a body weight, activity level and
    cycle phase.

    Args:
        weight_kg: Body weight in kilograms, must be positive
        activity_level: ActivityLevel value, unknown values fall back to
            moderately active
        phase: Current cycle phase

    Returns:
        NutrientProfile of rounded daily targets

    Raises:
        InvalidInputError: If weight is not positive

    Example:
        >>> goals = compute_goals(65, "MODERATE", CyclePhase.MENSTRUAL)
        >>> goals.calories, goals.protein, goals.iron
        (2418.0, 78.0, 23.0)
    """
    if weight_kg is None or weight_kg <= 0:
        raise InvalidInputError(f"Weight must be positive, got {weight_kg}")

    phase = CyclePhase(phase)
    macros = PHASE_MACRO_RATIOS[phase]
    micro = PHASE_NUTRIENT_MULTIPLIERS.get(phase, {})

    calories = (
        weight_kg * BASE_CALORIES_PER_KG
        * activity_multiplier(activity_level)
        * PHASE_CALORIE_MULTIPLIERS[phase]
    )

    return NutrientProfile(
        calories=round_half_up(calories),
        protein=round_half_up(weight_kg * macros["protein"]),
        carbs=round_half_up(weight_kg * macros["carbs"]),
        fat=round_half_up(weight_kg * macros["fat"]),
        fiber=round_half_up(weight_kg * FIBER_PER_KG),
        iron=round_half_up(MICRONUTRIENT_BASELINES["iron"] * micro.get("iron", 1.0)),
        magnesium=round_half_up(
            MICRONUTRIENT_BASELINES["magnesium"] * micro.get("magnesium", 1.0)
        ),
        vitamin_c=round_half_up(
            MICRONUTRIENT_BASELINES["vitamin_c"] * micro.get("vitamin_c", 1.0)
        ),
        calcium=CALCIUM_TARGET,
        vitamin_d=VITAMIN_D_TARGET
    )

def deficiency_threshold(
    profile: Optional[UserProfile],
    default: float = DEFICIENCY_WARNING_RATIO
) -> float:
    """
    User-specific ratio below which a nutrient counts as deficient.

    Highly active users and users over 50 are flagged earlier, users with
    a health condition earlier still.
    """
    if profile is None:
        return default
    if profile.activity_level in (ActivityLevel.VERY_ACTIVE, ActivityLevel.EXTREMELY_ACTIVE):
        return HIGH_ACTIVITY_THRESHOLD
    if profile.health_conditions:
        return HEALTH_CONDITION_THRESHOLD
    if profile.age and profile.age > SENIOR_AGE:
        return HIGH_ACTIVITY_THRESHOLD
    return default
