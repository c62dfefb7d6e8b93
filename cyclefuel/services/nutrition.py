"""
Daily nutrition aggregation and analysis.

Typical usage:
    actuals = aggregate_actuals(entries, foods_by_id)
    day = DailyNutrition(goals, actuals)
    day.deficient_nutrients(0.7)
"""
from enum import Enum
from typing import Dict, Iterable, List, Mapping

from aws_lambda_powertools import Logger
from pydantic import BaseModel

from cyclefuel.models.food import Food
from cyclefuel.models.log import DailyLogEntry
from cyclefuel.models.nutrients import Nutrient, NutrientProfile
from cyclefuel.services.constants import (
    DEFICIENCY_WARNING_RATIO,
    EXCESS_RATIO,
    MILD_DEFICIENCY_RATIO,
    SEVERE_DEFICIENCY_RATIO,
)

logger = Logger()

class DeficiencyLevel(str, Enum):
    SEVERE = "SEVERE"
    MODERATE = "MODERATE"
    MILD = "MILD"
    EXCESS = "EXCESS"

_LEVEL_ORDER = {
    DeficiencyLevel.SEVERE: 0,
    DeficiencyLevel.MODERATE: 1,
    DeficiencyLevel.MILD: 2,
    DeficiencyLevel.EXCESS: 3,
}

class NutrientStatus(BaseModel):
    nutrient: Nutrient
    actual: float
    target: float
    percentage: float
    level: DeficiencyLevel
    message: str

def aggregate_actuals(
    entries: Iterable[DailyLogEntry],
    foods: Mapping[str, Food]
) -> NutrientProfile:
    """
    Sum the nutrients of logged foods, scaling per-100g values by servings.

    Entries whose food is no longer in the catalog are skipped.
    """
    total = NutrientProfile()
    for entry in entries:
        food = foods.get(entry.food_id)
        if food is None:
            logger.warning("Logged food missing from catalog", extra={
                "entry_id": entry.id,
                "food_id": entry.food_id
            })
            continue
        total = total + food.nutrients.scaled(entry.servings)
    return total

def consumption_ratio(actual: float, target: float) -> float:
    """Actual over target. A zero target is treated as fully met."""
    if target <= 0:
        return 1.0
    return actual / target

class DailyNutrition:
    """One day's goals against one day's actuals."""

    def __init__(
        self,
        goals: NutrientProfile,
        actuals: NutrientProfile,
        warning_ratio: float = DEFICIENCY_WARNING_RATIO
    ):
        self.goals = goals
        self.actuals = actuals
        self.warning_ratio = warning_ratio

    def ratio(self, nutrient: Nutrient) -> float:
        return consumption_ratio(self.actuals.get(nutrient), self.goals.get(nutrient))

    def deficient_nutrients(self, ratio: float = None) -> List[str]:
        """
        Names of nutrients consumed below ``ratio`` of their target, in
        vocabulary order.
        """
        ratio = self.warning_ratio if ratio is None else ratio
        return [n.value for n in Nutrient if self.ratio(n) < ratio]

    def detect_deficiencies(self) -> List[NutrientStatus]:
        """
        Classify every nutrient with a target by how far it is from goal.

        Returns:
            Statuses for nutrients that are not on track, most severe first
        """
        statuses = []
        for nutrient in Nutrient:
            target = self.goals.get(nutrient)
            if target <= 0:
                continue
            actual = self.actuals.get(nutrient)
            pct = actual / target
            shown = f"{pct * 100:.0f}%"
            name = nutrient.value

            if pct < SEVERE_DEFICIENCY_RATIO:
                level = DeficiencyLevel.SEVERE
                message = f"Critical: Only {shown} of daily {name} target met. Immediate attention needed."
            elif pct < self.warning_ratio:
                level = DeficiencyLevel.MODERATE
                message = f"Warning: {shown} of daily {name} target met. Consider adding {name}-rich foods."
            elif pct < MILD_DEFICIENCY_RATIO:
                level = DeficiencyLevel.MILD
                message = f"{shown} of {name} target met. You're close to your goal!"
            elif pct > EXCESS_RATIO:
                level = DeficiencyLevel.EXCESS
                message = f"You've consumed {shown} of your {name} target. Consider reducing intake."
            else:
                continue

            statuses.append(NutrientStatus(
                nutrient=nutrient,
                actual=actual,
                target=target,
                percentage=pct,
                level=level,
                message=message
            ))

        return sorted(statuses, key=lambda s: _LEVEL_ORDER[s.level])

    def most_deficient(self, limit: int = 3) -> List[str]:
        return [
            s.nutrient.value for s in self.detect_deficiencies()
            if s.level in (DeficiencyLevel.SEVERE, DeficiencyLevel.MODERATE)
        ][:limit]

    def nutrition_score(self) -> int:
        """
        Average per-nutrient score from 0 to 100.

        90-110% of target scores 100, falling off linearly on both sides;
        anything over 150% scores a flat 40.
        """
        scores = []
        for nutrient in Nutrient:
            target = self.goals.get(nutrient)
            pct = self.actuals.get(nutrient) / target if target > 0 else 0
            if 0.9 <= pct <= 1.1:
                score = 100
            elif 0.7 <= pct < 0.9:
                score = 70 + (pct - 0.7) / 0.2 * 30
            elif 1.1 < pct <= 1.5:
                score = 100 - (pct - 1.1) / 0.4 * 30
            elif pct < 0.7:
                score = pct / 0.7 * 70
            else:
                score = 40
            scores.append(score)
        return int(round(sum(scores) / len(scores)))

    def goals_met(self) -> bool:
        return self.nutrition_score() >= 80

    def progress_message(self) -> str:
        score = self.nutrition_score()
        if score >= 90:
            return "Excellent work! You're meeting all your nutrition goals today."
        if score >= 75:
            return "Great job! You're on track with most of your nutrition goals."
        if score >= 60:
            return "You're making progress, but there's room for improvement in a few areas."
        return (
            "Let's focus on meeting your key nutrition targets today. "
            "Check your recommendations for helpful suggestions."
        )

    def summary(self) -> Dict[str, object]:
        return {
            "goals": self.goals.as_dict(),
            "actuals": self.actuals.as_dict(),
            "score": self.nutrition_score(),
            "deficiencies": [s.model_dump(mode="json") for s in self.detect_deficiencies()],
            "goals_met": self.goals_met(),
            "message": self.progress_message(),
            "most_deficient": self.most_deficient()
        }
