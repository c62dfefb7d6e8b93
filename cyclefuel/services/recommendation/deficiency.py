"""
Strategies that fill nutrient gaps.
"""
from typing import List

from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.food import Food, FoodSuggestion
from cyclefuel.services.constants import DEFAULT_IRON_TARGET
from cyclefuel.services.recommendation.base import (
    RecommendationContext,
    RecommendationStrategy,
    allowed_foods,
    top_by,
)

LUTEAL_PHASES = (CyclePhase.EARLY_LUTEAL, CyclePhase.LATE_LUTEAL)

class IronDeficiencyStrategy(RecommendationStrategy):
    """Iron-rich foods when iron is below target, boosted during menstruation."""

    BASE_PRIORITY = 80
    MENSTRUAL_PRIORITY = 95
    MIN_IRON = 2.0
    LIMIT = 3

    def name(self) -> str:
        return "IronDeficiencyStrategy"

    def priority(self) -> int:
        return self.BASE_PRIORITY

    def supports(self, context: RecommendationContext) -> bool:
        return "iron" in context.deficient_nutrients

    def _explain(self, context: RecommendationContext, food: Food, gap: float) -> str:
        parts = []
        if context.phase == CyclePhase.MENSTRUAL:
            parts.append(
                f"You are on day {context.day_in_cycle} of your period, "
                "and your body is actively losing iron."
            )
        parts.append(f"{food.name} contains {food.iron:.1f}mg of iron per 100g.")
        if context.user.is_plant_based:
            parts.append(
                "As a plant-based (non-heme) iron source, pair it with vitamin C "
                "rich foods like citrus or peppers to improve absorption."
            )
        else:
            parts.append(
                "Heme iron from animal sources is absorbed more readily than "
                "plant-based iron."
            )
        parts.append(f"You still need {gap:.1f}mg of iron today to meet your target.")
        return " ".join(parts)

    async def recommend(self, context: RecommendationContext, foods: List[Food]) -> List[FoodSuggestion]:
        target = context.target_nutrition.iron or DEFAULT_IRON_TARGET
        gap = max(target - context.current_nutrition.iron, 0.0)
        priority = (
            self.MENSTRUAL_PRIORITY if context.phase == CyclePhase.MENSTRUAL
            else self.BASE_PRIORITY
        )

        return [
            FoodSuggestion(
                food=food,
                reason=f"High in iron ({food.iron:.1f}mg per 100g)",
                detailed_explanation=self._explain(context, food, gap),
                priority=priority,
                strategy=self.name()
            )
            for food in top_by(allowed_foods(context, foods), "iron", self.MIN_IRON, self.LIMIT)
        ]

class ProteinDeficiencyStrategy(RecommendationStrategy):
    """Protein-dense foods when protein intake lags its target."""

    PRIORITY = 85
    MIN_PROTEIN = 15
    LIMIT = 3

    def name(self) -> str:
        return "ProteinDeficiencyStrategy"

    def priority(self) -> int:
        return self.PRIORITY

    def supports(self, context: RecommendationContext) -> bool:
        target = context.target_nutrition.protein
        if target <= 0:
            return False
        return context.current_nutrition.protein / target < context.deficiency_ratio

    async def recommend(self, context: RecommendationContext, foods: List[Food]) -> List[FoodSuggestion]:
        target = context.target_nutrition.protein
        gap = max(target - context.current_nutrition.protein, 0.0)
        suggestions = []

        for food in top_by(allowed_foods(context, foods), "protein", self.MIN_PROTEIN, self.LIMIT):
            explanation = ""
            if context.phase in LUTEAL_PHASES:
                explanation = (
                    f"During the luteal phase, your protein needs increase to {target:.0f}g "
                    "per day for optimal recovery and to combat insulin resistance. "
                )
            explanation += (
                f"{food.name} provides {food.protein:.1f}g of protein per 100g. "
                f"You need {gap:.1f}g more protein today."
            )
            suggestions.append(FoodSuggestion(
                food=food,
                reason=f"High-quality protein source ({food.protein:.1f}g per 100g)",
                detailed_explanation=explanation,
                priority=self.PRIORITY,
                strategy=self.name()
            ))

        return suggestions
