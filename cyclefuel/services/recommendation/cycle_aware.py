"""
Phase-aligned macronutrient strategy. Always applicable.
"""
from typing import List

from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.food import Food, FoodSuggestion
from cyclefuel.services.constants import PHASE_GUIDANCE
from cyclefuel.services.recommendation.base import (
    RecommendationContext,
    RecommendationStrategy,
    allowed_foods,
    top_by,
)

class CycleAwareStrategy(RecommendationStrategy):
    PRIORITY = 70
    MIN_AMOUNT = 10
    LIMIT = 2

    def name(self) -> str:
        return "CycleAwareStrategy"

    def priority(self) -> int:
        return self.PRIORITY

    def supports(self, context: RecommendationContext) -> bool:
        return True

    @staticmethod
    def focus_nutrient(phase: CyclePhase) -> str:
        # insulin sensitivity peaks in the follicular phase
        return "carbs" if phase == CyclePhase.FOLLICULAR else "protein"

    async def recommend(self, context: RecommendationContext, foods: List[Food]) -> List[FoodSuggestion]:
        focus = self.focus_nutrient(context.phase)
        guidance = PHASE_GUIDANCE[context.phase]
        suggestions = []

        for food in top_by(allowed_foods(context, foods), focus, self.MIN_AMOUNT, self.LIMIT):
            amount = getattr(food.nutrients, focus)
            suggestions.append(FoodSuggestion(
                food=food,
                reason=f"Optimized for {context.phase.value} phase",
                detailed_explanation=(
                    f"{guidance}. {food.name} is an excellent choice with "
                    f"{amount:.1f}g of {focus} per 100g."
                ),
                priority=self.PRIORITY,
                strategy=self.name()
            ))

        return suggestions
