"""
Strategy that resurfaces foods the user has responded well to.
"""
from typing import List

from cyclefuel.models.food import Food, FoodSuggestion
from cyclefuel.services.constants import MIN_ACCEPTANCE_RATE
from cyclefuel.services.recommendation.base import (
    RecommendationContext,
    RecommendationStrategy,
    allowed_foods,
)

class PersonalPreferenceStrategy(RecommendationStrategy):
    BASE_PRIORITY = 90
    SCORE_WEIGHT = 5
    LIMIT = 5

    def __init__(self, min_acceptance_rate: float = MIN_ACCEPTANCE_RATE):
        self.min_acceptance_rate = min_acceptance_rate

    def name(self) -> str:
        return "PersonalPreferenceStrategy"

    def priority(self) -> int:
        return self.BASE_PRIORITY

    def supports(self, context: RecommendationContext) -> bool:
        return len(context.preferences) > 0

    async def recommend(self, context: RecommendationContext, foods: List[Food]) -> List[FoodSuggestion]:
        """
        Join the user's best-liked foods against the candidate foods.

        Preferences below the minimum acceptance rate are ignored; a
        preferred food absent from the candidates is skipped.
        """
        catalog = {f.id: f for f in allowed_foods(context, foods)}
        liked = sorted(
            (p for p in context.preferences if p.acceptance_rate >= self.min_acceptance_rate),
            key=lambda p: p.preference_score,
            reverse=True
        )[:self.LIMIT]

        suggestions = []
        for pref in liked:
            food = catalog.get(pref.food_id)
            if food is None:
                continue
            acceptance = round(pref.acceptance_rate * 100)
            suggestions.append(FoodSuggestion(
                food=food,
                reason=f"You love this ({acceptance}% acceptance)",
                detailed_explanation=(
                    f"You've accepted {food.name} {acceptance}% of the times we suggested "
                    f"it and eaten it {pref.eat_count} times."
                ),
                priority=self.BASE_PRIORITY + pref.preference_score * self.SCORE_WEIGHT,
                strategy=self.name()
            ))
        return suggestions
