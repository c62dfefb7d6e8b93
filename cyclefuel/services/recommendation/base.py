"""
Shared contract for recommendation strategies.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, Field

from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.food import Food, FoodSuggestion
from cyclefuel.models.nutrients import NutrientProfile
from cyclefuel.models.preference import UserFoodPreference
from cyclefuel.models.user import UserProfile
from cyclefuel.services.constants import DEFICIENCY_WARNING_RATIO

class RecommendationContext(BaseModel):
    """Everything a strategy may read to decide and score suggestions."""
    user: UserProfile
    phase: CyclePhase
    day_in_cycle: int = Field(..., ge=1)
    current_nutrition: NutrientProfile
    target_nutrition: NutrientProfile
    deficient_nutrients: List[str] = Field(default_factory=list)
    preferences: List[UserFoodPreference] = Field(default_factory=list)
    meal_type: Optional[str] = None
    deficiency_ratio: float = DEFICIENCY_WARNING_RATIO

class RecommendationStrategy(ABC):
    """
    One independent scorer. ``supports`` gates whether ``recommend`` runs;
    ``priority`` is the static weight used to order strategies.
    """

    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def priority(self) -> int:
        ...

    @abstractmethod
    def supports(self, context: RecommendationContext) -> bool:
        ...

    @abstractmethod
    async def recommend(
        self,
        context: RecommendationContext,
        foods: List[Food]
    ) -> List[FoodSuggestion]:
        ...

def allowed_foods(context: RecommendationContext, foods: List[Food]) -> List[Food]:
    """Drop foods whose name or category mentions one of the user's allergens."""
    allergens = [a.lower() for a in context.user.allergies if a]
    if not allergens:
        return list(foods)
    return [
        f for f in foods
        if not any(a in f.name.lower() or a in f.category.lower() for a in allergens)
    ]

def top_by(foods: List[Food], attr: str, minimum: float, limit: int) -> List[Food]:
    """Foods with ``attr`` strictly above ``minimum``, highest first."""
    matching = [f for f in foods if getattr(f.nutrients, attr) > minimum]
    matching.sort(key=lambda f: getattr(f.nutrients, attr), reverse=True)
    return matching[:limit]
