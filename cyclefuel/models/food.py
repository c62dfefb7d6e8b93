"""
Food catalog model and recommendation suggestion model.
"""
import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from cyclefuel.models.nutrients import NutrientProfile


class Food(BaseModel):
    """
    A catalog food. Nutrient values are per 100g.
    """
    id: str
    name: str
    category: str = ""
    nutrients: NutrientProfile = Field(default_factory=NutrientProfile)
    created_at: Optional[datetime] = None

    @property
    def iron(self) -> float:
        return self.nutrients.iron

    @property
    def protein(self) -> float:
        return self.nutrients.protein

    @property
    def carbs(self) -> float:
        return self.nutrients.carbs


class FoodSuggestion(BaseModel):
    """
    One recommendation emitted by a strategy. Never persisted; the
    tracking id links later feedback back to this suggestion.
    """
    food: Food
    reason: str
    detailed_explanation: str
    priority: float
    strategy: str
    tracking_id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def nutrients(self) -> NutrientProfile:
        return self.food.nutrients
