"""
Nutrient vocabulary and nutrient profile model.
"""
from enum import Enum
from typing import Any, Dict, Mapping
from pydantic import BaseModel, ConfigDict, Field


class Nutrient(str, Enum):
    """Closed set of tracked nutrients."""
    CALORIES = "calories"
    PROTEIN = "protein"
    CARBS = "carbs"
    FAT = "fat"
    FIBER = "fiber"
    IRON = "iron"
    CALCIUM = "calcium"
    MAGNESIUM = "magnesium"
    VITAMIN_C = "vitamin_c"
    VITAMIN_D = "vitamin_d"


NUTRIENT_UNITS = {
    Nutrient.CALORIES: "kcal",
    Nutrient.PROTEIN: "g",
    Nutrient.CARBS: "g",
    Nutrient.FAT: "g",
    Nutrient.FIBER: "g",
    Nutrient.IRON: "mg",
    Nutrient.CALCIUM: "mg",
    Nutrient.MAGNESIUM: "mg",
    Nutrient.VITAMIN_C: "mg",
    Nutrient.VITAMIN_D: "IU",
}


class NutrientProfile(BaseModel):
    """
    Amounts for every tracked nutrient. Used both for daily targets and
    for consumed actuals. Unknown keys are dropped on construction.
    Immutable; ``scaled`` and ``+`` return new profiles.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)
    fiber: float = Field(0.0, ge=0)
    iron: float = Field(0.0, ge=0)
    calcium: float = Field(0.0, ge=0)
    magnesium: float = Field(0.0, ge=0)
    vitamin_c: float = Field(0.0, ge=0, alias="vitaminC")
    vitamin_d: float = Field(0.0, ge=0, alias="vitaminD")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "NutrientProfile":
        """Build a profile from a loose mapping, treating None as zero."""
        return cls.model_validate({k: v for k, v in values.items() if v is not None})

    def get(self, nutrient: Nutrient) -> float:
        return getattr(self, nutrient.value)

    def scaled(self, factor: float) -> "NutrientProfile":
        return NutrientProfile(**{n.value: self.get(n) * factor for n in Nutrient})

    def __add__(self, other: "NutrientProfile") -> "NutrientProfile":
        return NutrientProfile(**{n.value: self.get(n) + other.get(n) for n in Nutrient})

    def as_dict(self) -> Dict[str, float]:
        return {n.value: self.get(n) for n in Nutrient}
