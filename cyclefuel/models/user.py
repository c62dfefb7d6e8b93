"""
User profile model definition.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class ActivityLevel(str, Enum):
    SEDENTARY = "SEDENTARY"
    LIGHTLY_ACTIVE = "LIGHTLY_ACTIVE"
    MODERATELY_ACTIVE = "MODERATELY_ACTIVE"
    VERY_ACTIVE = "VERY_ACTIVE"
    EXTREMELY_ACTIVE = "EXTREMELY_ACTIVE"


class UserProfile(BaseModel):
    """
    Body and lifestyle data used to personalize goals and suggestions.
    Any of the body fields may be missing for a freshly registered user.
    """
    user_id: str
    name: Optional[str] = None
    weight: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    age: Optional[int] = Field(None, ge=0, le=120)
    activity_level: Optional[str] = None
    dietary_restrictions: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    health_conditions: List[str] = Field(default_factory=list)

    @property
    def is_plant_based(self) -> bool:
        restrictions = {r.lower() for r in self.dietary_restrictions}
        return bool(restrictions & {"vegetarian", "vegan"})
