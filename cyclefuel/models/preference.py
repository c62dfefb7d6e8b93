"""
Learned per-food preference state.
"""
from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class FeedbackAction(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    SAVED = "SAVED"


class UserFoodPreference(BaseModel):
    """
    Counters and score for one (user, food) pair. Created lazily on the
    first event that touches the pair. ``version`` increases on every save
    and guards concurrent writers.
    """
    user_id: str
    food_id: str
    accept_count: int = Field(0, ge=0)
    reject_count: int = Field(0, ge=0)
    eat_count: int = Field(0, ge=0)
    recommend_count: int = Field(0, ge=0)
    acceptance_rate: float = Field(0.0, ge=0, le=1)
    preference_score: float = Field(0.5, ge=0, le=1)
    last_eaten_at: Optional[datetime] = None
    last_action: Optional[FeedbackAction] = None
    updated_at: Optional[datetime] = None
    version: int = 0
