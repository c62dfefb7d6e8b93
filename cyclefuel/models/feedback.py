"""
Recommendation feedback models.
"""
from enum import Enum
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from cyclefuel.models.preference import FeedbackAction


class FeedbackReason(str, Enum):
    DONT_LIKE_TASTE = "dont_like_taste"
    TOO_EXPENSIVE = "too_expensive"
    NOT_AVAILABLE = "not_available"
    ALLERGIC = "allergic"
    TOO_COMPLEX = "too_complex"
    ALREADY_ATE = "already_ate"
    OTHER = "other"


class FeedbackRecord(BaseModel):
    """Append-only record of a user's reaction to one suggestion."""
    user_id: str
    tracking_id: str
    food_id: str
    action: FeedbackAction
    reason: Optional[FeedbackReason] = None
    created_at: datetime


class FeedbackAnalysis(BaseModel):
    """Aggregate view over a user's recent feedback."""
    total_feedback: int
    acceptance_rate: float
    top_rejection_reasons: List[Dict[str, object]] = Field(default_factory=list)
    most_accepted_foods: List[Dict[str, object]] = Field(default_factory=list)
    least_accepted_foods: List[Dict[str, object]] = Field(default_factory=list)
    improvement_suggestions: List[str] = Field(default_factory=list)
