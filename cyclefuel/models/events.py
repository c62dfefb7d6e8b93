"""
Domain events exchanged over the in-process event bus.

Events are immutable facts. Each subclass pins its ``event_type`` so
subscribers are keyed by type, never by payload inspection.
"""
import uuid
from enum import Enum
from datetime import datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.feedback import FeedbackReason
from cyclefuel.models.nutrients import NutrientProfile
from cyclefuel.models.preference import FeedbackAction


class EventType(str, Enum):
    FOOD_LOGGED = "food.logged"
    RECOMMENDATION_SHOWN = "recommendation.shown"
    RECOMMENDATION_FEEDBACK = "recommendation.feedback"
    ACHIEVEMENT_UNLOCKED = "achievement.unlocked"
    CYCLE_PHASE_CHANGED = "cycle.phase_changed"
    GOAL_REACHED = "goal.reached"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DomainEvent(BaseModel):
    """Base event carrying identity, timestamp and the owning user."""
    model_config = ConfigDict(frozen=True)

    event_type: EventType
    user_id: str
    event_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    occurred_at: datetime = Field(default_factory=_utcnow)

    @field_validator("occurred_at")
    @classmethod
    def require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware")
        return value


class FoodLogged(DomainEvent):
    event_type: Literal[EventType.FOOD_LOGGED] = EventType.FOOD_LOGGED
    food_id: str
    food_name: str
    servings: float = 1.0
    meal_type: Optional[str] = None
    nutrients: NutrientProfile = Field(default_factory=NutrientProfile)


class RecommendationShown(DomainEvent):
    event_type: Literal[EventType.RECOMMENDATION_SHOWN] = EventType.RECOMMENDATION_SHOWN
    tracking_id: str
    food_id: str
    strategy: str
    priority: float


class RecommendationFeedback(DomainEvent):
    event_type: Literal[EventType.RECOMMENDATION_FEEDBACK] = EventType.RECOMMENDATION_FEEDBACK
    tracking_id: str
    food_id: str
    action: FeedbackAction
    reason: Optional[FeedbackReason] = None


class AchievementUnlocked(DomainEvent):
    event_type: Literal[EventType.ACHIEVEMENT_UNLOCKED] = EventType.ACHIEVEMENT_UNLOCKED
    achievement_id: str
    name: str
    category: str
    rarity: str
    xp_earned: int


class CyclePhaseChanged(DomainEvent):
    event_type: Literal[EventType.CYCLE_PHASE_CHANGED] = EventType.CYCLE_PHASE_CHANGED
    previous_phase: Optional[CyclePhase] = None
    new_phase: CyclePhase
    day_in_cycle: int


class GoalReached(DomainEvent):
    event_type: Literal[EventType.GOAL_REACHED] = EventType.GOAL_REACHED
    goal: str
    nutrition_score: int
