"""
Recommendation request flow.

Loads the user's data, runs edge case checks, computes phase-aware goals
and today's intake, then ranks suggestions through the orchestrator.

Typical usage:
    service = RecommendationService(profiles, cycles, foods, logs, preferences, stats, bus)
    response = await service.get_recommendations(user_id)
"""
from datetime import date
from typing import List, Optional

from aws_lambda_powertools import Logger
from pydantic import BaseModel, Field

from cyclefuel.config import Settings, get_settings
from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.events import CyclePhaseChanged, RecommendationShown
from cyclefuel.models.food import FoodSuggestion
from cyclefuel.models.nutrients import NutrientProfile
from cyclefuel.models.warning import EdgeCaseWarning
from cyclefuel.repositories.memory import (
    CycleStore,
    DailyLogStore,
    FoodCatalog,
    PreferenceStore,
    ProfileStore,
    StatsStore,
)
from cyclefuel.services.constants import MIN_ACCEPTANCE_RATE
from cyclefuel.services.cycle import current_phase, day_in_cycle
from cyclefuel.services.edge_cases import EdgeCaseDetector
from cyclefuel.services.events import EventBus
from cyclefuel.services.exceptions import NotFoundError
from cyclefuel.services.goals import compute_goals, deficiency_threshold
from cyclefuel.services.nutrition import DailyNutrition, aggregate_actuals
from cyclefuel.services.recommendation.base import RecommendationContext
from cyclefuel.services.recommendation.orchestrator import RecommendationOrchestrator

logger = Logger()

DEFAULT_WEIGHT_KG = 65
DEFAULT_ACTIVITY_LEVEL = "MODERATE"
NO_CYCLE_MESSAGE = "Add your menstrual cycle data to get personalized recommendations"

class RecommendationResponse(BaseModel):
    recommendations: List[FoodSuggestion] = Field(default_factory=list)
    warnings: List[EdgeCaseWarning] = Field(default_factory=list)
    goals: Optional[NutrientProfile] = None
    current_nutrition: Optional[NutrientProfile] = None
    current_phase: Optional[CyclePhase] = None
    day_in_cycle: Optional[int] = None
    deficient_nutrients: List[str] = Field(default_factory=list)
    personalized_count: int = 0
    message: Optional[str] = None

class RecommendationService:
    def __init__(
        self,
        profiles: ProfileStore,
        cycles: CycleStore,
        foods: FoodCatalog,
        logs: DailyLogStore,
        preferences: PreferenceStore,
        stats: StatsStore,
        bus: EventBus,
        orchestrator: Optional[RecommendationOrchestrator] = None,
        settings: Optional[Settings] = None
    ):
        self.profiles = profiles
        self.cycles = cycles
        self.foods = foods
        self.logs = logs
        self.preferences = preferences
        self.stats = stats
        self.bus = bus
        self.settings = settings or get_settings()
        self.orchestrator = orchestrator or RecommendationOrchestrator(
            max_results=self.settings.max_recommendations,
            strategy_timeout=self.settings.strategy_timeout_seconds
        )
        self.detector = EdgeCaseDetector(profiles, cycles, stats)

    async def get_recommendations(
        self,
        user_id: str,
        today: Optional[date] = None,
        meal_type: Optional[str] = None
    ) -> RecommendationResponse:
        """
        Build today's recommendations for a user.

        Args:
            user_id: User to recommend for
            today: Reference date, defaults to today
            meal_type: Optional meal the suggestions are for

        Returns:
            RecommendationResponse. Without cycle data it carries no
            recommendations, the edge case warnings and a message asking
            for cycle data.

        Raises:
            NotFoundError: If the user does not exist
        """
        today = today or date.today()
        profile = self.profiles.get(user_id)
        if profile is None:
            raise NotFoundError(f"User {user_id} not found")

        warnings = self.detector.check_all(user_id, today)

        cycle = self.cycles.latest(user_id)
        if cycle is None:
            logger.info("No cycle data, skipping recommendations", extra={"user_id": user_id})
            return RecommendationResponse(warnings=warnings, message=NO_CYCLE_MESSAGE)

        phase = current_phase(cycle, today)
        day = day_in_cycle(cycle, today)
        goals = compute_goals(
            profile.weight or DEFAULT_WEIGHT_KG,
            profile.activity_level or DEFAULT_ACTIVITY_LEVEL,
            phase
        )

        candidates = self.foods.list(limit=self.settings.candidate_food_limit)
        entries = self.logs.entries_for(user_id, today)
        referenced = {f.id: f for f in candidates}
        for entry in entries:
            if entry.food_id not in referenced:
                food = self.foods.get(entry.food_id)
                if food is not None:
                    referenced[food.id] = food
        actuals = aggregate_actuals(entries, referenced)

        ratio = deficiency_threshold(profile, self.settings.deficiency_warning_ratio)
        deficient = DailyNutrition(goals, actuals, ratio).deficient_nutrients()

        preferences = self.preferences.list(
            user_id,
            min_score=MIN_ACCEPTANCE_RATE,
            limit=self.settings.preference_limit
        )

        context = RecommendationContext(
            user=profile,
            phase=phase,
            day_in_cycle=day,
            current_nutrition=actuals,
            target_nutrition=goals,
            deficient_nutrients=deficient,
            preferences=preferences,
            meal_type=meal_type,
            deficiency_ratio=ratio
        )
        suggestions = await self.orchestrator.generate(context, candidates)

        self._announce(user_id, phase, day, suggestions)

        logger.info("Generated recommendations", extra={
            "user_id": user_id,
            "phase": phase.value,
            "day_in_cycle": day,
            "deficient": deficient,
            "count": len(suggestions)
        })
        return RecommendationResponse(
            recommendations=suggestions,
            warnings=warnings,
            goals=goals,
            current_nutrition=actuals,
            current_phase=phase,
            day_in_cycle=day,
            deficient_nutrients=deficient,
            personalized_count=len(preferences)
        )

    def _announce(
        self,
        user_id: str,
        phase: CyclePhase,
        day: int,
        suggestions: List[FoodSuggestion]
    ) -> None:
        """Publish shown and phase-change events without waiting on handlers."""
        for suggestion in suggestions:
            self.bus.publish_nowait(RecommendationShown(
                user_id=user_id,
                tracking_id=suggestion.tracking_id,
                food_id=suggestion.food.id,
                strategy=suggestion.strategy,
                priority=suggestion.priority
            ))

        previous = self.stats.get_last_phase(user_id)
        if previous == phase:
            return
        self.stats.save_last_phase(user_id, phase)
        self.bus.publish_nowait(CyclePhaseChanged(
            user_id=user_id,
            previous_phase=previous,
            new_phase=phase,
            day_in_cycle=day
        ))
