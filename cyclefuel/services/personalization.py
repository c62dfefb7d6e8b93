"""
Preference learning from logged food and recommendation feedback.

The updater subscribes to the event bus and rewrites one
UserFoodPreference per event. Writes for the same (user, food) pair are
serialized in-process by a lock and across processes by the store's
version check, with a bounded retry on conflict.

Typical usage:
    updater = PreferenceUpdater(preference_store, policy=AdditiveScoringPolicy())
    updater.register(bus)
"""
import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple

from aws_lambda_powertools import Logger

from cyclefuel.models.events import EventType, FoodLogged, RecommendationFeedback
from cyclefuel.models.preference import FeedbackAction, UserFoodPreference
from cyclefuel.repositories.memory import PreferenceStore
from cyclefuel.services.events import EventBus
from cyclefuel.services.exceptions import ConcurrentUpdateError

logger = Logger()

MAX_WRITE_ATTEMPTS = 3
EAT_SCORE_BOOST = 0.1
NEW_FOOD_SCORE = 0.5

def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))

def _acceptance_rate(accepts: int, rejects: int, current: float) -> float:
    total = accepts + rejects
    return accepts / total if total else current

class ScoringPolicy(ABC):
    """How a feedback action moves a preference score."""

    name = "base"

    @abstractmethod
    def seed_score(self, action: FeedbackAction) -> float:
        """Score for a pair seen for the first time through feedback."""

    @abstractmethod
    def rescore(self, pref: UserFoodPreference, action: FeedbackAction) -> float:
        """Score after applying ``action``; counters on ``pref`` already include it."""

class AdditiveScoringPolicy(ScoringPolicy):
    """Fixed increments per action, clamped to [0, 1]."""

    name = "additive"
    ADJUSTMENTS = {
        FeedbackAction.ACCEPTED: 0.15,
        FeedbackAction.REJECTED: -0.20,
        FeedbackAction.SAVED: 0.05,
    }

    def seed_score(self, action: FeedbackAction) -> float:
        return 0.7 if action == FeedbackAction.ACCEPTED else 0.3

    def rescore(self, pref: UserFoodPreference, action: FeedbackAction) -> float:
        return _clamp(pref.preference_score + self.ADJUSTMENTS[action])

class BlendedScoringPolicy(ScoringPolicy):
    """
    Weighted blend of acceptance rate, recency of the last reaction and
    eating frequency.
    """

    name = "blended"
    ACCEPTANCE_WEIGHT = 0.5
    RECENCY_WEIGHT = 0.3
    FREQUENCY_WEIGHT = 0.2

    def seed_score(self, action: FeedbackAction) -> float:
        return 0.5 if action == FeedbackAction.ACCEPTED else 0.1

    def rescore(self, pref: UserFoodPreference, action: FeedbackAction) -> float:
        recency = 1.0 if action == FeedbackAction.ACCEPTED else 0.3
        frequency = min(pref.eat_count / 10, 1.0)
        return _clamp(
            pref.acceptance_rate * self.ACCEPTANCE_WEIGHT
            + recency * self.RECENCY_WEIGHT
            + frequency * self.FREQUENCY_WEIGHT
        )

POLICIES = {
    AdditiveScoringPolicy.name: AdditiveScoringPolicy,
    BlendedScoringPolicy.name: BlendedScoringPolicy,
}

def get_policy(name: str) -> ScoringPolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown preference scoring policy: {name}")

class PreferenceUpdater:
    """Event handlers that keep UserFoodPreference records current."""

    def __init__(
        self,
        store: PreferenceStore,
        policy: Optional[ScoringPolicy] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.store = store
        self.policy = policy or AdditiveScoringPolicy()
        self.clock = clock
        self._locks: Dict[Tuple[str, str], List] = {}
        self._loop = None

    def register(self, bus: EventBus) -> None:
        bus.subscribe(EventType.FOOD_LOGGED, self.on_food_logged)
        bus.subscribe(EventType.RECOMMENDATION_FEEDBACK, self.on_recommendation_feedback)

    @asynccontextmanager
    async def _pair_lock(self, user_id: str, food_id: str) -> AsyncIterator[None]:
        """
        Hold the lock for one (user, food) pair. The lock is dropped once
        no task holds or waits on it.
        """
        # locks are bound to the loop they first wait on; each Lambda invocation runs a new loop
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            self._loop = loop
            self._locks = {}

        key = (user_id, food_id)
        entry = self._locks.setdefault(key, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    async def _update(
        self,
        user_id: str,
        food_id: str,
        apply: Callable[[Optional[UserFoodPreference]], UserFoodPreference]
    ) -> UserFoodPreference:
        """
        Read-modify-write one preference under the pair's lock.

        Raises:
            ConcurrentUpdateError: If every attempt lost a version race
        """
        async with self._pair_lock(user_id, food_id):
            for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
                current = self.store.get(user_id, food_id)
                expected = current.version if current else 0
                updated = apply(current)
                try:
                    return self.store.save(updated, expected_version=expected)
                except ConcurrentUpdateError:
                    logger.warning("Preference write conflict, retrying", extra={
                        "user_id": user_id,
                        "food_id": food_id,
                        "attempt": attempt
                    })
            raise ConcurrentUpdateError(f"{user_id}/{food_id}", expected)

    async def on_food_logged(self, event: FoodLogged) -> UserFoodPreference:
        now = self.clock()

        def apply(current: Optional[UserFoodPreference]) -> UserFoodPreference:
            if current is None:
                return UserFoodPreference(
                    user_id=event.user_id,
                    food_id=event.food_id,
                    preference_score=NEW_FOOD_SCORE,
                    eat_count=1,
                    acceptance_rate=1.0,
                    last_eaten_at=now,
                    updated_at=now
                )
            return current.model_copy(update={
                "eat_count": current.eat_count + 1,
                "preference_score": min(current.preference_score + EAT_SCORE_BOOST, 1.0),
                "last_eaten_at": now,
                "updated_at": now
            })

        pref = await self._update(event.user_id, event.food_id, apply)
        logger.info("Updated preference from food log", extra={
            "user_id": event.user_id,
            "food_id": event.food_id,
            "preference_score": pref.preference_score,
            "eat_count": pref.eat_count
        })
        return pref

    async def on_recommendation_feedback(self, event: RecommendationFeedback) -> UserFoodPreference:
        now = self.clock()
        action = FeedbackAction(event.action)
        accepted = int(action == FeedbackAction.ACCEPTED)
        rejected = int(action == FeedbackAction.REJECTED)

        def apply(current: Optional[UserFoodPreference]) -> UserFoodPreference:
            if current is None:
                return UserFoodPreference(
                    user_id=event.user_id,
                    food_id=event.food_id,
                    accept_count=accepted,
                    reject_count=rejected,
                    recommend_count=1,
                    acceptance_rate=float(accepted),
                    preference_score=self.policy.seed_score(action),
                    last_action=action,
                    updated_at=now
                )
            counted = current.model_copy(update={
                "accept_count": current.accept_count + accepted,
                "reject_count": current.reject_count + rejected,
                "recommend_count": current.recommend_count + 1,
                "acceptance_rate": _acceptance_rate(
                    current.accept_count + accepted,
                    current.reject_count + rejected,
                    current.acceptance_rate
                ),
                "last_action": action,
                "updated_at": now
            })
            return counted.model_copy(update={
                "preference_score": self.policy.rescore(counted, action)
            })

        pref = await self._update(event.user_id, event.food_id, apply)
        logger.info("Updated preference from feedback", extra={
            "user_id": event.user_id,
            "food_id": event.food_id,
            "action": action.value,
            "policy": self.policy.name,
            "preference_score": pref.preference_score
        })
        return pref
