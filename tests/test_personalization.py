"""
Tests for preference learning from food logs and feedback.
"""
import asyncio

import pytest

from cyclefuel.models.events import FoodLogged, RecommendationFeedback
from cyclefuel.models.preference import FeedbackAction
from cyclefuel.repositories.memory import InMemoryPreferenceStore
from cyclefuel.services.exceptions import ConcurrentUpdateError
from cyclefuel.services.personalization import (
    AdditiveScoringPolicy,
    BlendedScoringPolicy,
    PreferenceUpdater,
    get_policy,
)

def logged(food_id="lentils"):
    return FoodLogged(user_id="u1", food_id=food_id, food_name=food_id)

def feedback(action, food_id="lentils"):
    return RecommendationFeedback(user_id="u1", tracking_id="t1", food_id=food_id, action=action)

@pytest.fixture
def store():
    return InMemoryPreferenceStore()

class FlakyStore(InMemoryPreferenceStore):
    """Loses the first ``failures`` writes to a simulated concurrent writer."""

    def __init__(self, failures):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def save(self, preference, expected_version):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ConcurrentUpdateError("u1/lentils", expected_version)
        return super().save(preference, expected_version)

class TestFoodLogged:
    @pytest.mark.asyncio
    async def test_first_log_creates_neutral_preference(self, store):
        pref = await PreferenceUpdater(store).on_food_logged(logged())
        assert pref.preference_score == 0.5
        assert pref.eat_count == 1
        assert pref.acceptance_rate == 1.0
        assert pref.last_eaten_at is not None
        assert pref.version == 1

    @pytest.mark.asyncio
    async def test_repeat_logs_raise_score_up_to_one(self, store):
        updater = PreferenceUpdater(store)
        for _ in range(8):
            pref = await updater.on_food_logged(logged())
        assert pref.eat_count == 8
        assert pref.preference_score == 1.0

    @pytest.mark.asyncio
    async def test_concurrent_logs_are_serialized(self, store):
        updater = PreferenceUpdater(store)
        await asyncio.gather(*(updater.on_food_logged(logged()) for _ in range(10)))
        pref = store.get("u1", "lentils")
        assert pref.eat_count == 10
        assert pref.version == 10

    @pytest.mark.asyncio
    async def test_pair_locks_are_released(self, store):
        updater = PreferenceUpdater(store)
        await asyncio.gather(*(
            updater.on_food_logged(logged(food_id)) for food_id in ["a", "b", "a", "c"]
        ))
        assert updater._locks == {}

    @pytest.mark.asyncio
    async def test_lock_dropped_after_failed_update(self):
        updater = PreferenceUpdater(FlakyStore(failures=10))
        with pytest.raises(ConcurrentUpdateError):
            await updater.on_food_logged(logged())
        assert updater._locks == {}

class TestAdditivePolicy:
    @pytest.mark.asyncio
    async def test_single_accept_on_fresh_pair(self, store):
        pref = await PreferenceUpdater(store).on_recommendation_feedback(
            feedback(FeedbackAction.ACCEPTED))
        assert pref.preference_score == pytest.approx(0.7)
        assert pref.acceptance_rate == 1.0
        assert pref.accept_count == 1
        assert pref.recommend_count == 1

    @pytest.mark.asyncio
    async def test_single_reject_on_fresh_pair(self, store):
        pref = await PreferenceUpdater(store).on_recommendation_feedback(
            feedback(FeedbackAction.REJECTED))
        assert pref.preference_score == pytest.approx(0.3)
        assert pref.acceptance_rate == 0.0

    @pytest.mark.asyncio
    async def test_adjustments_clamp(self, store):
        updater = PreferenceUpdater(store)
        for _ in range(3):
            pref = await updater.on_recommendation_feedback(feedback(FeedbackAction.ACCEPTED))
        assert pref.preference_score == pytest.approx(1.0)
        for _ in range(6):
            pref = await updater.on_recommendation_feedback(feedback(FeedbackAction.REJECTED))
        assert pref.preference_score == pytest.approx(0.0)
        assert pref.acceptance_rate == pytest.approx(3 / 9)

    @pytest.mark.asyncio
    async def test_saved_nudges_score_and_keeps_rate(self, store):
        updater = PreferenceUpdater(store)
        await updater.on_food_logged(logged())
        pref = await updater.on_recommendation_feedback(feedback(FeedbackAction.SAVED))
        assert pref.preference_score == pytest.approx(0.55)
        assert pref.acceptance_rate == 1.0

    @pytest.mark.asyncio
    async def test_reject_after_eating(self, store):
        updater = PreferenceUpdater(store)
        await updater.on_food_logged(logged())
        pref = await updater.on_recommendation_feedback(feedback(FeedbackAction.REJECTED))
        assert pref.preference_score == pytest.approx(0.3)
        assert pref.acceptance_rate == 0.0
        assert pref.eat_count == 1

class TestBlendedPolicy:
    @pytest.mark.asyncio
    async def test_seed_scores(self, store):
        updater = PreferenceUpdater(store, BlendedScoringPolicy())
        accepted = await updater.on_recommendation_feedback(feedback(FeedbackAction.ACCEPTED, "a"))
        rejected = await updater.on_recommendation_feedback(feedback(FeedbackAction.REJECTED, "b"))
        assert accepted.preference_score == pytest.approx(0.5)
        assert rejected.preference_score == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_blend_of_acceptance_recency_and_frequency(self, store):
        updater = PreferenceUpdater(store, BlendedScoringPolicy())
        await updater.on_food_logged(logged())
        pref = await updater.on_recommendation_feedback(feedback(FeedbackAction.ACCEPTED))
        assert pref.preference_score == pytest.approx(1.0 * 0.5 + 1.0 * 0.3 + 0.1 * 0.2)

        pref = await updater.on_recommendation_feedback(feedback(FeedbackAction.REJECTED))
        assert pref.acceptance_rate == pytest.approx(0.5)
        assert pref.preference_score == pytest.approx(0.5 * 0.5 + 0.3 * 0.3 + 0.1 * 0.2)

def test_get_policy():
    assert isinstance(get_policy("additive"), AdditiveScoringPolicy)
    assert isinstance(get_policy("blended"), BlendedScoringPolicy)
    with pytest.raises(ValueError):
        get_policy("median")

class TestVersioning:
    @pytest.mark.asyncio
    async def test_conflict_is_retried(self):
        store = FlakyStore(failures=2)
        pref = await PreferenceUpdater(store).on_food_logged(logged())
        assert store.attempts == 3
        assert pref.eat_count == 1

    @pytest.mark.asyncio
    async def test_persistent_conflict_raises(self):
        store = FlakyStore(failures=10)
        with pytest.raises(ConcurrentUpdateError):
            await PreferenceUpdater(store).on_food_logged(logged())

    def test_store_rejects_stale_version(self, store):
        from cyclefuel.models.preference import UserFoodPreference
        pref = UserFoodPreference(user_id="u1", food_id="lentils")
        store.save(pref, expected_version=0)
        with pytest.raises(ConcurrentUpdateError):
            store.save(pref, expected_version=0)

class TestRegistration:
    @pytest.mark.asyncio
    async def test_updates_through_bus(self, store, bus):
        PreferenceUpdater(store).register(bus)
        await bus.publish(logged())
        await bus.publish(feedback(FeedbackAction.ACCEPTED))
        pref = store.get("u1", "lentils")
        assert pref.eat_count == 1
        assert pref.preference_score == pytest.approx(0.65)
