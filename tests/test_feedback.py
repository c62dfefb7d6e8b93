"""
Tests for feedback recording and analytics.
"""
import pytest

from cyclefuel.models.events import EventType
from cyclefuel.models.feedback import FeedbackReason
from cyclefuel.models.preference import FeedbackAction, UserFoodPreference
from cyclefuel.services.exceptions import InvalidInputError
from cyclefuel.services.feedback import IMPROVEMENT_TIPS, FeedbackService
from cyclefuel.services.personalization import PreferenceUpdater


@pytest.fixture
def service(stores, bus):
    return FeedbackService(stores.feedback, stores.preferences, bus)


def seed_preference(store, food_id, accepts, rejects):
    store.save(
        UserFoodPreference(
            user_id="user-1",
            food_id=food_id,
            accept_count=accepts,
            reject_count=rejects,
            recommend_count=accepts + rejects
        ),
        expected_version=0
    )


class TestRecordFeedback:
    @pytest.mark.asyncio
    async def test_stores_and_publishes(self, service, stores, bus):
        record = await service.record_feedback("user-1", "t-1", "lentils", "accepted")

        assert record.action == FeedbackAction.ACCEPTED
        assert stores.feedback.recent("user-1") == [record]
        events = bus.get_event_log()
        assert len(events) == 1
        assert events[0].event_type == EventType.RECOMMENDATION_FEEDBACK
        assert events[0].tracking_id == "t-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [FeedbackAction.REJECTED, "REJECTED", "rejected", "Rejected"])
    async def test_accepts_enum_and_any_case(self, service, action):
        record = await service.record_feedback("user-1", "t-1", "lentils", action)
        assert record.action == FeedbackAction.REJECTED

    @pytest.mark.asyncio
    async def test_unknown_action_rejected(self, service, stores, bus):
        with pytest.raises(InvalidInputError):
            await service.record_feedback("user-1", "t-1", "lentils", "LOVED")
        assert stores.feedback.recent("user-1") == []
        assert bus.get_event_log() == []

    @pytest.mark.asyncio
    async def test_unknown_reason_rejected(self, service):
        with pytest.raises(InvalidInputError):
            await service.record_feedback("user-1", "t-1", "lentils", "REJECTED", "boring")

    @pytest.mark.asyncio
    async def test_updates_preference_when_updater_registered(self, service, stores, bus):
        PreferenceUpdater(stores.preferences).register(bus)
        await service.record_feedback("user-1", "t-1", "lentils", FeedbackAction.ACCEPTED)

        pref = stores.preferences.get("user-1", "lentils")
        assert pref.accept_count == 1
        assert pref.preference_score == pytest.approx(0.7)


class TestAnalysis:
    @pytest.mark.asyncio
    async def test_acceptance_rate_and_tips(self, service):
        for i in range(3):
            await service.record_feedback("user-1", f"t-{i}", "lentils", "ACCEPTED")
        await service.record_feedback("user-1", "t-9", "beef", "REJECTED", "too_expensive")

        analysis = service.analyze_feedback("user-1")
        assert analysis.total_feedback == 4
        assert analysis.acceptance_rate == pytest.approx(0.75)
        assert analysis.top_rejection_reasons == [{"reason": "too_expensive", "count": 1}]
        assert analysis.improvement_suggestions[0].startswith("Great!")
        assert IMPROVEMENT_TIPS[FeedbackReason.TOO_EXPENSIVE] in analysis.improvement_suggestions

    def test_no_feedback(self, service):
        analysis = service.analyze_feedback("user-1")
        assert analysis.total_feedback == 0
        assert analysis.acceptance_rate == 0.0
        assert analysis.improvement_suggestions[0].startswith("Your acceptance rate is low")

    def test_accepted_food_lists(self, service, stores):
        seed_preference(stores.preferences, "oats", accepts=4, rejects=0)
        seed_preference(stores.preferences, "beef", accepts=1, rejects=4)
        seed_preference(stores.preferences, "rice", accepts=1, rejects=1)

        analysis = service.analyze_feedback("user-1")
        assert [f["food_id"] for f in analysis.most_accepted_foods] == ["oats"]
        assert [f["food_id"] for f in analysis.least_accepted_foods] == ["beef"]

    def test_foods_to_avoid_and_recommended(self, service, stores):
        seed_preference(stores.preferences, "oats", accepts=4, rejects=0)
        seed_preference(stores.preferences, "beef", accepts=0, rejects=3)
        seed_preference(stores.preferences, "salmon", accepts=0, rejects=2)
        seed_preference(stores.preferences, "apple", accepts=1, rejects=0)

        assert service.foods_to_avoid("user-1") == ["beef"]
        assert service.recommended_foods("user-1") == ["oats"]
