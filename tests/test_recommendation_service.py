"""
Tests for the end-to-end recommendation flow over in-memory stores.
"""
from datetime import date, datetime, timezone

import pytest

from cyclefuel.config import Settings
from cyclefuel.models.cycle import CyclePhase
from cyclefuel.models.events import EventType
from cyclefuel.models.log import DailyLogEntry
from cyclefuel.models.preference import UserFoodPreference
from cyclefuel.models.stats import UserStats
from cyclefuel.models.warning import WarningSeverity
from cyclefuel.services.exceptions import NotFoundError
from cyclefuel.services.recommendation.service import NO_CYCLE_MESSAGE, RecommendationService

TODAY = date(2024, 3, 10)


@pytest.fixture
def service(stores, bus):
    return RecommendationService(
        stores.profiles, stores.cycles, stores.foods, stores.logs,
        stores.preferences, stores.stats, bus, settings=Settings()
    )


@pytest.fixture
def active_stores(stores, menstrual_cycle):
    """Stores for a user with a current cycle who logged today."""
    stores.cycles.add(menstrual_cycle)
    stores.stats.save(UserStats(user_id="user-1", last_log_date=TODAY))
    return stores


@pytest.mark.asyncio
async def test_unknown_user(service):
    with pytest.raises(NotFoundError):
        await service.get_recommendations("nobody", today=TODAY)


@pytest.mark.asyncio
async def test_without_cycle_data(service, stores):
    response = await service.get_recommendations("user-1", today=TODAY)

    assert response.recommendations == []
    assert response.message == NO_CYCLE_MESSAGE
    assert len(response.warnings) == 1
    assert response.warnings[0].severity == WarningSeverity.INFO
    assert response.warnings[0].action.link == "/menstrual-cycle"
    assert response.current_phase is None


@pytest.mark.asyncio
async def test_menstrual_day_with_nothing_logged(service, active_stores):
    response = await service.get_recommendations("user-1", today=TODAY)

    assert response.current_phase == CyclePhase.MENSTRUAL
    assert response.day_in_cycle == 3
    assert response.goals.calories == 2418
    assert response.goals.protein == 78
    assert response.goals.iron == 23
    assert "iron" in response.deficient_nutrients
    assert "protein" in response.deficient_nutrients
    assert response.warnings == []

    ids = [s.food.id for s in response.recommendations]
    assert ids == ["oats", "lentils", "spinach", "chicken", "beef", "salmon"]
    assert [s.priority for s in response.recommendations[:3]] == [95, 95, 95]
    assert response.recommendations[3].strategy == "ProteinDeficiencyStrategy"


@pytest.mark.asyncio
async def test_logged_food_counts_toward_intake(service, active_stores):
    active_stores.logs.add(DailyLogEntry(
        id="log-1",
        user_id="user-1",
        food_id="chicken",
        date=TODAY,
        servings=2,
        logged_at=datetime(2024, 3, 10, 8, tzinfo=timezone.utc)
    ))

    response = await service.get_recommendations("user-1", today=TODAY)

    assert response.current_nutrition.protein == pytest.approx(62)
    assert "protein" not in response.deficient_nutrients


@pytest.mark.asyncio
async def test_preferences_are_personalized(service, active_stores):
    prefs = active_stores.preferences
    prefs.save(UserFoodPreference(user_id="user-1", food_id="rice",
                                  preference_score=0.9, acceptance_rate=1.0), expected_version=0)
    prefs.save(UserFoodPreference(user_id="user-1", food_id="apple",
                                  preference_score=0.2, acceptance_rate=0.1), expected_version=0)

    response = await service.get_recommendations("user-1", today=TODAY)

    assert response.personalized_count == 1
    rice = next(s for s in response.recommendations if s.food.id == "rice")
    assert rice.strategy == "PersonalPreferenceStrategy"
    assert rice.priority == pytest.approx(94.5)
    assert "apple" not in [s.food.id for s in response.recommendations]


@pytest.mark.asyncio
async def test_announces_shown_and_phase_change(service, active_stores, bus):
    response = await service.get_recommendations("user-1", today=TODAY)
    await bus.drain()

    events = bus.get_event_log()
    shown = [e for e in events if e.event_type == EventType.RECOMMENDATION_SHOWN]
    changed = [e for e in events if e.event_type == EventType.CYCLE_PHASE_CHANGED]
    assert {e.tracking_id for e in shown} == {s.tracking_id for s in response.recommendations}
    assert len(changed) == 1
    assert changed[0].previous_phase is None
    assert changed[0].new_phase == CyclePhase.MENSTRUAL
    assert active_stores.stats.get_last_phase("user-1") == CyclePhase.MENSTRUAL

    bus.clear_event_log()
    await service.get_recommendations("user-1", today=TODAY)
    await bus.drain()
    assert not [e for e in bus.get_event_log() if e.event_type == EventType.CYCLE_PHASE_CHANGED]


@pytest.mark.asyncio
async def test_phase_tracking_leaves_engagement_stats_alone(service, active_stores):
    counters = UserStats(user_id="user-1", last_log_date=TODAY, current_streak=4, xp=40)
    active_stores.stats.save(counters)

    await service.get_recommendations("user-1", today=TODAY)
    active_stores.stats.save(counters.model_copy(update={"xp": 45}))

    assert active_stores.stats.get("user-1").current_streak == 4
    assert active_stores.stats.get("user-1").xp == 45
    assert active_stores.stats.get_last_phase("user-1") == CyclePhase.MENSTRUAL
