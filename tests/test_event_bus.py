"""
Tests for the in-process event bus.
"""
import asyncio
from datetime import datetime

import pytest
from pydantic import ValidationError

from cyclefuel.models.events import EventType, FoodLogged, GoalReached
from cyclefuel.models.nutrients import NutrientProfile
from cyclefuel.services.events import EventBus

def food_logged(user_id="u1"):
    return FoodLogged(user_id=user_id, food_id="f1", food_name="Lentils")

class TestSubscribe:
    def test_subscribe_and_unsubscribe(self, bus):
        async def handler(event):
            pass

        bus.subscribe(EventType.FOOD_LOGGED, handler)
        assert bus.handler_count(EventType.FOOD_LOGGED) == 1
        assert bus.unsubscribe(EventType.FOOD_LOGGED, handler)
        assert not bus.unsubscribe(EventType.FOOD_LOGGED, handler)
        assert bus.handler_count(EventType.FOOD_LOGGED) == 0

    def test_clear_removes_handlers_and_log(self, bus):
        bus.subscribe(EventType.FOOD_LOGGED, lambda e: None)
        bus.clear()
        assert bus.handler_count(EventType.FOOD_LOGGED) == 0
        assert bus.get_event_log() == []

class TestPublish:
    @pytest.mark.asyncio
    async def test_no_handlers_resolves(self, bus):
        await bus.publish(food_logged())
        assert len(bus.get_event_log()) == 1

    @pytest.mark.asyncio
    async def test_only_matching_type_receives(self, bus):
        received = []
        bus.subscribe(EventType.GOAL_REACHED, received.append)
        await bus.publish(food_logged())
        assert received == []
        await bus.publish(GoalReached(user_id="u1", goal="daily", nutrition_score=85))
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_sibling(self, bus):
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        async def working(event):
            received.append(event.event_id)

        bus.subscribe(EventType.FOOD_LOGGED, broken)
        bus.subscribe(EventType.FOOD_LOGGED, working)
        event = food_logged()
        await bus.publish(event)
        assert received == [event.event_id]

    @pytest.mark.asyncio
    async def test_handlers_run_concurrently(self, bus):
        started = []

        async def slow(event):
            started.append("slow")
            await asyncio.sleep(0.05)

        async def fast(event):
            started.append("fast")

        bus.subscribe(EventType.FOOD_LOGGED, slow)
        bus.subscribe(EventType.FOOD_LOGGED, fast)
        await asyncio.wait_for(bus.publish(food_logged()), timeout=1)
        assert sorted(started) == ["fast", "slow"]

    @pytest.mark.asyncio
    async def test_handler_timeout_is_isolated(self):
        bus = EventBus(handler_timeout=0.01)
        received = []

        async def hangs(event):
            await asyncio.sleep(1)

        bus.subscribe(EventType.FOOD_LOGGED, hangs)
        bus.subscribe(EventType.FOOD_LOGGED, received.append)
        await bus.publish(food_logged())
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_publish_nowait_and_drain(self, bus):
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event)

        bus.subscribe(EventType.FOOD_LOGGED, handler)
        bus.publish_nowait(food_logged())
        bus.publish_nowait(food_logged())
        await bus.drain()
        assert len(received) == 2

class TestEventLog:
    @pytest.mark.asyncio
    async def test_log_is_bounded(self):
        bus = EventBus(event_log_size=2)
        events = [food_logged(f"u{i}") for i in range(3)]
        for event in events:
            await bus.publish(event)
        assert bus.get_event_log() == events[1:]
        bus.clear_event_log()
        assert bus.get_event_log() == []

def test_events_require_timezone():
    with pytest.raises(ValidationError):
        FoodLogged(user_id="u1", food_id="f1", food_name="x", occurred_at=datetime(2024, 1, 1))

def test_events_are_immutable():
    event = food_logged()
    with pytest.raises(ValidationError):
        event.food_id = "other"

def test_nutrient_payload_is_immutable():
    event = FoodLogged(user_id="u1", food_id="f1", food_name="x",
                       nutrients=NutrientProfile(iron=3.0))
    with pytest.raises(ValidationError):
        event.nutrients.iron = 999

@pytest.mark.asyncio
async def test_handler_cannot_change_payload_seen_by_sibling(bus):
    seen = []

    def tamper(event):
        event.nutrients.iron = 999

    async def observe(event):
        await asyncio.sleep(0)
        seen.append(event.nutrients.iron)

    bus.subscribe(EventType.FOOD_LOGGED, tamper)
    bus.subscribe(EventType.FOOD_LOGGED, observe)
    await bus.publish(FoodLogged(user_id="u1", food_id="f1", food_name="x",
                                 nutrients=NutrientProfile(iron=3.0)))
    assert seen == [3.0]
