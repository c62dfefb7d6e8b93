"""
Centralized client initialization module.

This module provides lazy-loaded shared clients for the application and
wires event subscribers onto the process-wide event bus.
"""
from typing import NamedTuple

from aws_lambda_powertools import Logger

from cyclefuel.config import get_settings
from cyclefuel.repositories import dynamo as dynamo_stores
from cyclefuel.repositories import memory as memory_stores
from cyclefuel.services.events import EventBus
from cyclefuel.services.feedback import FeedbackService
from cyclefuel.services.food_log import FoodLogService
from cyclefuel.services.gamification import GamificationListener
from cyclefuel.services.notifications import NotificationListener
from cyclefuel.services.personalization import PreferenceUpdater, get_policy
from cyclefuel.services.recommendation.service import RecommendationService
from cyclefuel.utils.dynamo import get_dynamo

logger = Logger()

class Stores(NamedTuple):
    profiles: memory_stores.ProfileStore
    cycles: memory_stores.CycleStore
    foods: memory_stores.FoodCatalog
    logs: memory_stores.DailyLogStore
    preferences: memory_stores.PreferenceStore
    feedback: memory_stores.FeedbackStore
    stats: memory_stores.StatsStore

# Initialize shared clients (lazy loading)
_stores = None
_bus = None

def memory_stores_bundle() -> Stores:
    return Stores(
        profiles=memory_stores.InMemoryProfileStore(),
        cycles=memory_stores.InMemoryCycleStore(),
        foods=memory_stores.InMemoryFoodCatalog(),
        logs=memory_stores.InMemoryDailyLogStore(),
        preferences=memory_stores.InMemoryPreferenceStore(),
        feedback=memory_stores.InMemoryFeedbackStore(),
        stats=memory_stores.InMemoryStatsStore()
    )

def dynamo_stores_bundle() -> Stores:
    dynamo = get_dynamo()
    return Stores(
        profiles=dynamo_stores.DynamoProfileStore(dynamo),
        cycles=dynamo_stores.DynamoCycleStore(dynamo),
        foods=dynamo_stores.DynamoFoodCatalog(dynamo),
        logs=dynamo_stores.DynamoDailyLogStore(dynamo),
        preferences=dynamo_stores.DynamoPreferenceStore(dynamo),
        feedback=dynamo_stores.DynamoFeedbackStore(dynamo),
        stats=dynamo_stores.DynamoStatsStore(dynamo)
    )

def get_stores() -> Stores:
    """DynamoDB stores when a table is configured, in-memory stores otherwise."""
    global _stores
    if _stores is None:
        if get_settings().table_name:
            _stores = dynamo_stores_bundle()
        else:
            logger.warning("CYCLEFUEL_TABLE_NAME not set, using in-memory stores")
            _stores = memory_stores_bundle()
    return _stores

def build_bus(stores: Stores) -> EventBus:
    """Create an event bus with every listener subscribed."""
    settings = get_settings()
    bus = EventBus(
        event_log_size=settings.event_log_size,
        handler_timeout=settings.handler_timeout_seconds
    )
    PreferenceUpdater(stores.preferences, get_policy(settings.preference_scoring_policy)).register(bus)
    GamificationListener(stores.stats, bus).register()
    NotificationListener().register(bus)
    return bus

def get_bus() -> EventBus:
    global _bus
    if _bus is None:
        _bus = build_bus(get_stores())
    return _bus

def get_recommendation_service() -> RecommendationService:
    s = get_stores()
    return RecommendationService(
        s.profiles, s.cycles, s.foods, s.logs, s.preferences, s.stats, get_bus()
    )

def get_feedback_service() -> FeedbackService:
    s = get_stores()
    return FeedbackService(s.feedback, s.preferences, get_bus())

def get_food_log_service() -> FoodLogService:
    s = get_stores()
    return FoodLogService(s.profiles, s.foods, s.logs, get_bus())

def reset_clients() -> None:
    """Forget shared clients; used between tests."""
    global _stores, _bus
    _stores = None
    _bus = None
