"""
Persistence for profiles, cycles, foods, logs, preferences, feedback and stats.
"""
from cyclefuel.repositories.memory import (
    CycleStore,
    DailyLogStore,
    FeedbackStore,
    FoodCatalog,
    PreferenceStore,
    ProfileStore,
    StatsStore,
)

__all__ = [
    "CycleStore",
    "DailyLogStore",
    "FeedbackStore",
    "FoodCatalog",
    "PreferenceStore",
    "ProfileStore",
    "StatsStore",
]
