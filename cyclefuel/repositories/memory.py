"""
Store interfaces and their in-memory implementations.

The in-memory stores keep everything in instance dictionaries. They back
local runs and tests; the DynamoDB stores in ``repositories.dynamo``
implement the same interfaces for deployed functions.
"""
from datetime import date
from typing import Dict, List, Optional, Protocol, Tuple

from cyclefuel.models.cycle import CyclePhase, CycleRecord
from cyclefuel.models.feedback import FeedbackRecord
from cyclefuel.models.food import Food
from cyclefuel.models.log import DailyLogEntry
from cyclefuel.models.preference import UserFoodPreference
from cyclefuel.models.stats import UserStats
from cyclefuel.models.user import UserProfile
from cyclefuel.services.exceptions import ConcurrentUpdateError

DEFAULT_CYCLE_LIST_LIMIT = 12
DEFAULT_SEARCH_LIMIT = 20


class ProfileStore(Protocol):
    def get(self, user_id: str) -> Optional[UserProfile]: ...
    def save(self, profile: UserProfile) -> None: ...


class CycleStore(Protocol):
    def add(self, cycle: CycleRecord) -> None: ...
    def latest(self, user_id: str) -> Optional[CycleRecord]: ...
    def list(self, user_id: str, limit: int = DEFAULT_CYCLE_LIST_LIMIT) -> List[CycleRecord]: ...


class FoodCatalog(Protocol):
    def add(self, food: Food) -> None: ...
    def get(self, food_id: str) -> Optional[Food]: ...
    def list(self, limit: int) -> List[Food]: ...
    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[Food]: ...


class DailyLogStore(Protocol):
    def add(self, entry: DailyLogEntry) -> None: ...
    def entries_for(self, user_id: str, day: date) -> List[DailyLogEntry]: ...


class PreferenceStore(Protocol):
    def get(self, user_id: str, food_id: str) -> Optional[UserFoodPreference]: ...
    def list(
        self,
        user_id: str,
        min_score: Optional[float] = None,
        limit: Optional[int] = None
    ) -> List[UserFoodPreference]: ...
    def save(self, preference: UserFoodPreference, expected_version: int) -> UserFoodPreference: ...


class FeedbackStore(Protocol):
    def add(self, record: FeedbackRecord) -> None: ...
    def recent(self, user_id: str, limit: int = 100) -> List[FeedbackRecord]: ...


class StatsStore(Protocol):
    def get(self, user_id: str) -> Optional[UserStats]: ...
    def save(self, stats: UserStats) -> None: ...
    def get_last_phase(self, user_id: str) -> Optional[CyclePhase]: ...
    def save_last_phase(self, user_id: str, phase: CyclePhase) -> None: ...


class InMemoryProfileStore:
    def __init__(self):
        self._profiles: Dict[str, UserProfile] = {}

    def get(self, user_id: str) -> Optional[UserProfile]:
        return self._profiles.get(user_id)

    def save(self, profile: UserProfile) -> None:
        self._profiles[profile.user_id] = profile


class InMemoryCycleStore:
    def __init__(self):
        self._cycles: Dict[str, List[CycleRecord]] = {}

    def add(self, cycle: CycleRecord) -> None:
        self._cycles.setdefault(cycle.user_id, []).append(cycle)

    def list(self, user_id: str, limit: int = DEFAULT_CYCLE_LIST_LIMIT) -> List[CycleRecord]:
        """Newest start date first."""
        cycles = sorted(self._cycles.get(user_id, []), key=lambda c: c.start_date, reverse=True)
        return cycles[:limit]

    def latest(self, user_id: str) -> Optional[CycleRecord]:
        cycles = self.list(user_id, limit=1)
        return cycles[0] if cycles else None


class InMemoryFoodCatalog:
    def __init__(self, foods: Optional[List[Food]] = None):
        self._foods: Dict[str, Food] = {}
        for food in foods or []:
            self.add(food)

    def add(self, food: Food) -> None:
        self._foods[food.id] = food

    def get(self, food_id: str) -> Optional[Food]:
        return self._foods.get(food_id)

    def list(self, limit: int) -> List[Food]:
        """Newest foods first; foods without a creation time sort last."""
        foods = sorted(
            self._foods.values(),
            key=lambda f: f.created_at.timestamp() if f.created_at else float("-inf"),
            reverse=True
        )
        return foods[:limit]

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[Food]:
        """Case-insensitive substring match on name or category, ordered by name."""
        needle = query.lower()
        matches = [
            f for f in self._foods.values()
            if needle in f.name.lower() or needle in f.category.lower()
        ]
        return sorted(matches, key=lambda f: f.name)[:limit]


class InMemoryDailyLogStore:
    def __init__(self):
        self._entries: List[DailyLogEntry] = []

    def add(self, entry: DailyLogEntry) -> None:
        self._entries.append(entry)

    def entries_for(self, user_id: str, day: date) -> List[DailyLogEntry]:
        return [e for e in self._entries if e.user_id == user_id and e.date == day]


class InMemoryPreferenceStore:
    """
    Preference records keyed by (user, food). ``save`` is a compare-and-set
    on the record version.
    """

    def __init__(self):
        self._prefs: Dict[Tuple[str, str], UserFoodPreference] = {}

    def get(self, user_id: str, food_id: str) -> Optional[UserFoodPreference]:
        return self._prefs.get((user_id, food_id))

    def list(
        self,
        user_id: str,
        min_score: Optional[float] = None,
        limit: Optional[int] = None
    ) -> List[UserFoodPreference]:
        """Preferences with score strictly above ``min_score``, best first."""
        prefs = [
            p for (uid, _), p in self._prefs.items()
            if uid == user_id and (min_score is None or p.preference_score > min_score)
        ]
        prefs.sort(key=lambda p: p.preference_score, reverse=True)
        return prefs if limit is None else prefs[:limit]

    def save(self, preference: UserFoodPreference, expected_version: int) -> UserFoodPreference:
        key = (preference.user_id, preference.food_id)
        current = self._prefs.get(key)
        current_version = current.version if current else 0
        if current_version != expected_version:
            raise ConcurrentUpdateError(f"{key[0]}/{key[1]}", expected_version)
        stored = preference.model_copy(update={"version": expected_version + 1})
        self._prefs[key] = stored
        return stored


class InMemoryFeedbackStore:
    def __init__(self):
        self._records: List[FeedbackRecord] = []

    def add(self, record: FeedbackRecord) -> None:
        self._records.append(record)

    def recent(self, user_id: str, limit: int = 100) -> List[FeedbackRecord]:
        records = [r for r in self._records if r.user_id == user_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]


class InMemoryStatsStore:
    """
    Engagement counters and the last announced phase, kept apart so a
    phase update never rewrites the counters.
    """

    def __init__(self):
        self._stats: Dict[str, UserStats] = {}
        self._phases: Dict[str, CyclePhase] = {}

    def get(self, user_id: str) -> Optional[UserStats]:
        return self._stats.get(user_id)

    def save(self, stats: UserStats) -> None:
        self._stats[stats.user_id] = stats

    def get_last_phase(self, user_id: str) -> Optional[CyclePhase]:
        return self._phases.get(user_id)

    def save_last_phase(self, user_id: str, phase: CyclePhase) -> None:
        self._phases[user_id] = CyclePhase(phase)
