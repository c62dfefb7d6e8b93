"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import date, datetime, timezone
from typing import List

from cyclefuel.models.cycle import CyclePhase, CycleRecord
from cyclefuel.models.food import Food
from cyclefuel.models.nutrients import NutrientProfile
from cyclefuel.models.user import UserProfile
from cyclefuel.repositories.memory import InMemoryFoodCatalog
from cyclefuel.services.events import EventBus
from cyclefuel.services.recommendation.base import RecommendationContext
from cyclefuel.utils.clients import Stores, memory_stores_bundle

def make_food(food_id: str, name: str, category: str, day: int = 1, **nutrients) -> Food:
    return Food(
        id=food_id,
        name=name,
        category=category,
        nutrients=NutrientProfile(**nutrients),
        created_at=datetime(2024, 1, day, tzinfo=timezone.utc)
    )

@pytest.fixture
def foods() -> List[Food]:
    """A small catalog with clear iron, protein and carb leaders."""
    return [
        make_food("spinach", "Spinach", "Vegetables", 1, iron=2.7, protein=2.9, carbs=3.6, calories=23),
        make_food("lentils", "Lentils", "Legumes", 2, iron=3.3, protein=9.0, carbs=20.1, calories=116),
        make_food("beef", "Beef Steak", "Meat", 3, iron=2.6, protein=26.0, fat=15.0, calories=250),
        make_food("chicken", "Chicken Breast", "Poultry", 4, iron=1.0, protein=31.0, fat=3.6, calories=165),
        make_food("salmon", "Salmon", "Fish", 5, iron=0.8, protein=20.0, fat=13.0, calories=208),
        make_food("oats", "Oats", "Grains", 6, iron=4.7, protein=17.0, carbs=66.0, calories=389),
        make_food("rice", "White Rice", "Grains", 7, iron=0.2, protein=2.7, carbs=28.0, calories=130),
        make_food("apple", "Apple", "Fruit", 8, iron=0.1, protein=0.3, carbs=14.0, calories=52),
    ]

@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        user_id="user-1",
        name="Test User",
        weight=65,
        height=165,
        age=30,
        activity_level="MODERATELY_ACTIVE"
    )

@pytest.fixture
def menstrual_cycle() -> CycleRecord:
    """28 day cycle, on day 3 at 2024-03-10."""
    return CycleRecord(
        id="cycle-1",
        user_id="user-1",
        start_date=date(2024, 3, 8),
        cycle_length=28,
        period_length=5
    )

@pytest.fixture
def stores(foods, profile) -> Stores:
    """In-memory stores seeded with the catalog and one user."""
    bundle = memory_stores_bundle()
    for food in foods:
        bundle.foods.add(food)
    bundle.profiles.save(profile)
    return bundle

@pytest.fixture
def bus() -> EventBus:
    return EventBus()

@pytest.fixture
def catalog(foods) -> InMemoryFoodCatalog:
    return InMemoryFoodCatalog(foods)

@pytest.fixture
def make_context(profile):
    """Factory for recommendation contexts with sensible defaults."""
    def _make(**overrides) -> RecommendationContext:
        values = dict(
            user=profile,
            phase=CyclePhase.MENSTRUAL,
            day_in_cycle=3,
            current_nutrition=NutrientProfile(),
            target_nutrition=NutrientProfile(protein=78, iron=23, calories=2418),
            deficient_nutrients=[],
            preferences=[]
        )
        values.update(overrides)
        return RecommendationContext(**values)
    return _make
