"""
Food logging and food search.
"""
import uuid
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from aws_lambda_powertools import Logger

from cyclefuel.models.events import FoodLogged
from cyclefuel.models.food import Food
from cyclefuel.models.log import DailyLogEntry
from cyclefuel.repositories.memory import DailyLogStore, FoodCatalog, ProfileStore
from cyclefuel.services.events import EventBus
from cyclefuel.services.exceptions import InvalidInputError, NotFoundError

logger = Logger()

class FoodLogService:
    def __init__(
        self,
        profiles: ProfileStore,
        foods: FoodCatalog,
        logs: DailyLogStore,
        bus: EventBus,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.profiles = profiles
        self.foods = foods
        self.logs = logs
        self.bus = bus
        self.clock = clock

    async def log_food(
        self,
        user_id: str,
        food_id: str,
        servings: float = 1.0,
        meal_type: Optional[str] = None,
        day: Optional[date] = None
    ) -> DailyLogEntry:
        """
        Write a log entry and publish FoodLogged.

        Raises:
            NotFoundError: If the user or food does not exist
            InvalidInputError: If servings is not positive
        """
        if servings is None or servings <= 0:
            raise InvalidInputError(f"Servings must be positive, got {servings}")
        if self.profiles.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        food = self.foods.get(food_id)
        if food is None:
            raise NotFoundError(f"Food {food_id} not found")

        now = self.clock()
        entry = DailyLogEntry(
            id=str(uuid.uuid4()),
            user_id=user_id,
            food_id=food_id,
            date=day or now.date(),
            servings=servings,
            meal_type=meal_type.upper() if meal_type else None,
            logged_at=now
        )
        self.logs.add(entry)
        logger.info("Food logged", extra={
            "user_id": user_id,
            "food_id": food_id,
            "servings": servings
        })

        await self.bus.publish(FoodLogged(
            user_id=user_id,
            food_id=food.id,
            food_name=food.name,
            servings=servings,
            meal_type=entry.meal_type,
            nutrients=food.nutrients.scaled(servings),
            occurred_at=now
        ))
        return entry

    def search_foods(self, query: str, limit: int = 20) -> List[Food]:
        query = (query or "").strip()
        if not query:
            return []
        return self.foods.search(query, limit=limit)
