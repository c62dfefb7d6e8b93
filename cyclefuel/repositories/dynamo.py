"""
DynamoDB implementations of the store interfaces.

Each store converts between pydantic models and table items and owns the
key layout for its record type.
"""
from datetime import date
from typing import List, Optional

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from cyclefuel.models.cycle import CyclePhase, CycleRecord
from cyclefuel.models.feedback import FeedbackRecord
from cyclefuel.models.food import Food
from cyclefuel.models.log import DailyLogEntry
from cyclefuel.models.preference import UserFoodPreference
from cyclefuel.models.stats import UserStats
from cyclefuel.models.user import UserProfile
from cyclefuel.repositories.memory import DEFAULT_CYCLE_LIST_LIMIT, DEFAULT_SEARCH_LIMIT
from cyclefuel.services.exceptions import ConcurrentUpdateError
from cyclefuel.utils.dynamo import (
    FOOD_PK,
    PHASE_SK,
    PROFILE_SK,
    STATS_SK,
    DynamoDBClient,
    create_cycle_sk,
    create_feedback_sk,
    create_food_sk,
    create_log_sk,
    create_pk,
    create_preference_sk,
    from_item,
    get_dynamo,
    to_item,
)

logger = Logger()

def _item(pk: str, sk: str, model) -> dict:
    return to_item({"PK": pk, "SK": sk, **model.model_dump(mode="json")})

def _load(model_cls, item: dict):
    data = from_item(item)
    data.pop("PK", None)
    data.pop("SK", None)
    return model_cls.model_validate(data)

class DynamoStore:
    def __init__(self, dynamo: Optional[DynamoDBClient] = None):
        self.dynamo = dynamo or get_dynamo()

class DynamoProfileStore(DynamoStore):
    def get(self, user_id: str) -> Optional[UserProfile]:
        item = self.dynamo.get_item({"PK": create_pk(user_id), "SK": PROFILE_SK})
        return _load(UserProfile, item) if item else None

    def save(self, profile: UserProfile) -> None:
        self.dynamo.put_item(_item(create_pk(profile.user_id), PROFILE_SK, profile))

class DynamoCycleStore(DynamoStore):
    def add(self, cycle: CycleRecord) -> None:
        sk = create_cycle_sk(cycle.start_date.isoformat(), cycle.id)
        self.dynamo.put_item(_item(create_pk(cycle.user_id), sk, cycle))

    def list(self, user_id: str, limit: int = DEFAULT_CYCLE_LIST_LIMIT) -> List[CycleRecord]:
        items = self.dynamo.query_items(
            partition_key="PK",
            partition_value=create_pk(user_id),
            sort_key_condition=Key("SK").begins_with("CYCLE#"),
            limit=limit,
            newest_first=True
        )
        return [_load(CycleRecord, item) for item in items]

    def latest(self, user_id: str) -> Optional[CycleRecord]:
        cycles = self.list(user_id, limit=1)
        return cycles[0] if cycles else None

class DynamoFoodCatalog(DynamoStore):
    def add(self, food: Food) -> None:
        self.dynamo.put_item(_item(FOOD_PK, create_food_sk(food.id), food))

    def get(self, food_id: str) -> Optional[Food]:
        item = self.dynamo.get_item({"PK": FOOD_PK, "SK": create_food_sk(food_id)})
        return _load(Food, item) if item else None

    def _all(self) -> List[Food]:
        items = self.dynamo.query_items(partition_key="PK", partition_value=FOOD_PK)
        return [_load(Food, item) for item in items]

    def list(self, limit: int) -> List[Food]:
        foods = sorted(
            self._all(),
            key=lambda f: f.created_at.timestamp() if f.created_at else float("-inf"),
            reverse=True
        )
        return foods[:limit]

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[Food]:
        needle = query.lower()
        matches = [
            f for f in self._all()
            if needle in f.name.lower() or needle in f.category.lower()
        ]
        return sorted(matches, key=lambda f: f.name)[:limit]

class DynamoDailyLogStore(DynamoStore):
    def add(self, entry: DailyLogEntry) -> None:
        sk = create_log_sk(entry.date.isoformat(), entry.id)
        self.dynamo.put_item(_item(create_pk(entry.user_id), sk, entry))

    def entries_for(self, user_id: str, day: date) -> List[DailyLogEntry]:
        items = self.dynamo.query_items(
            partition_key="PK",
            partition_value=create_pk(user_id),
            sort_key_condition=Key("SK").begins_with(f"LOG#{day.isoformat()}#")
        )
        return [_load(DailyLogEntry, item) for item in items]

class DynamoPreferenceStore(DynamoStore):
    def get(self, user_id: str, food_id: str) -> Optional[UserFoodPreference]:
        item = self.dynamo.get_item({
            "PK": create_pk(user_id),
            "SK": create_preference_sk(food_id)
        })
        return _load(UserFoodPreference, item) if item else None

    def list(
        self,
        user_id: str,
        min_score: Optional[float] = None,
        limit: Optional[int] = None
    ) -> List[UserFoodPreference]:
        items = self.dynamo.query_items(
            partition_key="PK",
            partition_value=create_pk(user_id),
            sort_key_condition=Key("SK").begins_with("PREF#")
        )
        prefs = [_load(UserFoodPreference, item) for item in items]
        if min_score is not None:
            prefs = [p for p in prefs if p.preference_score > min_score]
        prefs.sort(key=lambda p: p.preference_score, reverse=True)
        return prefs if limit is None else prefs[:limit]

    def save(self, preference: UserFoodPreference, expected_version: int) -> UserFoodPreference:
        """
        Conditionally write a preference.

        The write succeeds only if the stored version still equals
        ``expected_version`` (or no item exists when it is 0).

        Raises:
            ConcurrentUpdateError: If another writer got there first
        """
        stored = preference.model_copy(update={"version": expected_version + 1})
        item = _item(create_pk(preference.user_id), create_preference_sk(preference.food_id), stored)
        if expected_version == 0:
            condition = "attribute_not_exists(PK) OR version = :expected"
        else:
            condition = "version = :expected"
        try:
            self.dynamo.put_item(
                item,
                condition_expression=condition,
                expression_values={":expected": expected_version}
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise ConcurrentUpdateError(
                    f"{preference.user_id}/{preference.food_id}", expected_version
                ) from e
            logger.error("Failed to save preference", extra={
                "user_id": preference.user_id,
                "food_id": preference.food_id,
                "error": str(e)
            })
            raise
        return stored

class DynamoFeedbackStore(DynamoStore):
    def add(self, record: FeedbackRecord) -> None:
        sk = create_feedback_sk(record.created_at.isoformat(), record.tracking_id)
        self.dynamo.put_item(_item(create_pk(record.user_id), sk, record))

    def recent(self, user_id: str, limit: int = 100) -> List[FeedbackRecord]:
        items = self.dynamo.query_items(
            partition_key="PK",
            partition_value=create_pk(user_id),
            sort_key_condition=Key("SK").begins_with("FEEDBACK#"),
            limit=limit,
            newest_first=True
        )
        return [_load(FeedbackRecord, item) for item in items]

class DynamoStatsStore(DynamoStore):
    def get(self, user_id: str) -> Optional[UserStats]:
        item = self.dynamo.get_item({"PK": create_pk(user_id), "SK": STATS_SK})
        return _load(UserStats, item) if item else None

    def save(self, stats: UserStats) -> None:
        self.dynamo.put_item(_item(create_pk(stats.user_id), STATS_SK, stats))

    def get_last_phase(self, user_id: str) -> Optional[CyclePhase]:
        item = self.dynamo.get_item({"PK": create_pk(user_id), "SK": PHASE_SK})
        return CyclePhase(item["last_phase"]) if item else None

    def save_last_phase(self, user_id: str, phase: CyclePhase) -> None:
        """Stored under its own sort key so it never races the STATS item."""
        self.dynamo.put_item({
            "PK": create_pk(user_id),
            "SK": PHASE_SK,
            "last_phase": CyclePhase(phase).value
        })
