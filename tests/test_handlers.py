"""
Tests for the Lambda handlers over in-memory stores.
"""
import json
from dataclasses import dataclass

import pytest

from cyclefuel.config import reset_settings
from cyclefuel.handlers import cycle, feedback, food_log, recommendations
from cyclefuel.utils import clients

@dataclass
class LambdaContext:
    function_name: str = "test"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:test"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"

@pytest.fixture
def context():
    return LambdaContext()

@pytest.fixture(autouse=True)
def shared_stores(stores, monkeypatch):
    """Point the shared clients at seeded in-memory stores."""
    monkeypatch.delenv("CYCLEFUEL_TABLE_NAME", raising=False)
    reset_settings()
    clients.reset_clients()
    clients._stores = stores
    yield stores
    clients.reset_clients()
    reset_settings()

def get(params):
    return {"httpMethod": "GET", "queryStringParameters": params}

def post(body):
    return {"httpMethod": "POST", "body": json.dumps(body)}

def body_of(result):
    return json.loads(result["body"])

class TestCycleHandler:
    def test_create_and_describe(self, context):
        result = cycle.handler(post({"user_id": "user-1", "start_date": "2024-03-08"}), context)
        assert result["statusCode"] == 201
        assert body_of(result)["cycle_length"] == 28

        result = cycle.handler(get({"user_id": "user-1", "date": "2024-03-10"}), context)
        assert result["statusCode"] == 200
        current = body_of(result)["current"]
        assert current["phase"] == "MENSTRUAL"
        assert current["day_in_cycle"] == 3

    def test_unknown_user(self, context):
        result = cycle.handler(post({"user_id": "nobody", "start_date": "2024-03-08"}), context)
        assert result["statusCode"] == 404

    def test_period_longer_than_cycle(self, context):
        result = cycle.handler(post({
            "user_id": "user-1",
            "start_date": "2024-03-08",
            "cycle_length": 28,
            "period_length": 30
        }), context)
        assert result["statusCode"] == 400

    def test_no_cycles(self, context):
        assert cycle.handler(get({"user_id": "user-1"}), context)["statusCode"] == 404

    def test_missing_user_id(self, context):
        assert cycle.handler(get({}), context)["statusCode"] == 400

class TestRecommendationsHandler:
    def test_unknown_user(self, context):
        result = recommendations.handler(get({"user_id": "nobody"}), context)
        assert result["statusCode"] == 404

    def test_missing_user_id(self, context):
        assert recommendations.handler(get(None), context)["statusCode"] == 400

    def test_recommendations(self, context, shared_stores, menstrual_cycle):
        shared_stores.cycles.add(menstrual_cycle)
        result = recommendations.handler(get({"user_id": "user-1", "date": "2024-03-10"}), context)

        assert result["statusCode"] == 200
        body = body_of(result)
        assert body["current_phase"] == "MENSTRUAL"
        assert body["recommendations"][0]["food"]["id"] == "oats"
        assert shared_stores.stats.get_last_phase("user-1") == "MENSTRUAL"

class TestFeedbackHandler:
    def test_bad_action(self, context):
        result = feedback.handler(post({
            "user_id": "user-1", "tracking_id": "t-1", "food_id": "oats", "action": "LOVED"
        }), context)
        assert result["statusCode"] == 400

    def test_records_and_analyzes(self, context, shared_stores):
        result = feedback.handler(post({
            "user_id": "user-1", "tracking_id": "t-1", "food_id": "oats", "action": "accepted"
        }), context)
        assert result["statusCode"] == 201
        assert body_of(result)["action"] == "ACCEPTED"
        assert shared_stores.preferences.get("user-1", "oats").accept_count == 1

        result = feedback.handler(get({"user_id": "user-1"}), context)
        assert result["statusCode"] == 200
        assert body_of(result)["analysis"]["total_feedback"] == 1

class TestFoodLogHandler:
    def test_log_food(self, context, shared_stores):
        result = food_log.handler(post({
            "user_id": "user-1", "food_id": "oats", "servings": 1.5, "date": "2024-03-10"
        }), context)
        assert result["statusCode"] == 201
        assert body_of(result)["servings"] == 1.5
        assert shared_stores.stats.get("user-1").total_logs == 1
        assert shared_stores.preferences.get("user-1", "oats").eat_count == 1

    def test_invalid_servings(self, context):
        result = food_log.handler(post({"user_id": "user-1", "food_id": "oats", "servings": 0}), context)
        assert result["statusCode"] == 400

    def test_search(self, context):
        result = food_log.handler(get({"q": "oat"}), context)
        assert result["statusCode"] == 200
        assert [f["id"] for f in body_of(result)["foods"]] == ["oats"]
