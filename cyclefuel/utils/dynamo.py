"""
DynamoDB utility functions for data access.

All records share one table. Items for a user live under ``USER#<id>``
and are told apart by sort key prefix; catalog foods live under ``FOOD``.
"""
import json
import os
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key

# Singleton instance
_dynamo_instance = None

def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If CYCLEFUEL_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['CYCLEFUEL_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "CYCLEFUEL_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance

def to_item(data: Dict[str, Any]) -> Dict[str, Any]:
    """Make a JSON-compatible dict storable: floats become Decimals."""
    return json.loads(json.dumps(data), parse_float=Decimal)

def from_item(value: Any) -> Any:
    """Undo ``to_item``: Decimals become ints or floats."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_item(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_item(v) for v in value]
    return value

class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str):
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)

    def put_item(
        self,
        item: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_values: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes
            condition_expression: Optional condition the existing item must meet
            expression_values: Values referenced by the condition

        Returns:
            Response from DynamoDB

        Raises:
            botocore.exceptions.ClientError: ``ConditionalCheckFailedException``
                when the condition does not hold
        """
        kwargs = {'Item': item}
        if condition_expression:
            kwargs['ConditionExpression'] = condition_expression
        if expression_values:
            kwargs['ExpressionAttributeValues'] = expression_values
        return self.table.put_item(**kwargs)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_condition: Optional[Key] = None,
        limit: Optional[int] = None,
        newest_first: bool = False
    ) -> List[Dict[str, Any]]:
        """
        Query items using partition key and optional sort key condition.

        Args:
            partition_key: Name of partition key
            partition_value: Value of partition key
            sort_key_condition: Optional sort key condition
            limit: Optional maximum number of items
            newest_first: Return items in descending sort key order

        Returns:
            List of matching items
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_condition is not None:
            key_condition = key_condition & sort_key_condition

        kwargs = {
            'KeyConditionExpression': key_condition,
            'ScanIndexForward': not newest_first
        }
        if limit:
            kwargs['Limit'] = limit

        items: List[Dict[str, Any]] = []
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key or (limit and len(items) >= limit):
                break
            kwargs['ExclusiveStartKey'] = last_key
        return items[:limit] if limit else items

def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"

FOOD_PK = "FOOD"
PROFILE_SK = "PROFILE"
STATS_SK = "STATS"
PHASE_SK = "PHASE"

def create_food_sk(food_id: str) -> str:
    return f"FOOD#{food_id}"

def create_cycle_sk(start_date: str, cycle_id: str) -> str:
    return f"CYCLE#{start_date}#{cycle_id}"

def create_log_sk(date_str: str, entry_id: str) -> str:
    return f"LOG#{date_str}#{entry_id}"

def create_preference_sk(food_id: str) -> str:
    return f"PREF#{food_id}"

def create_feedback_sk(timestamp: str, tracking_id: str) -> str:
    return f"FEEDBACK#{timestamp}#{tracking_id}"
