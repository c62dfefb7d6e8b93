"""
API Gateway proxy response helpers shared by the handlers.
"""
import json
from typing import Any, Dict, Optional

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ValidationError

from cyclefuel.services.exceptions import InvalidInputError, NotFoundError

logger = Logger()

def response(status_code: int, body: Any) -> Dict[str, Any]:
    if isinstance(body, BaseModel):
        payload = body.model_dump_json()
    else:
        payload = json.dumps(body, default=str)
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': payload
    }

def error_response(error: Exception) -> Dict[str, Any]:
    """Map a domain error to a proxy response."""
    if isinstance(error, NotFoundError):
        return response(404, {'error': str(error)})
    if isinstance(error, (InvalidInputError, ValidationError, json.JSONDecodeError)):
        return response(400, {'error': str(error)})
    return response(500, {'error': 'Internal server error'})

def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    body = event.get('body') or '{}'
    return json.loads(body) if isinstance(body, str) else body

def query_params(event: Dict[str, Any]) -> Dict[str, str]:
    return event.get('queryStringParameters') or {}

def http_method(event: Dict[str, Any]) -> Optional[str]:
    method = event.get('httpMethod') or event.get('requestContext', {}).get('http', {}).get('method')
    return method.upper() if method else None
