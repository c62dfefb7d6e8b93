"""
Lambda handler for food logging and food search.
"""
import asyncio
import datetime
from typing import Dict, Optional

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import BaseModel, Field

from cyclefuel.handlers.responses import (
    error_response,
    http_method,
    parse_body,
    query_params,
    response,
)
from cyclefuel.models.log import DailyLogEntry
from cyclefuel.services.exceptions import CycleFuelError
from cyclefuel.utils.clients import get_bus, get_food_log_service
from cyclefuel.utils.logging import logger

tracer = Tracer()

class FoodLogRequest(BaseModel):
    """Food log submission model."""
    user_id: str = Field(..., min_length=1)
    food_id: str = Field(..., min_length=1)
    servings: float = 1.0
    meal_type: Optional[str] = None
    date: Optional[datetime.date] = None

async def log(request: FoodLogRequest) -> DailyLogEntry:
    entry = await get_food_log_service().log_food(
        request.user_id,
        request.food_id,
        servings=request.servings,
        meal_type=request.meal_type,
        day=request.date
    )
    await get_bus().drain()
    return entry

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    POST logs a food; GET searches the catalog with the ``q`` parameter.
    """
    try:
        if http_method(event) == 'GET':
            foods = get_food_log_service().search_foods(query_params(event).get('q', ''))
            return response(200, {'foods': [f.model_dump(mode='json') for f in foods]})

        request = FoodLogRequest(**parse_body(event))
        entry = asyncio.run(log(request))
        return response(201, entry)
    except CycleFuelError as e:
        logger.warning('Rejected food log request', extra={'error': str(e)})
        return error_response(e)
    except Exception as e:
        logger.exception('Failed to log food')
        return error_response(e)
