"""
Lambda handler for personalized food recommendations.
"""
import asyncio
import datetime
from typing import Dict, Optional

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import BaseModel, Field

from cyclefuel.handlers.responses import error_response, query_params, response
from cyclefuel.services.exceptions import CycleFuelError
from cyclefuel.services.recommendation.service import RecommendationResponse
from cyclefuel.utils.clients import get_bus, get_recommendation_service
from cyclefuel.utils.logging import logger

tracer = Tracer()

class RecommendationRequest(BaseModel):
    """Recommendation request model."""
    user_id: str = Field(..., min_length=1)
    date: Optional[datetime.date] = None
    meal_type: Optional[str] = Field(None, pattern="^(BREAKFAST|LUNCH|DINNER|SNACK)$")

async def recommend(request: RecommendationRequest) -> RecommendationResponse:
    result = await get_recommendation_service().get_recommendations(
        request.user_id,
        today=request.date,
        meal_type=request.meal_type
    )
    await get_bus().drain()
    return result

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle recommendation requests.

    Args:
        event: API Gateway Lambda proxy event with ``user_id`` and optional
            ``date`` and ``meal_type`` query parameters
        context: Lambda context

    Returns:
        API Gateway Lambda proxy response
    """
    try:
        request = RecommendationRequest(**query_params(event))
        result = asyncio.run(recommend(request))
        return response(200, result)
    except CycleFuelError as e:
        logger.warning('Rejected recommendation request', extra={'error': str(e)})
        return error_response(e)
    except Exception as e:
        logger.exception('Failed to generate recommendations')
        return error_response(e)
