"""
Lambda handler for recommendation feedback and feedback analytics.
"""
import asyncio
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
from cyclefuel.models.feedback import FeedbackRecord
from cyclefuel.services.exceptions import CycleFuelError
from cyclefuel.utils.clients import get_bus, get_feedback_service
from cyclefuel.utils.logging import logger

tracer = Tracer()

class FeedbackRequest(BaseModel):
    """Feedback submission model."""
    user_id: str = Field(..., min_length=1)
    tracking_id: str = Field(..., min_length=1)
    food_id: str = Field(..., min_length=1)
    action: str
    reason: Optional[str] = None

async def submit(request: FeedbackRequest) -> FeedbackRecord:
    record = await get_feedback_service().record_feedback(
        request.user_id,
        request.tracking_id,
        request.food_id,
        request.action,
        request.reason
    )
    await get_bus().drain()
    return record

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    POST records feedback; GET returns the user's feedback analysis.
    """
    try:
        if http_method(event) == 'GET':
            user_id = query_params(event).get('user_id')
            if not user_id:
                return response(400, {'error': 'user_id is required'})
            service = get_feedback_service()
            analysis = service.analyze_feedback(user_id)
            return response(200, {
                'analysis': analysis.model_dump(mode='json'),
                'foods_to_avoid': service.foods_to_avoid(user_id),
                'recommended_foods': service.recommended_foods(user_id)
            })

        request = FeedbackRequest(**parse_body(event))
        record = asyncio.run(submit(request))
        return response(201, record)
    except CycleFuelError as e:
        logger.warning('Rejected feedback request', extra={'error': str(e)})
        return error_response(e)
    except Exception as e:
        logger.exception('Failed to process feedback')
        return error_response(e)
