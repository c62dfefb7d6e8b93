"""
Lambda handler for cycle records and the current phase.
"""
from datetime import date
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
from cyclefuel.services.cycle import build_cycle, summarize_cycle
from cyclefuel.services.exceptions import CycleFuelError, NotFoundError
from cyclefuel.utils.clients import get_stores
from cyclefuel.utils.logging import logger

tracer = Tracer()

class CycleRequest(BaseModel):
    """Cycle creation model."""
    user_id: str = Field(..., min_length=1)
    start_date: date
    cycle_length: Optional[int] = None
    period_length: Optional[int] = None

def create_cycle(request: CycleRequest) -> Dict:
    stores = get_stores()
    if stores.profiles.get(request.user_id) is None:
        raise NotFoundError(f"User {request.user_id} not found")
    cycle = build_cycle(
        request.user_id,
        request.start_date,
        cycle_length=request.cycle_length,
        period_length=request.period_length
    )
    stores.cycles.add(cycle)
    logger.info('Cycle created', extra={
        'user_id': cycle.user_id,
        'cycle_id': cycle.id,
        'start_date': cycle.start_date.isoformat()
    })
    return cycle.model_dump(mode='json')

def describe_cycles(user_id: str, reference_date: Optional[date] = None) -> Dict:
    """Latest cycles plus the derived current phase of the newest one."""
    cycles = get_stores().cycles.list(user_id)
    if not cycles:
        raise NotFoundError(f"No cycle data for user {user_id}")
    summary = summarize_cycle(cycles[0], reference_date or date.today())
    return {
        'cycles': [c.model_dump(mode='json') for c in cycles],
        'current': summary.model_dump(mode='json')
    }

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    POST creates a cycle record; GET lists the latest cycles with the
    current phase.
    """
    try:
        if http_method(event) == 'GET':
            params = query_params(event)
            if not params.get('user_id'):
                return response(400, {'error': 'user_id is required'})
            ref = date.fromisoformat(params['date']) if params.get('date') else None
            return response(200, describe_cycles(params['user_id'], ref))

        return response(201, create_cycle(CycleRequest(**parse_body(event))))
    except CycleFuelError as e:
        logger.warning('Rejected cycle request', extra={'error': str(e)})
        return error_response(e)
    except ValueError as e:
        return response(400, {'error': str(e)})
    except Exception as e:
        logger.exception('Failed to process cycle request')
        return error_response(e)
