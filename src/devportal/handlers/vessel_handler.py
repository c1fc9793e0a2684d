"""
Vessel insights handler.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.proxy import proxy_request, require_access_token
from devportal.handlers.utils.rest_api_resolver import create_resolver

app = create_resolver()


@app.get('/vessel-insights/vessel-characteristics/<imo>')
@tracer.capture_method(capture_response=False)
def get_vessel_characteristics(imo: str) -> Response:
    access_token = require_access_token(app)
    logger.info('Vessel characteristics request', extra={'imo': imo})
    return proxy_request(
        'GET',
        f'{get_api_env_vars().VESSEL_API_BASE_URL}/vessel-characteristics/{imo}',
        access_token=access_token,
    )


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
