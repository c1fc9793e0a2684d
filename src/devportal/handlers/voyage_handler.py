"""
Voyage insights handler.

Proxies the five vessel voyage endpoints. All of them are paged lists; with
``get_all=true`` the remaining pages are fetched and merged before replying.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.proxy import paginated_get, require_access_token
from devportal.handlers.utils.rest_api_resolver import create_resolver

app = create_resolver()


def _voyage_get(base_url: str, resource: str, imo: str, field_name: str) -> Response:
    access_token = require_access_token(app)
    tracer.put_annotation('imo', imo)
    logger.info('Voyage insights request', extra={'resource': resource, 'imo': imo})
    return paginated_get(
        url=f'{base_url}/voyage-insights/v1/{resource}/{imo}',
        access_token=access_token,
        query_params=app.current_event.query_string_parameters,
        field_name=field_name,
    )


@app.get('/voyage-insights/vessel-port-calls/<imo>')
@tracer.capture_method(capture_response=False)
def get_port_calls(imo: str) -> Response:
    return _voyage_get(get_api_env_vars().ZONE_SERVICE_BASE_URL, 'vessel-port-calls', imo, 'port_calls')


@app.get('/voyage-insights/vessel-zone-and-port-events/<imo>')
@tracer.capture_method(capture_response=False)
def get_zone_and_port_events(imo: str) -> Response:
    return _voyage_get(get_api_env_vars().ZONE_SERVICE_BASE_URL, 'vessel-zone-and-port-events', imo, 'events')


@app.get('/voyage-insights/vessel-ais-reporting-gaps/<imo>')
@tracer.capture_method(capture_response=False)
def get_ais_reporting_gaps(imo: str) -> Response:
    return _voyage_get(get_api_env_vars().GAP_REPORTING_BASE_URL, 'vessel-ais-reporting-gaps', imo, 'gaps')


@app.get('/voyage-insights/vessel-positional-discrepancies/<imo>')
@tracer.capture_method(capture_response=False)
def get_positional_discrepancies(imo: str) -> Response:
    # Upstream resource name is singular
    return _voyage_get(get_api_env_vars().AIS_SPOOFING_BASE_URL, 'vessel-positional-discrepancy', imo, 'discrepancies')


@app.get('/voyage-insights/vessel-port-state-control/<imo>')
@tracer.capture_method(capture_response=False)
def get_port_state_control(imo: str) -> Response:
    return _voyage_get(get_api_env_vars().PSC_INSPECTION_BASE_URL, 'vessel-port-state-control', imo, 'inspections')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """Resolve a voyage insights API Gateway event."""
    return app.resolve(event, context)
