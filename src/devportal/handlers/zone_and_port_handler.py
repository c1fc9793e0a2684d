"""
Zone and port insights handler.

Traffic, vessel presence and zone listing are proxied to the zone service;
``/zones/<id>`` is answered from the zone and port catalog in S3 and needs no
access token.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.errors import ResourceNotFoundError
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.proxy import paginated_get, proxy_request, require_access_token
from devportal.handlers.utils.responses import create_api_response
from devportal.handlers.utils.rest_api_resolver import create_resolver
from devportal.logic.geodata import get_catalog

app = create_resolver()


def _zone_port_url(path: str) -> str:
    return f'{get_api_env_vars().ZONE_SERVICE_BASE_URL}/zone-port-insights/v1/{path}'


@app.get('/zone-and-port-insights/zone-and-port-traffic/id/<zone_id>')
@tracer.capture_method(capture_response=False)
def get_zone_and_port_traffic(zone_id: str) -> Response:
    access_token = require_access_token(app)
    return proxy_request(
        'GET',
        _zone_port_url(f'zone-and-port-traffic/id/{zone_id}'),
        access_token=access_token,
        params=app.current_event.query_string_parameters,
    )


@app.get('/zone-and-port-insights/vessels-in-zone-or-port/id/<zone_id>')
@tracer.capture_method(capture_response=False)
def get_vessels_in_zone_or_port(zone_id: str) -> Response:
    access_token = require_access_token(app)
    return paginated_get(
        url=_zone_port_url(f'vessels-in-zone-or-port/id/{zone_id}'),
        access_token=access_token,
        query_params=app.current_event.query_string_parameters,
        field_name='vessels',
    )


@app.get('/zone-and-port-insights/zones')
@tracer.capture_method(capture_response=False)
def list_zones() -> Response:
    access_token = require_access_token(app)
    return proxy_request(
        'GET',
        _zone_port_url('zones'),
        access_token=access_token,
        params=app.current_event.query_string_parameters,
    )


@app.get('/zones/<zone_id>')
@tracer.capture_method(capture_response=False)
def get_zone_by_id(zone_id: str) -> Response:
    record = get_catalog().get(zone_id)
    if record is None:
        raise ResourceNotFoundError(resource_type='Zone', resource_id=zone_id)

    logger.info('Zone record served from catalog', extra={'zone_id': zone_id})
    return create_api_response(status_code=200, body=record)


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
