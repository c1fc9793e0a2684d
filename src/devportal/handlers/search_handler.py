"""
Keyword search handler.

``/zone-and-port-insights/search`` searches the zone and port catalog only;
``/search`` adds vessels whose name starts with the keyword.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.utils.errors import RequestValidationError
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.responses import create_api_response
from devportal.handlers.utils.rest_api_resolver import create_resolver
from devportal.logic.geodata import get_catalog
from devportal.logic.vessel_search import search_vessels

app = create_resolver()


def _require_keyword() -> str:
    keyword = app.current_event.get_query_string_value(name='keyword', default_value='')
    if not keyword:
        raise RequestValidationError(message='Missing required query parameter: keyword')
    return keyword


@app.get('/zone-and-port-insights/search')
@tracer.capture_method(capture_response=False)
def search_zones_and_ports() -> Response:
    keyword = _require_keyword()
    result = get_catalog().search(keyword)
    logger.info('Zone and port search', extra={'keyword': keyword, 'total_records': result['meta']['totalRecords']})
    return create_api_response(status_code=200, body=result)


@app.get('/search')
@tracer.capture_method(capture_response=False)
def search_all() -> Response:
    keyword = _require_keyword()
    zone_port_result = get_catalog().search(keyword)
    vessels = search_vessels(keyword)

    metrics.add_metric(name='CombinedSearch', unit=MetricUnit.Count, value=1)
    return create_api_response(
        status_code=200,
        body={
            'meta': {**zone_port_result['meta'], 'totalVessels': len(vessels)},
            'data': {**zone_port_result['data'], 'vessels': vessels},
        },
    )


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
