"""
Zone and port notification subscriptions handler.

CRUD over the subscription service. Only the delete answer is relayed
without status annotation, it is not always a JSON object.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.proxy import parse_json_body, proxy_request, require_access_token
from devportal.handlers.utils.rest_api_resolver import create_resolver

app = create_resolver()


def _subscriptions_url(suffix: str = '') -> str:
    return f'{get_api_env_vars().NOTIFICATION_API_BASE_URL}/zones-and-ports{suffix}'


@app.post('/notifications/zones-and-ports')
@tracer.capture_method(capture_response=False)
def create_subscription() -> Response:
    access_token = require_access_token(app)
    return proxy_request('POST', _subscriptions_url(), access_token=access_token, json_body=parse_json_body(app))


@app.get('/notifications/zones-and-ports')
@tracer.capture_method(capture_response=False)
def list_subscriptions() -> Response:
    access_token = require_access_token(app)
    return proxy_request('GET', _subscriptions_url(), access_token=access_token)


@app.get('/notifications/zones-and-ports/<subscription_id>')
@tracer.capture_method(capture_response=False)
def get_subscription(subscription_id: str) -> Response:
    access_token = require_access_token(app)
    return proxy_request('GET', _subscriptions_url(f'/{subscription_id}'), access_token=access_token)


@app.put('/notifications/zones-and-ports/<subscription_id>')
@tracer.capture_method(capture_response=False)
def update_subscription(subscription_id: str) -> Response:
    access_token = require_access_token(app)
    return proxy_request(
        'PUT',
        _subscriptions_url(f'/{subscription_id}'),
        access_token=access_token,
        json_body=parse_json_body(app),
    )


@app.delete('/notifications/zones-and-ports/<subscription_id>')
@tracer.capture_method(capture_response=False)
def delete_subscription(subscription_id: str) -> Response:
    access_token = require_access_token(app)
    logger.info('Deleting notification subscription', extra={'subscription_id': subscription_id})
    return proxy_request('DELETE', _subscriptions_url(f'/{subscription_id}'), access_token=access_token, annotate=False)


@app.get('/notifications/zones-and-ports/<subscription_id>/notifications')
@tracer.capture_method(capture_response=False)
def list_subscription_notifications(subscription_id: str) -> Response:
    access_token = require_access_token(app)
    return proxy_request('GET', _subscriptions_url(f'/{subscription_id}/notifications'), access_token=access_token)


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
