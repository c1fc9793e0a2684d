"""
Account handler: sign in and token refresh.

Neither route needs an access token. The account service returns new tokens
in response headers, which are copied onto the portal response so the
browser can read them (they are listed in the CORS expose headers).
"""

from typing import Any, Dict, Optional

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.proxy import get_header, parse_json_body
from devportal.handlers.utils.responses import create_api_response
from devportal.handlers.utils.rest_api_resolver import create_resolver
from devportal.logic.upstream import get_upstream_client

app = create_resolver()

# Upstream header name -> portal response header name
FORWARDED_TOKEN_HEADERS = {
    'access-token': 'Access-Token',
    'refresh-token': 'Refresh-Token',
}


def _forward_account_call(method: str, path: str) -> Response:
    request_headers: Dict[str, str] = {}
    refresh_token: Optional[str] = get_header(app.current_event.headers, 'refresh-token')
    if refresh_token:
        request_headers['refresh-token'] = refresh_token

    upstream_response = get_upstream_client().request(
        method,
        f'{get_api_env_vars().ACCOUNT_API_BASE_URL}/{path}',
        json=parse_json_body(app),
        headers=request_headers,
    )

    response_headers = {
        portal_name: upstream_response.headers[upstream_name]
        for upstream_name, portal_name in FORWARDED_TOKEN_HEADERS.items()
        if upstream_response.headers.get(upstream_name)
    }
    logger.info('Account call succeeded', extra={
        'path': path,
        'status_code': upstream_response.status_code,
        'tokens_forwarded': sorted(response_headers),
    })
    return create_api_response(
        status_code=upstream_response.status_code,
        body=upstream_response.data,
        headers=response_headers,
    )


@app.post('/account/signin')
@tracer.capture_method(capture_response=False)
def sign_in() -> Response:
    return _forward_account_call('POST', 'signin')


@app.put('/account/refresh-token')
@tracer.capture_method(capture_response=False)
def refresh_token() -> Response:
    return _forward_account_call('PUT', 'refresh-access-token')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
