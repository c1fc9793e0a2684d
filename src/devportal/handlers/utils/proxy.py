"""
Shared request plumbing for the proxy handlers.

Handlers forward the caller's access token and query string to an upstream
service and return its JSON answer with ``meta.status_code`` and
``meta.status_message`` recorded. Upstream rejections are raised as
``UpstreamCallError`` and rendered by the resolver's exception handlers.
"""

import json
from typing import Any, Dict, Mapping, Optional, Tuple

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.errors import MissingAccessTokenError, RequestValidationError
from devportal.handlers.utils.observability import logger, tracer
from devportal.handlers.utils.responses import create_api_response
from devportal.logic.pagination import aggregate
from devportal.logic.upstream import annotate_status, get_upstream_client

TOKEN_HEADER_NAMES = ('authorization', 'access-token')
BEARER_PREFIX = 'Bearer '
GET_ALL_PARAM = 'get_all'


def get_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def extract_access_token(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Find the caller's access token.

    ``Authorization`` wins over ``access-token``; a ``Bearer`` prefix is removed.
    """
    for name in TOKEN_HEADER_NAMES:
        token = get_header(headers, name)
        if token:
            if token.startswith(BEARER_PREFIX):
                token = token[len(BEARER_PREFIX):]
            return token
    return None


def require_access_token(app: APIGatewayRestResolver) -> str:
    token = extract_access_token(app.current_event.headers)
    if not token:
        logger.info('Rejecting request without access token', extra={'path': app.current_event.path})
        raise MissingAccessTokenError()
    return token


def split_query_params(params: Optional[Mapping[str, str]]) -> Tuple[Dict[str, str], bool]:
    """Separate the ``get_all`` flag from the parameters forwarded upstream."""
    forwarded = {key: value for key, value in (params or {}).items() if key != GET_ALL_PARAM and value is not None}
    get_all = (params or {}).get(GET_ALL_PARAM) == 'true'
    return forwarded, get_all


def parse_json_body(app: APIGatewayRestResolver) -> Any:
    """Decode the request body; an absent body is an empty object."""
    raw_body = app.current_event.body
    if not raw_body:
        return {}
    try:
        return json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise RequestValidationError(message='Invalid JSON in request body') from e


@tracer.capture_method(capture_response=False)
def proxy_request(
    method: str,
    url: str,
    access_token: str,
    params: Optional[Dict[str, Any]] = None,
    json_body: Any = None,
    annotate: bool = True,
) -> Response:
    """Forward one call upstream and relay the answer with its status code."""
    upstream_response = get_upstream_client().request(
        method,
        url,
        params=params,
        json=json_body,
        access_token=access_token,
    )
    body = upstream_response.data
    if annotate:
        body = annotate_status(body, upstream_response)
    return create_api_response(status_code=upstream_response.status_code, body=body)


@tracer.capture_method(capture_response=False)
def paginated_get(
    url: str,
    access_token: str,
    query_params: Optional[Mapping[str, str]],
    field_name: str,
) -> Response:
    """
    Relay a paged list endpoint, optionally aggregating every page.

    Args:
        url: Upstream list endpoint
        access_token: Caller's token, forwarded as a bearer token
        query_params: Inbound query string, ``get_all`` included
        field_name: Array field under ``data`` holding the page items

    Returns:
        Page one (annotated), or the merged envelope when ``get_all=true``
    """
    params, get_all = split_query_params(query_params)
    client = get_upstream_client()

    first_response = client.get(url, params=params, access_token=access_token)
    first_page = annotate_status(first_response.data, first_response)
    if not isinstance(first_page, dict):
        return create_api_response(status_code=first_response.status_code, body=first_page)

    def fetch_page(offset: int) -> Dict[str, Any]:
        return client.get(url, params={**params, 'offset': str(offset)}, access_token=access_token).data

    result = aggregate(
        fetch_page=fetch_page,
        first_page=first_page,
        field_name=field_name,
        max_total=get_api_env_vars().MAX_RECORDS_LIMIT,
        get_all=get_all,
    )
    return create_api_response(status_code=first_response.status_code, body=result)
