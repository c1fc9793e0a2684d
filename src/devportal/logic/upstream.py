"""
HTTP client for the upstream vendor APIs.

All outbound calls go through ``UpstreamClient`` so that failures surface the
same way everywhere: a non-2xx answer or a transport error becomes an
``UpstreamCallError`` carrying the upstream status code and body.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx
from aws_lambda_powertools.metrics import MetricUnit

from devportal.handlers.models.env_vars import get_api_env_vars
from devportal.handlers.utils.errors import UpstreamCallError
from devportal.handlers.utils.observability import logger, metrics, tracer


@dataclass(frozen=True)
class UpstreamResponse:
    """Successful upstream answer."""

    status_code: int
    status_message: str
    headers: Mapping[str, str]
    data: Any


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class UpstreamClient:
    """Thin wrapper around ``httpx.Client`` for the vendor APIs."""

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @tracer.capture_method
    def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> UpstreamResponse:
        """
        Perform one upstream call.

        Args:
            method: HTTP method
            url: Absolute upstream URL
            params: Query string parameters
            json: JSON request body
            headers: Extra request headers
            access_token: Bearer token forwarded from the caller

        Returns:
            The parsed upstream response

        Raises:
            UpstreamCallError: On transport failure or non-2xx status
        """
        request_headers = dict(headers or {})
        if access_token:
            request_headers['Authorization'] = f'Bearer {access_token}'

        try:
            response = self._client.request(method, url, params=params, json=json, headers=request_headers)
        except httpx.RequestError as e:
            logger.error('Upstream request failed', extra={'url': url, 'method': method, 'error': str(e)})
            metrics.add_metric(name='UpstreamTransportError', unit=MetricUnit.Count, value=1)
            raise UpstreamCallError(message=f'Upstream request failed: {e}', status_code=500, url=url) from e

        body = _parse_body(response)
        if not response.is_success:
            logger.warning('Upstream returned an error status', extra={
                'url': url,
                'method': method,
                'status_code': response.status_code,
            })
            metrics.add_metric(name='UpstreamErrorResponse', unit=MetricUnit.Count, value=1)
            raise UpstreamCallError(
                message=f'Upstream answered {response.status_code} {response.reason_phrase}',
                status_code=response.status_code,
                body=body,
                url=url,
            )

        logger.debug('Upstream call succeeded', extra={'url': url, 'status_code': response.status_code})
        return UpstreamResponse(
            status_code=response.status_code,
            status_message=response.reason_phrase,
            headers=response.headers,
            data=body if body is not None else {},
        )

    def get(self, url: str, **kwargs: Any) -> UpstreamResponse:
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> UpstreamResponse:
        return self.request('POST', url, **kwargs)


def annotate_status(data: Any, response: UpstreamResponse) -> Any:
    """Record the upstream status in the ``meta`` block of a JSON object body."""
    if not isinstance(data, dict):
        return data
    meta = data.get('meta')
    if not isinstance(meta, dict):
        meta = {}
        data['meta'] = meta
    meta['status_code'] = response.status_code
    meta['status_message'] = response.status_message
    return data


# Reused across warm invocations
_upstream_client: Optional[UpstreamClient] = None


def get_upstream_client() -> UpstreamClient:
    """Get or create the process-wide upstream client."""
    global _upstream_client

    if _upstream_client is None:
        _upstream_client = UpstreamClient(timeout=get_api_env_vars().UPSTREAM_TIMEOUT_SECONDS)
        logger.debug('Upstream HTTP client initialized')

    return _upstream_client
