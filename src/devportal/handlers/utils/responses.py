"""
Response helpers for API Gateway handlers.
"""

import json
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from aws_lambda_powertools.event_handler import Response, content_types


def json_default(value: Any) -> Union[int, float]:
    """Serialize the Decimal values boto3 returns for DynamoDB numbers."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f'Object of type {type(value).__name__} is not JSON serializable')


def dump_json(body: Any) -> str:
    return json.dumps(body, default=json_default)


def create_api_response(
    status_code: int,
    body: Any,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Create standardized JSON API Gateway response."""

    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=dump_json(body),
        headers=headers,
    )
