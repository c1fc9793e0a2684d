"""
Pytest configuration and shared fixtures for the developer portal handlers.

This module provides common test fixtures and configuration used across
unit and integration tests.
"""

import json
import os
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import boto3
import httpx
import pytest
from moto import mock_aws

# Handlers read their settings on first use and Powertools reads its own at
# import time, so the environment is in place before any test module loads.
os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "POWERTOOLS_SERVICE_NAME": "test-devportal",
    "POWERTOOLS_METRICS_NAMESPACE": "TestDevPortal",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    "LOG_LEVEL": "DEBUG",
    "ALLOWED_ORIGINS": "http://localhost:5173,https://portal.example.com",
    "MAX_RECORDS_LIMIT": "5000",
    "NOTIFICATIONS_TABLE": "test-notifications-table",
    "PTE_USERNAME": "test-user",
    "PTE_API_KEY": "test-api-key",
    "BUCKET_NAME": "test-geodata-bucket",
    "POLESTAR_SECRET_ARN": "arn:aws:secretsmanager:us-east-1:123456789012:secret:polestar",
    "APPSYNC_API_ENDPOINT": "https://appsync.example.com/graphql",
    "APPSYNC_API_KEY": "test-appsync-key",
})

TABLE_NAME = "test-notifications-table"


# DynamoDB fixtures
@pytest.fixture
def notifications_table():
    """Create a mock notifications table with its subscription index."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {"AttributeName": "id", "KeyType": "HASH"},
                {"AttributeName": "timestamp", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "id", "AttributeType": "S"},
                {"AttributeName": "timestamp", "AttributeType": "S"},
                {"AttributeName": "subscription_id", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "subscription-index",
                    "KeySchema": [
                        {"AttributeName": "subscription_id", "KeyType": "HASH"},
                        {"AttributeName": "timestamp", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        table.wait_until_exists()
        yield table


# Sample data fixtures
@pytest.fixture
def webhook_payload() -> Dict[str, Any]:
    """Notification as pushed by the subscription service."""
    return {
        "subscription_id": "sub-123",
        "custom_reference": "port watch",
        "notification": {
            "event": {
                "event_details": {
                    "event_timestamp": "2024-01-01T12:00:00Z",
                    "event_type": "ZONE_ENTRY",
                },
                "vessel_information": {
                    "imo": 9321483,
                    "vessel_name": "EVER GIVEN",
                },
            }
        },
    }


ZONES_CSV = (
    "zone_id,name,zone_type,country_common_name,unlocode,geometry_wkt\n"
    "1001,Rotterdam,Ports,Netherlands,NLRTM,\"POLYGON ((4 51, 5 51, 5 52, 4 52, 4 51))\"\n"
    "1002,North Sea,Seas,,,\"MULTIPOLYGON (((1 1, 2 1, 2 2, 1 1)), ((5 5, 6 5, 6 6, 5 5)))\"\n"
    "1003,Port of Antwerp,Ports,Belgium,BEANR,POINT (4.4 51.2)\n"
    "1004,Broken Zone,Custom,,,NOT WKT\n"
)


@pytest.fixture
def zones_csv() -> str:
    return ZONES_CSV


@pytest.fixture
def fake_s3_client(zones_csv):
    """S3 client stand-in serving the zone and port CSV."""
    client = Mock()
    client.get_object.side_effect = lambda Bucket, Key: {"Body": _BytesBody(zones_csv.encode("utf-8"))}
    return client


class _BytesBody:
    def __init__(self, content: bytes):
        self._content = content

    def read(self) -> bytes:
        return self._content


# Upstream HTTP fixtures
class UpstreamRecorder:
    """Routes upstream calls to a handler function and keeps the requests."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def mock_upstream():
    """Install an UpstreamClient backed by httpx.MockTransport."""
    from devportal.logic import upstream

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> UpstreamRecorder:
        recorder = UpstreamRecorder(handler)
        upstream._upstream_client = upstream.UpstreamClient(transport=httpx.MockTransport(recorder))
        return recorder

    yield install
    upstream._upstream_client = None


@pytest.fixture
def api_gateway_event() -> Callable[..., Dict[str, Any]]:
    """Build API Gateway REST events for the resolvers."""

    def build(
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> Dict[str, Any]:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        return {
            "httpMethod": method,
            "path": path,
            "resource": path,
            "headers": headers or {},
            "multiValueHeaders": {key: [value] for key, value in (headers or {}).items()},
            "body": body,
            "requestContext": {
                "requestId": "test-request-id-123",
                "accountId": "123456789012",
                "stage": "test",
                "httpMethod": method,
                "path": path,
                "protocol": "HTTP/1.1",
                "requestTime": "01/Jan/2024:12:00:00 +0000",
                "requestTimeEpoch": 1704110400000,
                "identity": {
                    "sourceIp": "127.0.0.1",
                    "userAgent": "test-agent/1.0",
                },
            },
            "pathParameters": None,
            "queryStringParameters": query,
            "multiValueQueryStringParameters": {key: [value] for key, value in query.items()} if query else None,
            "stageVariables": None,
            "isBase64Encoded": False,
        }

    return build


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-lambda-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-lambda-function"
    context.memory_limit_in_mb = "512"
    context.get_remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-lambda-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


def response_headers(response: Dict[str, Any]) -> Dict[str, str]:
    """Flatten single and multi value headers of a resolver response."""
    headers = dict(response.get("headers") or {})
    for key, values in (response.get("multiValueHeaders") or {}).items():
        headers.setdefault(key, values[0] if values else "")
    return headers


def response_body(response: Dict[str, Any]) -> Any:
    return json.loads(response["body"])


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset process-wide clients and caches between tests."""
    from devportal.handlers import webhook_notifications_handler
    from devportal.handlers.utils.observability import metrics
    from devportal.logic import geodata, upstream

    upstream._upstream_client = None
    geodata._catalog = None
    webhook_notifications_handler._dal_handler = None
    yield
    upstream._upstream_client = None
    geodata._catalog = None
    webhook_notifications_handler._dal_handler = None
    metrics.clear_metrics()
