"""
Publishes stored webhook notifications to the AppSync GraphQL API, where
portal clients receive them through subscriptions.
"""

from typing import Any, Dict, Optional

from aws_lambda_powertools.metrics import MetricUnit

from devportal.handlers.models.env_vars import get_stream_env_vars
from devportal.handlers.utils.errors import UpstreamCallError
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.responses import dump_json
from devportal.logic.upstream import UpstreamClient, get_upstream_client

NOTIFICATION_TYPE = 'webhook_notification'

CREATE_NOTIFICATION_MUTATION = """
mutation PublishNotification($input: CreateNotificationInput!) {
  createNotification(input: $input) {
    id
    subscription_id
    message
    type
    timestamp
  }
}
"""


def build_notification_input(item: Dict[str, Any]) -> Dict[str, Any]:
    """Map a notifications table item onto ``CreateNotificationInput``."""
    return {
        'subscription_id': item.get('subscription_id'),
        'message': dump_json(item.get('data') or {}),
        'type': NOTIFICATION_TYPE,
        'timestamp': item.get('timestamp'),
    }


class NotificationPublisher:
    """Sends ``createNotification`` mutations with API key authentication."""

    def __init__(self, endpoint: str, api_key: str, upstream: Optional[UpstreamClient] = None) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.upstream = upstream or get_upstream_client()

    @tracer.capture_method(capture_response=False)
    def publish(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Publish one stored notification.

        Raises:
            UpstreamCallError: Transport failure, non-2xx answer, or GraphQL errors
        """
        response = self.upstream.post(
            self.endpoint,
            json={'query': CREATE_NOTIFICATION_MUTATION, 'variables': {'input': build_notification_input(item)}},
            headers={'x-api-key': self.api_key},
        )

        # GraphQL reports failures in the body with a 200 status
        errors = response.data.get('errors') if isinstance(response.data, dict) else None
        if errors:
            raise UpstreamCallError(
                message='AppSync rejected createNotification',
                status_code=response.status_code,
                body=response.data,
                url=self.endpoint,
            )

        logger.info('Notification published', extra={'subscription_id': item.get('subscription_id')})
        metrics.add_metric(name='NotificationsPublished', unit=MetricUnit.Count, value=1)
        return response.data.get('data') or {}


def get_publisher() -> NotificationPublisher:
    settings = get_stream_env_vars()
    return NotificationPublisher(endpoint=settings.APPSYNC_API_ENDPOINT, api_key=settings.APPSYNC_API_KEY)
