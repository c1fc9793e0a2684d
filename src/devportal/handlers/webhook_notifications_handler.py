"""
Webhook notifications handler.

Receives notifications pushed by the subscription service, optionally runs
an automated compliance screening of the vessel, and stores them in DynamoDB
with a 24 hour TTL. Stored notifications can be listed and purged.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from devportal.dal import DalHandler, get_dal_handler
from devportal.handlers.models.env_vars import get_notifications_env_vars
from devportal.handlers.utils.errors import RequestValidationError, UpstreamCallError
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.proxy import parse_json_body
from devportal.handlers.utils.responses import create_api_response
from devportal.handlers.utils.rest_api_resolver import create_resolver
from devportal.logic.screening import run_auto_screening
from devportal.models.notification import (
    NotificationListOutput,
    StoredNotification,
    StoreNotificationOutput,
    WebhookNotification,
)

app = create_resolver()

DEFAULT_TIMESTAMP_START = '0'

_dal_handler: Optional[DalHandler] = None


def get_notifications_dal() -> DalHandler:
    """Get or create the notifications store for this process."""
    global _dal_handler

    if _dal_handler is None:
        _dal_handler = get_dal_handler(get_notifications_env_vars().NOTIFICATIONS_TABLE)

    return _dal_handler


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _attach_screening(notification: WebhookNotification, payload: Dict[str, Any]) -> None:
    """Screen the vessel and add the verdict to the payload; failures only get logged."""
    if not notification.imo:
        logger.error('No IMO number found in vessel information', extra={
            'subscription_id': notification.subscription_id,
        })
        return

    try:
        result = run_auto_screening(notification.imo)
    except (UpstreamCallError, ValueError) as e:
        # The notification is stored without a verdict
        logger.exception('Automated screening failed', extra={'imo': notification.imo, 'error': str(e)})
        metrics.add_metric(name='ScreeningFailed', unit=MetricUnit.Count, value=1)
        return

    payload['auto_screening'] = result.model_dump()


@app.post('/webhook-notifications')
@tracer.capture_method(capture_response=False)
def store_webhook_notification() -> Response:
    payload = parse_json_body(app)
    if not isinstance(payload, dict):
        raise RequestValidationError(message='Notification body must be a JSON object')

    try:
        notification = WebhookNotification.model_validate(payload)
    except ValidationError as e:
        logger.info('Invalid webhook notification', extra={'error_count': e.error_count()})
        raise RequestValidationError(message='Invalid notification payload') from e

    if notification.wants_auto_screening:
        logger.info('Automated screening requested', extra={'custom_reference': notification.custom_reference})
        _attach_screening(notification, payload)

    settings = get_notifications_env_vars()
    stored = StoredNotification(
        id=str(uuid.uuid4()),
        timestamp=notification.event_timestamp,
        subscription_id=notification.subscription_id,
        data=payload,
        ttl=int(time.time()) + settings.NOTIFICATION_TTL_HOURS * 60 * 60,
    )
    get_notifications_dal().put_notification(stored)

    return create_api_response(
        status_code=201,
        body=StoreNotificationOutput(id=stored.id).model_dump(),
    )


@app.get('/webhook-notifications')
@tracer.capture_method(capture_response=False)
def list_webhook_notifications() -> Response:
    event = app.current_event
    subscription_ids = event.get_query_string_value(name='subscription_ids', default_value='')
    timestamp_start = event.get_query_string_value(name='timestamp_start', default_value='')
    timestamp_end = event.get_query_string_value(name='timestamp_end', default_value='') or _utc_now_iso()

    dal = get_notifications_dal()
    filters: Dict[str, Any] = {}
    items: List[Dict[str, Any]] = []

    if subscription_ids:
        id_list = subscription_ids.split(',')
        for subscription_id in id_list:
            items.extend(dal.query_by_subscription(
                subscription_id,
                timestamp_start or DEFAULT_TIMESTAMP_START,
                timestamp_end,
            ))
        filters['subscription_ids'] = id_list
    elif timestamp_start:
        items = dal.scan_by_timestamp(timestamp_start, timestamp_end)
    else:
        items = dal.scan_all()

    if timestamp_start:
        filters.update({'timestamp_start': timestamp_start, 'timestamp_end': timestamp_end})

    logger.info('Listed webhook notifications', extra={'item_count': len(items), 'filters': filters})
    output = NotificationListOutput(total_count=len(items), data=items, filters=filters)
    return create_api_response(status_code=200, body=output.model_dump())


@app.delete('/webhook-notifications/cleanup')
@tracer.capture_method(capture_response=False)
def cleanup_webhook_notifications() -> Response:
    delete_all = app.current_event.get_query_string_value(name='delete_all', default_value='') == 'true'

    if delete_all:
        deleted_count = get_notifications_dal().delete_all()
        if deleted_count > 0:
            return create_api_response(status_code=200, body={
                'success': True,
                'deletedCount': deleted_count,
                'message': f'Successfully deleted all notifications ({deleted_count} records)',
            })

    return create_api_response(status_code=200, body={
        'success': True,
        'message': 'Notifications will be automatically cleaned up by TTL after 24 hours',
    })


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
