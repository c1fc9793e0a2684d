"""
Notifications table stream handler.

Every inserted or modified notification is forwarded to AppSync. A failed
publish is logged and counted; the rest of the batch is still processed and
the batch is never retried.
"""

from typing import Any, Dict

from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.data_classes import DynamoDBStreamEvent, event_source
from aws_lambda_powertools.utilities.data_classes.dynamo_db_stream_event import DynamoDBRecordEventName
from aws_lambda_powertools.utilities.typing import LambdaContext

from devportal.handlers.utils.errors import UpstreamCallError
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.logic.notification_publisher import get_publisher

PUBLISHED_EVENT_NAMES = (DynamoDBRecordEventName.INSERT, DynamoDBRecordEventName.MODIFY)


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
@event_source(data_class=DynamoDBStreamEvent)
def lambda_handler(event: DynamoDBStreamEvent, context: LambdaContext) -> Dict[str, Any]:
    publisher = get_publisher()
    published = 0
    failed = 0
    skipped = 0

    for record in event.records:
        if record.event_name not in PUBLISHED_EVENT_NAMES or record.dynamodb is None:
            skipped += 1
            continue

        item = record.dynamodb.new_image
        try:
            publisher.publish(item)
            published += 1
        except UpstreamCallError as e:
            failed += 1
            logger.error('Error publishing to AppSync', extra={
                'event_id': record.event_id,
                'subscription_id': item.get('subscription_id'),
                'status_code': e.status_code,
                'error': e.message,
            })
            metrics.add_metric(name='NotificationPublishFailed', unit=MetricUnit.Count, value=1)

    logger.info('Stream batch processed', extra={'published': published, 'failed': failed, 'skipped': skipped})
    return {'published': published, 'failed': failed, 'skipped': skipped}
