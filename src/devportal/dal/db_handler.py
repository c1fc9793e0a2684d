"""
DynamoDB implementation of the notifications store.

Table layout: partition key ``id``, sort key ``timestamp``, and the global
secondary index ``subscription-index`` (``subscription_id`` / ``timestamp``).
Every read follows ``LastEvaluatedKey`` until the result set is exhausted.
"""

import json
from decimal import Decimal
from typing import Any, Callable, Dict, List

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from devportal.dal import BaseDalHandler
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.models.notification import StoredNotification

SUBSCRIPTION_INDEX = 'subscription-index'


def _to_dynamodb_item(notification: StoredNotification) -> Dict[str, Any]:
    # DynamoDB rejects Python floats
    return json.loads(notification.model_dump_json(), parse_float=Decimal)


class DynamoDbHandler(BaseDalHandler):
    """DynamoDB implementation of the notifications store."""

    def __init__(self, table_name: str) -> None:
        super().__init__(table_name)
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.debug(f'DynamoDB handler initialized for table: {table_name}')

    def _collect(self, operation: Callable[..., Dict[str, Any]], **kwargs: Any) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        while True:
            response = operation(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            kwargs['ExclusiveStartKey'] = last_key

    @tracer.capture_method
    def put_notification(self, notification: StoredNotification) -> None:
        """
        Write a notification item.

        Args:
            notification: Item to store

        Raises:
            ClientError: If DynamoDB operation fails
        """
        try:
            self.table.put_item(Item=_to_dynamodb_item(notification))
        except ClientError as e:
            error_code = e.response['Error']['Code']
            logger.error(f'DynamoDB error storing notification: {error_code}', extra={
                'notification_id': notification.id,
                'subscription_id': notification.subscription_id,
            })
            raise

        logger.info('Notification stored', extra={
            'notification_id': notification.id,
            'subscription_id': notification.subscription_id,
        })
        tracer.put_annotation('notification_stored', notification.id)
        metrics.add_metric(name='NotificationsStored', unit=MetricUnit.Count, value=1)

    @tracer.capture_method(capture_response=False)
    def query_by_subscription(self, subscription_id: str, timestamp_start: str, timestamp_end: str) -> List[Dict[str, Any]]:
        items = self._collect(
            self.table.query,
            IndexName=SUBSCRIPTION_INDEX,
            KeyConditionExpression=Key('subscription_id').eq(subscription_id)
            & Key('timestamp').between(timestamp_start, timestamp_end),
        )
        logger.debug('Queried notifications by subscription', extra={
            'subscription_id': subscription_id,
            'item_count': len(items),
        })
        return items

    @tracer.capture_method(capture_response=False)
    def scan_by_timestamp(self, timestamp_start: str, timestamp_end: str) -> List[Dict[str, Any]]:
        return self._collect(
            self.table.scan,
            FilterExpression=Attr('timestamp').between(timestamp_start, timestamp_end),
        )

    @tracer.capture_method(capture_response=False)
    def scan_all(self) -> List[Dict[str, Any]]:
        return self._collect(self.table.scan)

    @tracer.capture_method
    def delete_all(self) -> int:
        """
        Delete every notification with batched writes.

        Returns:
            Number of deleted items
        """
        keys = self._collect(
            self.table.scan,
            ProjectionExpression='#id, #ts',
            ExpressionAttributeNames={'#id': 'id', '#ts': 'timestamp'},
        )

        with self.table.batch_writer() as batch:
            for key in keys:
                batch.delete_item(Key={'id': key['id'], 'timestamp': key['timestamp']})

        logger.info('Deleted all notifications', extra={'deleted_count': len(keys)})
        metrics.add_metric(name='NotificationsDeleted', unit=MetricUnit.Count, value=len(keys))
        return len(keys)
