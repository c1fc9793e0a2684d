"""
Webhook notification models.

Incoming notifications are validated for the handful of fields the portal
reads; everything else the vendor sends is kept as-is.
"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

AUTO_SCREENING_MARKER = 'AUTO_SCREENING'


class EventDetails(BaseModel):
    model_config = ConfigDict(extra='allow')

    event_timestamp: Annotated[str, Field(
        min_length=1,
        description='ISO timestamp of the vessel event',
        examples=['2024-01-01T12:00:00Z']
    )]


class VesselInformation(BaseModel):
    model_config = ConfigDict(extra='allow')

    imo: Optional[str] = None

    @field_validator('imo', mode='before')
    @classmethod
    def coerce_imo(cls, v: Any) -> Optional[str]:
        """IMO numbers sometimes arrive as JSON numbers."""
        if v is None or v == '':
            return None
        return str(v)


class NotificationEvent(BaseModel):
    model_config = ConfigDict(extra='allow')

    event_details: EventDetails
    vessel_information: Optional[VesselInformation] = None


class NotificationBody(BaseModel):
    model_config = ConfigDict(extra='allow')

    event: NotificationEvent


class WebhookNotification(BaseModel):
    """Notification pushed by the subscription service."""

    model_config = ConfigDict(extra='allow')

    subscription_id: Annotated[str, Field(
        min_length=1,
        description='Subscription that produced the notification'
    )]

    notification: NotificationBody

    custom_reference: Annotated[Optional[str], Field(
        default=None,
        description='Free text reference chosen by the subscriber'
    )] = None

    @property
    def event_timestamp(self) -> str:
        return self.notification.event.event_details.event_timestamp

    @property
    def imo(self) -> Optional[str]:
        vessel = self.notification.event.vessel_information
        return vessel.imo if vessel else None

    @property
    def wants_auto_screening(self) -> bool:
        return bool(self.custom_reference) and AUTO_SCREENING_MARKER in self.custom_reference


class StoredNotification(BaseModel):
    """Item written to the notifications table."""

    id: Annotated[str, Field(description='Generated notification id')]
    timestamp: Annotated[str, Field(description='Event timestamp, table sort key')]
    subscription_id: Annotated[str, Field(description='Subscription id, index partition key')]
    data: Annotated[Dict[str, Any], Field(description='Notification body as received')]
    ttl: Annotated[int, Field(description='Epoch seconds after which DynamoDB expires the item')]


class StoreNotificationOutput(BaseModel):
    success: bool = True
    id: str
    message: str = 'Notification stored successfully'


class NotificationListOutput(BaseModel):
    total_count: int
    data: List[Dict[str, Any]]
    filters: Dict[str, Any]
