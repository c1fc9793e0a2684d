"""
Data Access Layer (DAL) for webhook notifications.

The handlers depend on the ``DalHandler`` protocol only; ``get_dal_handler``
returns the DynamoDB implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Protocol, runtime_checkable

from devportal.models.notification import StoredNotification


@runtime_checkable
class DalHandler(Protocol):
    """Protocol defining the notifications store interface."""

    def put_notification(self, notification: StoredNotification) -> None:
        ...

    def query_by_subscription(self, subscription_id: str, timestamp_start: str, timestamp_end: str) -> List[Dict[str, Any]]:
        ...

    def scan_by_timestamp(self, timestamp_start: str, timestamp_end: str) -> List[Dict[str, Any]]:
        ...

    def scan_all(self) -> List[Dict[str, Any]]:
        ...

    def delete_all(self) -> int:
        ...


class BaseDalHandler(ABC):
    """Abstract base class for notifications store implementations."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name

    @abstractmethod
    def put_notification(self, notification: StoredNotification) -> None:
        """Write one notification item."""
        pass

    @abstractmethod
    def query_by_subscription(self, subscription_id: str, timestamp_start: str, timestamp_end: str) -> List[Dict[str, Any]]:
        """All notifications of one subscription within a timestamp range."""
        pass

    @abstractmethod
    def scan_by_timestamp(self, timestamp_start: str, timestamp_end: str) -> List[Dict[str, Any]]:
        """All notifications within a timestamp range, any subscription."""
        pass

    @abstractmethod
    def scan_all(self) -> List[Dict[str, Any]]:
        """Every stored notification."""
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every stored notification and return how many were removed."""
        pass


def get_dal_handler(table_name: str) -> DalHandler:
    """
    Factory function to get the notifications store.

    Args:
        table_name: Name of the DynamoDB table

    Returns:
        DAL handler instance
    """
    # Import here to avoid circular imports
    from devportal.dal.db_handler import DynamoDbHandler

    return DynamoDbHandler(table_name)


__all__ = [
    'DalHandler',
    'BaseDalHandler',
    'get_dal_handler'
]
