"""Factories creating notification and preference stores from configuration."""

from typing import Optional

import structlog

from infrastructure.configuration import Settings
from modules.notifications.dynamodb_store import (
    DynamoDBNotificationStore,
    DynamoDBPreferenceStore,
)
from modules.notifications.preferences import InMemoryPreferenceStore, PreferenceStore
from modules.notifications.store import InMemoryNotificationStore, NotificationStore

logger = structlog.get_logger()


def create_notification_store(
    settings: Settings, backend: Optional[str] = None
) -> NotificationStore:
    """Create the notification store for the configured backend.

    Args:
        settings: Application settings.
        backend: Optional override ('memory' or 'dynamodb'). Defaults to
            ``settings.notifications.store_backend``.

    Raises:
        ValueError: Unknown backend.

    Examples:
        >>> store = create_notification_store(settings)
        >>> store = create_notification_store(settings, backend="memory")
    """
    backend = backend or settings.notifications.store_backend

    if backend == "memory":
        logger.info("creating_in_memory_notification_store")
        return InMemoryNotificationStore()

    if backend == "dynamodb":
        table_name = settings.notifications.notifications_table_name
        logger.info("creating_dynamodb_notification_store", table_name=table_name)
        return DynamoDBNotificationStore(table_name=table_name)

    raise ValueError(
        f"Unknown notification store backend: {backend}. Supported: memory, dynamodb"
    )


def create_preference_store(
    settings: Settings, backend: Optional[str] = None
) -> PreferenceStore:
    """Create the preference store for the configured backend."""
    backend = backend or settings.notifications.store_backend

    if backend == "memory":
        logger.info("creating_in_memory_preference_store")
        return InMemoryPreferenceStore()

    if backend == "dynamodb":
        table_name = settings.notifications.preferences_table_name
        logger.info("creating_dynamodb_preference_store", table_name=table_name)
        return DynamoDBPreferenceStore(table_name=table_name)

    raise ValueError(
        f"Unknown preference store backend: {backend}. Supported: memory, dynamodb"
    )
