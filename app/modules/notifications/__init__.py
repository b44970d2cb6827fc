# modules/notifications/__init__.py
"""Document expiration notifications.

Schedules notifications about expiring documents, delivers due ones over
the user's enabled channels (email, SMS, Telegram, in-app) and tracks
their status.

Usage:
    from modules.notifications import (
        Notification,
        NotificationChannel,
        NotificationType,
    )
    from modules.notifications.providers import get_notification_service

    service = get_notification_service()
    service.create(
        Notification(
            user=user,
            document=document,
            channel=NotificationChannel.EMAIL,
            type=NotificationType.EXPIRATION_WARNING,
            scheduled_at=scheduled_at,
        )
    )
"""

from modules.notifications.dispatcher import NotificationDispatcher
from modules.notifications.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    NotificationError,
    StoreError,
    ValidationError,
)
from modules.notifications.models import (
    CalendarEventDetails,
    DocumentRef,
    Notification,
    NotificationChannel,
    NotificationPatch,
    NotificationPreference,
    NotificationStatus,
    NotificationType,
    PreferencePatch,
    UserRef,
)
from modules.notifications.preferences import PreferenceService
from modules.notifications.service import NotificationService

__all__ = [
    "CalendarEventDetails",
    "ConflictError",
    "DocumentRef",
    "InvalidTransitionError",
    "NotFoundError",
    "Notification",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationError",
    "NotificationPatch",
    "NotificationPreference",
    "NotificationService",
    "NotificationStatus",
    "NotificationType",
    "PreferencePatch",
    "PreferenceService",
    "StoreError",
    "UserRef",
    "ValidationError",
]
