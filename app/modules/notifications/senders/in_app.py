"""In-app sender.

In-app notifications are read back through the lifecycle queries, so
delivery only records that the notification became visible.
"""

import structlog

from modules.notifications.models import Notification, NotificationChannel
from modules.notifications.senders.base import NotificationSender

logger = structlog.get_logger()


class InAppSender(NotificationSender):
    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.IN_APP

    def send(self, notification: Notification) -> bool:
        logger.info(
            "in_app_notification_delivered",
            notification_id=notification.id,
            user_id=notification.user.id,
        )
        return True
