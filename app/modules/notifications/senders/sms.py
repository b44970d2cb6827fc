"""SMS sender using GC Notify."""

import requests
import structlog

from integrations.notify import client as notify
from modules.notifications.models import Notification, NotificationChannel
from modules.notifications.senders.base import NotificationSender

logger = structlog.get_logger()

# GC Notify rejects longer SMS bodies
MAX_SMS_LENGTH = 1600


def render_text(notification: Notification) -> str:
    text = f"{notification.document.title}: {notification.type.value}"
    if notification.document.expiration_date:
        text += f" (expires {notification.document.expiration_date.isoformat()})"
    text += ". This is an automated message."
    return text[:MAX_SMS_LENGTH]


class SmsSender(NotificationSender):
    """Sends a text message; success means GC Notify answered 201."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.SMS

    def send(self, notification: Notification) -> bool:
        phone_number = notification.user.phone_number
        if not phone_number:
            logger.warning(
                "sms_phone_number_missing",
                notification_id=notification.id,
                user_id=notification.user.id,
            )
            return False

        try:
            response = notify.send_sms(
                phone_number,
                render_text(notification),
                timeout=self.timeout,
                reference=notification.id,
            )
        except (requests.RequestException, ValueError) as e:
            logger.error(
                "sms_notification_failed",
                notification_id=notification.id,
                user_id=notification.user.id,
                error=str(e),
            )
            return False

        if response.status_code != 201:
            logger.error(
                "sms_notification_rejected",
                notification_id=notification.id,
                user_id=notification.user.id,
                response_code=response.status_code,
            )
            return False

        logger.info(
            "sms_notification_sent",
            notification_id=notification.id,
            user_id=notification.user.id,
        )
        return True
