"""Telegram sender using the Bot API."""

import structlog

from integrations.telegram import client as telegram
from modules.notifications.models import Notification, NotificationChannel
from modules.notifications.senders.base import NotificationSender, summary_lines

logger = structlog.get_logger()


def render_text(notification: Notification) -> str:
    """Markdown message body; document fields are escaped."""
    lines = ["📄 *Document Notification*", ""]
    lines.extend(
        telegram.escape_markdown(line) for line in summary_lines(notification)
    )
    lines.extend(["", "This is an automated message."])
    return "\n".join(lines)


class TelegramSender(NotificationSender):
    """Sends a Markdown message to the user's Telegram chat.

    Users without a chat id cannot be reached; no request is made.
    """

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.TELEGRAM

    def send(self, notification: Notification) -> bool:
        chat_id = notification.user.telegram_chat_id
        if not chat_id:
            logger.warning(
                "telegram_chat_id_missing",
                notification_id=notification.id,
                user_id=notification.user.id,
            )
            return False

        result = telegram.send_message(
            chat_id,
            render_text(notification),
            parse_mode="Markdown",
            timeout=self.timeout,
        )
        if result.is_success:
            logger.info(
                "telegram_notification_sent",
                notification_id=notification.id,
                chat_id=chat_id,
            )
        return result.is_success
