"""Email sender using Google Workspace Gmail."""

from html import escape

import structlog

from integrations.google_workspace import gmail
from modules.notifications.models import Notification, NotificationChannel
from modules.notifications.senders.base import NotificationSender

logger = structlog.get_logger()

SUBJECT_PREFIX = "Document Notification: "

HTML_TEMPLATE = """<html>
    <body>
        <h2>Document Notification</h2>
        <p>Hello {name},</p>
        <p>You have a new notification regarding the document: <strong>{title}</strong></p>
        <p>Type: {type}</p>
        <p>Status: {status}</p>{expiration}
        <hr>
        <p>This is an automated message, please do not reply.</p>
    </body>
</html>
"""


def render_html(notification: Notification) -> str:
    expiration = ""
    if notification.document.expiration_date:
        expiration = (
            f"\n        <p>Expires: "
            f"{notification.document.expiration_date.isoformat()}</p>"
        )
    return HTML_TEMPLATE.format(
        name=escape(notification.user.name or notification.user.id),
        title=escape(notification.document.title),
        type=notification.type.value,
        status=notification.status.value,
        expiration=expiration,
    )


class EmailSender(NotificationSender):
    """Sends an HTML email from the configured Gmail mailbox."""

    def __init__(self, sender_email: str):
        self.sender_email = sender_email

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.EMAIL

    def send(self, notification: Notification) -> bool:
        recipient = notification.user.email
        if not recipient:
            logger.warning(
                "email_recipient_missing",
                notification_id=notification.id,
                user_id=notification.user.id,
            )
            return False

        result = gmail.send_email(
            subject=SUBJECT_PREFIX + notification.document.title,
            body=render_html(notification),
            sender=self.sender_email,
            recipient=recipient,
            content_type="html",
        )
        if not result.is_success:
            logger.error(
                "email_notification_failed",
                notification_id=notification.id,
                user_id=notification.user.id,
                error=result.message,
                error_code=result.error_code,
            )
            return False

        logger.info(
            "email_notification_sent",
            notification_id=notification.id,
            user_id=notification.user.id,
            message_id=(result.data or {}).get("id"),
        )
        return True
