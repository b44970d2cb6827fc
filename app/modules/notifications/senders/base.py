"""Channel sender abstract base class."""

from abc import ABC, abstractmethod

from modules.notifications.models import Notification, NotificationChannel


class NotificationSender(ABC):
    """Delivers a notification over one channel.

    ``send`` returns False for expected delivery failures (missing
    contact details, provider rejection). Unexpected errors may raise;
    the dispatcher records both as FAILED.
    """

    @property
    @abstractmethod
    def channel(self) -> NotificationChannel:
        """Channel this sender handles."""

    @abstractmethod
    def send(self, notification: Notification) -> bool:
        """Deliver ``notification``. Returns True when the provider accepted it."""


def summary_lines(notification: Notification) -> list[str]:
    """Document, type and status lines shared by the text renderings."""
    lines = [
        f"Document: {notification.document.title}",
        f"Type: {notification.type.value}",
        f"Status: {notification.status.value}",
    ]
    if notification.document.expiration_date:
        lines.append(f"Expires: {notification.document.expiration_date.isoformat()}")
    return lines
