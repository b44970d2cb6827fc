"""Channel senders and the channel-to-sender registry."""

from typing import Dict

from infrastructure.configuration import Settings
from modules.notifications.models import NotificationChannel
from modules.notifications.senders.base import NotificationSender
from modules.notifications.senders.email import EmailSender
from modules.notifications.senders.in_app import InAppSender
from modules.notifications.senders.sms import SmsSender
from modules.notifications.senders.telegram import TelegramSender

SenderRegistry = Dict[NotificationChannel, NotificationSender]


def build_sender_registry(settings: Settings) -> SenderRegistry:
    """Create one sender per channel from application settings."""
    timeout = settings.notifications.send_timeout_seconds
    senders = [
        EmailSender(sender_email=settings.google_workspace.GOOGLE_SENDER_EMAIL),
        SmsSender(timeout=timeout),
        TelegramSender(timeout=timeout),
        InAppSender(),
    ]
    return {sender.channel: sender for sender in senders}


__all__ = [
    "NotificationSender",
    "SenderRegistry",
    "EmailSender",
    "SmsSender",
    "TelegramSender",
    "InAppSender",
    "build_sender_registry",
]
