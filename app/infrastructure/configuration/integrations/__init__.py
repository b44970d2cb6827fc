"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.google import GoogleWorkspaceSettings
from infrastructure.configuration.integrations.notify import NotifySettings
from infrastructure.configuration.integrations.telegram import TelegramSettings

__all__ = [
    "AwsSettings",
    "GoogleWorkspaceSettings",
    "NotifySettings",
    "TelegramSettings",
]
