"""Infrastructure configuration module - public API.

Centralized configuration management using Pydantic BaseSettings with
domain-based organization.

Exports:
    Settings: Main settings class (use get_settings() for the singleton)
    NotificationFeatureSettings: Dispatch/storage settings (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    backend = settings.notifications.store_backend
    bot_token = settings.telegram.TELEGRAM_BOT_TOKEN
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.features.notifications import (
    NotificationFeatureSettings,
)

__all__ = ["Settings", "NotificationFeatureSettings"]
