import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

# Ensure the application package root is on sys.path so importing application
# modules (e.g. `modules.notifications`) works during pytest collection.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest  # noqa: E402

from infrastructure.configuration import Settings  # noqa: E402
from infrastructure.configuration.features import NotificationFeatureSettings  # noqa: E402
from infrastructure.configuration.integrations import (  # noqa: E402
    AwsSettings,
    GoogleWorkspaceSettings,
    NotifySettings,
    TelegramSettings,
)
from infrastructure.services.providers import get_settings  # noqa: E402

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def app_settings():
    """Real Settings built from explicit values, independent of the environment."""
    return Settings(
        PREFIX="test-",
        GIT_SHA="abc123",
        aws=AwsSettings(AWS_REGION="ca-central-1"),
        google_workspace=GoogleWorkspaceSettings(
            GCP_SERVICE_ACCOUNT_KEY_FILE="",
            GOOGLE_SENDER_EMAIL="notifier@example.com",
            GOOGLE_CALENDAR_DELEGATED_EMAIL="",
        ),
        notify=NotifySettings(
            NOTIFY_USER_NAME="notify-user",
            NOTIFY_CLIENT_SECRET="notify-secret",
            NOTIFY_API_URL="https://api.notification.example.ca",
            NOTIFY_SMS_TEMPLATE_ID="template-1",
        ),
        telegram=TelegramSettings(
            TELEGRAM_BOT_TOKEN="123:abc",
            TELEGRAM_API_URL="https://api.telegram.example",
        ),
        notifications=NotificationFeatureSettings(
            NOTIFICATION_STORE_BACKEND="memory",
            NOTIFICATION_DISPATCH_INTERVAL_SECONDS=15,
            NOTIFICATION_DISPATCH_INITIAL_DELAY_SECONDS=10,
            NOTIFICATION_SEND_TIMEOUT_SECONDS=5,
        ),
    )


@pytest.fixture
def patched_settings(app_settings, monkeypatch):
    """Make get_settings() return ``app_settings`` everywhere."""
    get_settings.cache_clear()
    monkeypatch.setattr(
        "infrastructure.services.providers.Settings", lambda: app_settings
    )
    yield app_settings
    get_settings.cache_clear()


@pytest.fixture
def mock_settings():
    """MagicMock settings for code that only reads a few attributes."""
    mock = MagicMock()
    mock.PREFIX = ""
    mock.LOG_LEVEL = "INFO"
    mock.GIT_SHA = "abc123"
    mock.is_production = True
    mock.notifications.dispatch_enabled = True
    mock.notifications.dispatch_interval_seconds = 15
    mock.notifications.dispatch_initial_delay_seconds = 10
    mock.notifications.send_timeout_seconds = 5
    mock.model_dump.return_value = {"PREFIX": "", "aws": {"AWS_REGION": "x"}}
    return mock


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now
