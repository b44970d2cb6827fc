"""Notification dispatch feature settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings


class NotificationFeatureSettings(FeatureSettings):
    """Document notification scheduling and storage configuration.

    Environment Variables:
        NOTIFICATION_DISPATCH_ENABLED: Run the periodic dispatch job
            (default: True)
        NOTIFICATION_DISPATCH_INITIAL_DELAY_SECONDS: Delay after startup
            before the first cycle (default: 10)
        NOTIFICATION_DISPATCH_INTERVAL_SECONDS: Interval between cycles
            (default: 15)
        NOTIFICATION_STORE_BACKEND: 'memory' or 'dynamodb' (default: memory)
        NOTIFICATIONS_TABLE_NAME: DynamoDB table for notifications
        NOTIFICATION_PREFERENCES_TABLE_NAME: DynamoDB table for preferences
        NOTIFICATION_SEND_TIMEOUT_SECONDS: HTTP timeout for a single
            channel delivery (default: 30)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.notifications.dispatch_enabled:
            interval = settings.notifications.dispatch_interval_seconds
        ```
    """

    dispatch_enabled: bool = Field(
        default=True,
        alias="NOTIFICATION_DISPATCH_ENABLED",
        description="Run the periodic notification dispatch job",
    )
    dispatch_initial_delay_seconds: int = Field(
        default=10,
        alias="NOTIFICATION_DISPATCH_INITIAL_DELAY_SECONDS",
        description="Seconds to wait after startup before the first cycle",
    )
    dispatch_interval_seconds: int = Field(
        default=15,
        alias="NOTIFICATION_DISPATCH_INTERVAL_SECONDS",
        description="Seconds between dispatch cycles",
    )
    store_backend: str = Field(
        default="memory",
        alias="NOTIFICATION_STORE_BACKEND",
        description="Store backend: 'memory' or 'dynamodb'",
    )
    notifications_table_name: str = Field(
        default="document-notifications",
        alias="NOTIFICATIONS_TABLE_NAME",
    )
    preferences_table_name: str = Field(
        default="document-notification-preferences",
        alias="NOTIFICATION_PREFERENCES_TABLE_NAME",
    )
    send_timeout_seconds: int = Field(
        default=30,
        alias="NOTIFICATION_SEND_TIMEOUT_SECONDS",
        description="Timeout for a single delivery request (seconds)",
    )

    @field_validator("dispatch_interval_seconds", "send_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Intervals and timeouts must be strictly positive."""
        if v < 1:
            raise ValueError("must be at least 1 second")
        return v

    @field_validator("dispatch_initial_delay_seconds")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("store_backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        backend = v.strip().lower()
        if backend not in ("memory", "dynamodb"):
            raise ValueError(f"Unknown store backend: {v}. Supported: memory, dynamodb")
        return backend
