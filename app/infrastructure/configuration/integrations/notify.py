"""GC Notify integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class NotifySettings(IntegrationSettings):
    """GC Notify API configuration (SMS delivery).

    Environment Variables:
        NOTIFY_USER_NAME: GC Notify service account username (JWT issuer)
        NOTIFY_CLIENT_SECRET: GC Notify service account secret
        NOTIFY_API_URL: GC Notify API endpoint URL
        NOTIFY_SMS_TEMPLATE_ID: Template carrying a single ((message))
            placeholder used for document notifications

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        api_url = settings.notify.NOTIFY_API_URL
        ```
    """

    NOTIFY_USER_NAME: str | None = Field(default=None, alias="NOTIFY_USER_NAME")
    NOTIFY_CLIENT_SECRET: str | None = Field(
        default=None, alias="NOTIFY_CLIENT_SECRET"
    )
    NOTIFY_API_URL: str = Field(default="", alias="NOTIFY_API_URL")
    NOTIFY_SMS_TEMPLATE_ID: str = Field(default="", alias="NOTIFY_SMS_TEMPLATE_ID")
