"""Google Workspace integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class GoogleWorkspaceSettings(IntegrationSettings):
    """Google Workspace configuration settings.

    Environment Variables:
        GCP_SERVICE_ACCOUNT_KEY_FILE: Service account key (JSON content)
        GOOGLE_SENDER_EMAIL: Mailbox used to send notification emails
        GOOGLE_CALENDAR_DELEGATED_EMAIL: User impersonated when creating
            calendar events (defaults to the sender mailbox when empty)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        sender = settings.google_workspace.GOOGLE_SENDER_EMAIL
        ```
    """

    GCP_SERVICE_ACCOUNT_KEY_FILE: str = Field(
        default="", alias="GCP_SERVICE_ACCOUNT_KEY_FILE"
    )
    GOOGLE_SENDER_EMAIL: str = Field(default="", alias="GOOGLE_SENDER_EMAIL")
    GOOGLE_CALENDAR_DELEGATED_EMAIL: str = Field(
        default="", alias="GOOGLE_CALENDAR_DELEGATED_EMAIL"
    )

    @property
    def calendar_user(self) -> str:
        """Mailbox whose primary calendar receives created events."""
        return self.GOOGLE_CALENDAR_DELEGATED_EMAIL or self.GOOGLE_SENDER_EMAIL
