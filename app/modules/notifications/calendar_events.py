"""Calendar collaborator used when a notification also gets an event."""

from typing import List, Protocol

import structlog

from infrastructure.operations import OperationResult
from integrations.google_workspace import google_calendar

logger = structlog.get_logger()


class CalendarClient(Protocol):
    def create_event(
        self,
        summary: str,
        location: str,
        description: str,
        start: str,
        end: str,
        timezone: str,
        attendee_emails: List[str],
    ) -> OperationResult:
        ...


class GoogleCalendarClient:
    """Creates events on a Google Workspace calendar.

    Args:
        delegated_email: Mailbox whose primary calendar hosts the events.
    """

    def __init__(self, delegated_email: str):
        self.delegated_email = delegated_email

    def create_event(
        self,
        summary: str,
        location: str,
        description: str,
        start: str,
        end: str,
        timezone: str,
        attendee_emails: List[str],
    ) -> OperationResult:
        result = google_calendar.insert_event(
            start=start,
            end=end,
            emails=attendee_emails,
            title=summary,
            delegated_user_email=self.delegated_email,
            description=description,
            location=location,
            time_zone=timezone,
        )
        if not result.is_success:
            logger.warning(
                "calendar_event_creation_failed",
                summary=summary,
                error=result.message,
                error_code=result.error_code,
            )
        return result
