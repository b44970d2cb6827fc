"""Google Calendar API integration."""

from typing import List

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult
from integrations.google_workspace.google_service import execute_google_api_call

logger = get_module_logger()

CALENDAR_EVENTS_SCOPE = "https://www.googleapis.com/auth/calendar.events"


def insert_event(
    start: str,
    end: str,
    emails: List[str],
    title: str,
    delegated_user_email: str,
    description: str = "",
    location: str = "",
    time_zone: str = "UTC",
) -> OperationResult:
    """Create an event on the delegated user's primary calendar.

    Attendees receive an invitation (``sendUpdates="all"``).

    Args:
        start: ISO 8601 start date-time (e.g. '2025-04-10T10:00:00').
        end: ISO 8601 end date-time.
        emails: Attendee email addresses; blank entries are ignored.
        title: Event summary.
        delegated_user_email: Calendar owner to impersonate.
        description: Event description.
        location: Event location.
        time_zone: IANA time zone applied to start and end.

    Returns:
        OperationResult whose data holds the created event resource.
    """
    body = {
        "summary": title,
        "location": location,
        "description": description,
        "start": {"dateTime": start, "timeZone": time_zone},
        "end": {"dateTime": end, "timeZone": time_zone},
        "attendees": [{"email": email.strip()} for email in emails if email and email.strip()],
    }

    result = execute_google_api_call(
        "calendar",
        "v3",
        "events",
        "insert",
        scopes=[CALENDAR_EVENTS_SCOPE],
        delegated_user_email=delegated_user_email,
        calendarId="primary",
        sendUpdates="all",
        body=body,
    )
    if result.is_success:
        logger.info(
            "calendar_event_created",
            event_id=(result.data or {}).get("id"),
            html_link=(result.data or {}).get("htmlLink"),
        )
    return result
