"""Application-scoped notification singletons.

Every provider is cached so the scheduler, the lifecycle service and any
embedding code share the same stores, dispatcher and overlap guard.
"""

from functools import lru_cache

from infrastructure.services.providers import get_settings
from modules.notifications.calendar_events import GoogleCalendarClient
from modules.notifications.dispatcher import NotificationDispatcher
from modules.notifications.factory import (
    create_notification_store,
    create_preference_store,
)
from modules.notifications.preferences import PreferenceService
from modules.notifications.senders import SenderRegistry, build_sender_registry
from modules.notifications.service import NotificationService
from modules.notifications.store import NotificationStore


@lru_cache
def get_notification_store() -> NotificationStore:
    return create_notification_store(get_settings())


@lru_cache
def get_preference_service() -> PreferenceService:
    return PreferenceService(create_preference_store(get_settings()))


@lru_cache
def get_sender_registry() -> SenderRegistry:
    return build_sender_registry(get_settings())


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(
        store=get_notification_store(),
        preferences=get_preference_service(),
        senders=get_sender_registry(),
    )


@lru_cache
def get_notification_service() -> NotificationService:
    """Lifecycle service wired with the shared dispatcher.

    A Google Calendar client is attached when a calendar mailbox is
    configured.
    """
    google = get_settings().google_workspace
    calendar = (
        GoogleCalendarClient(delegated_email=google.calendar_user)
        if google.calendar_user
        else None
    )
    return NotificationService(
        store=get_notification_store(),
        dispatcher=get_dispatcher(),
        calendar=calendar,
    )
