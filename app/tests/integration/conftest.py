"""
Root-level conftest.py for integration tests.

Integration tests run the real notification wiring and mock only at the
system boundaries (Gmail, GC Notify, Telegram, Google Calendar, DynamoDB).
"""

import pytest

from modules.notifications import providers

CACHED_PROVIDERS = (
    providers.get_notification_service,
    providers.get_dispatcher,
    providers.get_sender_registry,
    providers.get_preference_service,
    providers.get_notification_store,
)


@pytest.fixture(autouse=True)
def reset_notification_providers():
    """Give every test its own stores, dispatcher and overlap guard."""
    for provider in CACHED_PROVIDERS:
        provider.cache_clear()
    yield
    for provider in CACHED_PROVIDERS:
        provider.cache_clear()
