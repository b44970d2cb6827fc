"""Fixtures for server integration tests."""

import pytest


@pytest.fixture
def dispatch_disabled(patched_settings):
    """Settings with the background dispatcher turned off."""
    patched_settings.notifications.dispatch_enabled = False
    return patched_settings
