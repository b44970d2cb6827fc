"""Integration tests for server.lifespan module."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jobs.scheduled_tasks import NotificationScheduler
from server.lifespan import (
    _get_logger,
    _list_configs,
    _start_notification_scheduler,
    _stop_notification_scheduler,
    lifespan,
)


@pytest.mark.integration
def test_lifespan_get_logger_returns_logger(mock_settings):
    """Test that _get_logger returns a configured logger."""
    # Act
    logger = _get_logger(mock_settings)

    # Assert
    assert logger is not None


@pytest.mark.integration
def test_lifespan_list_configs_logs_settings(mock_settings):
    """Test that _list_configs logs base settings and each settings group."""
    # Arrange
    mock_logger = MagicMock()

    # Act
    _list_configs(mock_settings, mock_logger)

    # Assert
    events = [call.args[0] for call in mock_logger.info.call_args_list]
    assert events[0] == "configuration_initialized"
    assert "configuration_loaded" in events
    loaded = mock_logger.info.call_args_list[1].kwargs
    assert loaded == {"config_setting": "aws", "keys": ["AWS_REGION"]}


@pytest.mark.integration
def test_start_scheduler_skipped_when_dispatch_disabled(mock_settings):
    """Test that no scheduler starts when dispatch is disabled."""
    # Arrange
    mock_settings.notifications.dispatch_enabled = False
    mock_logger = MagicMock()

    # Act
    scheduler = _start_notification_scheduler(mock_settings, mock_logger)

    # Assert
    assert scheduler is None
    mock_logger.info.assert_called_with(
        "notification_scheduler_skipped", reason="dispatch_disabled"
    )


@pytest.mark.integration
@patch("server.lifespan.NotificationScheduler")
@patch("server.lifespan.get_dispatcher")
def test_start_scheduler_uses_configured_timing(
    mock_get_dispatcher, mock_scheduler_cls, mock_settings
):
    """Test that the scheduler receives the shared dispatcher and timing."""
    # Act
    scheduler = _start_notification_scheduler(mock_settings, MagicMock())

    # Assert
    mock_scheduler_cls.assert_called_once_with(
        dispatcher=mock_get_dispatcher.return_value,
        interval_seconds=15,
        initial_delay_seconds=10,
    )
    scheduler.start.assert_called_once_with()


@pytest.mark.integration
def test_stop_scheduler_handles_none():
    """Test that stopping without a scheduler is a no-op."""
    # Act & Assert - should not raise
    _stop_notification_scheduler(None)


@pytest.mark.integration
def test_stop_scheduler_stops_running_scheduler():
    """Test that stop is forwarded to the scheduler."""
    # Arrange
    scheduler = MagicMock()

    # Act
    _stop_notification_scheduler(scheduler)

    # Assert
    scheduler.stop.assert_called_once_with()


@pytest.mark.integration
def test_lifespan_starts_and_stops_scheduler(patched_settings):
    """Test that the scheduler thread lives exactly as long as the app."""
    # Arrange
    patched_settings.notifications.dispatch_initial_delay_seconds = 30
    app = FastAPI(lifespan=lifespan)

    # Act
    with TestClient(app):
        scheduler = app.state.notification_scheduler
        running_during_lifespan = scheduler.is_running

    # Assert
    assert isinstance(scheduler, NotificationScheduler)
    assert running_during_lifespan is True
    assert scheduler.is_running is False
    assert app.state.settings is patched_settings


@pytest.mark.integration
def test_lifespan_without_dispatch(dispatch_disabled):
    """Test that the app starts without a scheduler when dispatch is off."""
    # Arrange
    app = FastAPI(lifespan=lifespan)

    # Act
    with TestClient(app):
        scheduler = app.state.notification_scheduler

    # Assert
    assert scheduler is None
