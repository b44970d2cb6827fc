"""Unit tests for infrastructure.logging.context module."""

import uuid

import pytest
import structlog

from infrastructure.logging.context import (
    bind_log_context,
    clear_log_context,
    get_correlation_id,
)


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestBindLogContext:
    """Test suite for bind_log_context context manager."""

    def test_auto_generates_correlation_id(self):
        """Correlation ID is generated if not provided."""
        with bind_log_context() as correlation_id:
            assert get_correlation_id() == correlation_id
            uuid.UUID(correlation_id)

    def test_uses_provided_correlation_id(self):
        with bind_log_context(correlation_id="cycle-1") as correlation_id:
            assert correlation_id == "cycle-1"
            assert get_correlation_id() == "cycle-1"

    def test_binds_extra_fields(self):
        with bind_log_context(cycle_id="c-1"):
            assert structlog.contextvars.get_contextvars()["cycle_id"] == "c-1"

    def test_unbinds_on_exit(self):
        with bind_log_context(cycle_id="c-1"):
            pass

        assert get_correlation_id() is None
        assert "cycle_id" not in structlog.contextvars.get_contextvars()

    def test_unbinds_on_exception(self):
        with pytest.raises(RuntimeError):
            with bind_log_context(cycle_id="c-1"):
                raise RuntimeError("boom")

        assert structlog.contextvars.get_contextvars() == {}

    def test_keeps_unrelated_context(self):
        structlog.contextvars.bind_contextvars(service="notifier")

        with bind_log_context(cycle_id="c-1"):
            pass

        assert structlog.contextvars.get_contextvars() == {"service": "notifier"}
