"""Fixtures for AWS integrations tests.

Level: Component-level fixtures for AWS integrations
"""

from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def mock_aws_client(patched_settings):
    """Patch boto3 client creation; yields the client every call receives."""
    with patch("integrations.aws.client.boto3.Session") as mock_session:
        client = MagicMock()
        mock_session.return_value.client.return_value = client
        yield client


@pytest.fixture
def no_sleep():
    """Skip backoff delays."""
    with patch("integrations.aws.client.time.sleep") as mock_sleep:
        yield mock_sleep
