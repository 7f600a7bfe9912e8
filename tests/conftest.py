"""Shared fixtures."""

from unittest.mock import MagicMock

import pytest

from archivist.config import ArchivistConfig


@pytest.fixture
def config():
    return ArchivistConfig(
        bot_token="xoxb-test",
        admin_token="xoxp-admin",
        signing_secret="8f742231b10e8888abcd99yyyzzz85a5",
        admin_channel="CADMIN",
        team_id="T123",
    )


@pytest.fixture
def api():
    """Mock SlackApi; every call succeeds unless a test says otherwise."""
    mock = MagicMock()
    mock.notify_admin.return_value = True
    return mock
