"""
Shared pytest fixtures.

Config variables are removed from the environment for every test so the
host shell or a local .env never leaks into assertions.
"""

from unittest.mock import AsyncMock

import pytest

from slot_notifier.notifiers import Notifier


CONFIG_VARS = (
    "LOCATION_ID",
    "NOTIFIER",
    "NTFY_TOPIC",
    "NTFY_SERVER",
    "CHECK_INTERVAL",
    "BEFORE_DATE",
    "EARLIEST_TIME",
    "LATEST_TIME",
    "SLOTS_API_URL",
    "SLOTS_LIMIT",
    "NOTIFY_TITLE",
    "NOTIFY_ICON",
    "LOG_LEVEL",
    "LOGS_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock(spec=Notifier)
