"""Shared test fixtures for the Clinic Dashboard test suite."""

from __future__ import annotations

import os
from datetime import date
from unittest.mock import MagicMock

import pytest

# A Wednesday, so the demo week spans Mon 2024-06-17 .. Sun 2024-06-23
TODAY = date(2024, 6, 19)
WEBHOOK = "https://hooks.test/webhook/clinica"


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py reads the test values.
    """
    os.environ.setdefault("METRICS_ENABLED", "false")
    os.environ.setdefault("LOGIN_BYPASS", "true")
    os.environ.setdefault("WEBHOOK_URL", "")
    os.environ.setdefault("WEBHOOK_CONNECTED", "false")
    os.environ.setdefault("AUTH_WEBHOOK_URL", "")
    os.environ.setdefault("CHAT_CONSOLE_URL", "")


def _make_store(*, connected: bool):
    from clinic_dashboard.domain.models import IntegrationService, User, UserRole
    from clinic_dashboard.services.store import WEBHOOK_SERVICE, DashboardStore

    return DashboardStore(
        TODAY,
        user=User(email="admin@odonto.com", role=UserRole.SUPERADMIN),
        services=[
            IntegrationService(
                name=WEBHOOK_SERVICE,
                description="n8n",
                connected=connected,
                webhook_url=WEBHOOK,
            )
        ],
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    """Seeded store with the webhook disconnected (local-only saves)."""
    return _make_store(connected=False)


@pytest.fixture
def connected_store():
    """Seeded store whose n8n integration is connected to ``WEBHOOK``."""
    return _make_store(connected=True)


@pytest.fixture
def webhook():
    """A mock :class:`WebhookClient`; ``post`` answers ``{}`` by default."""
    client = MagicMock()
    client.post.return_value = {}
    return client


@pytest.fixture
def mock_http_response():
    """Factory fixture for creating mock httpx responses."""

    def _make(data: dict | None, status_code: int = 200):
        mock = MagicMock()
        mock.status_code = status_code
        mock.content = b"" if data is None else str(data).encode()
        mock.json.return_value = data
        mock.text = str(data)
        return mock

    return _make
