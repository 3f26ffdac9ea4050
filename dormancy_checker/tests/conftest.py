"""
Shared pytest fixtures for dormancy_checker tests.
"""

from datetime import datetime

import pytest

from dormancy_checker.tests.factories import NOW, FakeUnitClient


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_client() -> FakeUnitClient:
    return FakeUnitClient()


@pytest.fixture
def sample_account_resource() -> dict:
    """Unit depositAccount resource as returned by GET /accounts."""
    return {
        "type": "depositAccount",
        "id": "1001",
        "attributes": {
            "createdAt": "2024-01-15T10:30:00.000Z",
            "name": "Maria Lopez",
            "currency": "USD",
            "balance": 125050,
            "hold": 0,
            "available": 125050,
            "status": "Open",
        },
        "relationships": {
            "customer": {"data": {"type": "individualCustomer", "id": "501"}},
        },
    }


@pytest.fixture
def sample_customer_resource() -> dict:
    """Unit individualCustomer resource."""
    return {
        "type": "individualCustomer",
        "id": "501",
        "attributes": {
            "createdAt": "2024-01-15T10:00:00.000Z",
            "fullName": {"first": "Maria", "last": "Lopez"},
            "email": "maria.lopez@example.com",
            "address": {
                "street": "548 Pleasant Mill Rd",
                "city": "Charlotte",
                "state": "NC",
                "postalCode": "28203",
                "country": "US",
            },
            "status": "Active",
        },
    }


@pytest.fixture
def mock_settings(monkeypatch):
    """Environment for code paths that build clients from settings."""
    monkeypatch.setenv("UNIT_API_TOKEN", "test-unit-token")
    monkeypatch.setenv("UNIT_API_BASE_URL", "https://api.s.unit.sh")
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.com/services/T000/B000/XXX")
