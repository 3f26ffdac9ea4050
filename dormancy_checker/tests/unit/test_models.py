"""Unit tests for core models."""

from dataclasses import FrozenInstanceError, replace
from datetime import datetime, timezone

import pytest

from dormancy_checker.core.models import (
    Account,
    AccountStatus,
    AlertType,
    Customer,
    DormancyAlert,
    Enrichment,
    Transaction,
    days_between,
    parse_timestamp,
)
from dormancy_checker.tests.factories import make_activity


class TestTimestamps:
    """Tests for timestamp parsing and day arithmetic."""

    def test_parse_zulu(self):
        dt = parse_timestamp("2024-01-15T10:30:00.000Z")
        assert dt == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_parse_offset_converted_to_utc(self):
        dt = parse_timestamp("2024-01-15T20:30:00-05:00")
        assert dt == datetime(2024, 1, 16, 1, 30, tzinfo=timezone.utc)

    def test_days_between_uses_calendar_days(self):
        """Test 23:59 -> 00:01 next day counts as one day, not zero."""
        earlier = datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc)
        now = datetime(2024, 3, 2, 0, 1, tzinfo=timezone.utc)
        assert days_between(earlier, now) == 1

    def test_days_between_same_day(self):
        earlier = datetime(2024, 3, 1, 0, 1, tzinfo=timezone.utc)
        now = datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc)
        assert days_between(earlier, now) == 0

    def test_days_between_never_negative(self):
        future = datetime(2030, 1, 1, tzinfo=timezone.utc)
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert days_between(future, now) == 0


class TestAccount:
    """Tests for Account model."""

    def test_from_api(self, sample_account_resource):
        account = Account.from_api(sample_account_resource)

        assert account.id == "1001"
        assert account.customer_id == "501"
        assert account.balance == 125050
        assert account.status == AccountStatus.OPEN
        assert account.created_at == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_from_api_closed(self, sample_account_resource):
        sample_account_resource["attributes"]["status"] = "Closed"
        account = Account.from_api(sample_account_resource)
        assert account.status == AccountStatus.CLOSED

    def test_from_api_unknown_status_rejected(self, sample_account_resource):
        sample_account_resource["attributes"]["status"] = "Archived"
        with pytest.raises(ValueError):
            Account.from_api(sample_account_resource)


class TestTransaction:
    def test_from_api(self):
        transaction = Transaction.from_api({
            "type": "bookTransaction",
            "id": "9001",
            "attributes": {"createdAt": "2024-05-01T12:00:00Z", "amount": 500},
            "relationships": {"account": {"data": {"type": "depositAccount", "id": "1001"}}},
        })
        assert transaction.id == "9001"
        assert transaction.account_id == "1001"
        assert transaction.created_at.year == 2024


class TestCustomer:
    """Tests for Customer model."""

    def test_from_api(self, sample_customer_resource):
        customer = Customer.from_api(sample_customer_resource)

        assert customer.id == "501"
        assert customer.full_name == "Maria Lopez"
        assert customer.email == "maria.lopez@example.com"
        assert customer.address == "548 Pleasant Mill Rd Charlotte NC 28203"

    def test_address_with_street2(self, sample_customer_resource):
        sample_customer_resource["attributes"]["address"]["street2"] = "Apt 4"
        customer = Customer.from_api(sample_customer_resource)
        assert customer.address == "548 Pleasant Mill Rd Apt 4 Charlotte NC 28203"

    def test_missing_address(self, sample_customer_resource):
        del sample_customer_resource["attributes"]["address"]
        customer = Customer.from_api(sample_customer_resource)
        assert customer.address is None


class TestAccountActivity:
    """Tests for AccountActivity model."""

    def test_immutable(self):
        activity = make_activity()
        with pytest.raises(FrozenInstanceError):
            activity.balance = 0

    def test_not_enriched_by_default(self):
        activity = make_activity(account_id="1001")
        assert activity.is_enriched is False
        assert activity.customer_name is None
        assert activity.company_name is None
        assert activity.display_name == "Customer c-1001"

    def test_enriched_fields(self):
        activity = replace(
            make_activity(),
            enrichment=Enrichment(customer_name="Maria Lopez", company_name="Acme Farms"),
        )
        assert activity.is_enriched is True
        assert activity.display_name == "Maria Lopez"
        assert activity.company_name == "Acme Farms"

    def test_to_dict(self):
        data = make_activity(days_since_creation=400, days_since_last_activity=300).to_dict()
        assert data["hasActivity"] is True
        assert data["daysSinceLastActivity"] == 300
        assert data["status"] == "Open"
        assert data["lastActivity"] is not None


class TestDormancyAlert:
    """Tests for DormancyAlert aggregates."""

    def test_aggregates(self):
        alert = DormancyAlert(
            type=AlertType.CLOSURE_NEEDED,
            accounts=[
                make_activity("a", days_since_creation=120, balance=1000),
                make_activity("b", days_since_creation=200, balance=2500),
            ],
            reason="test",
        )
        assert alert.total_balance == 3500
        assert alert.average_age == 160
        assert alert.oldest_age == 200

    def test_empty_aggregates(self):
        alert = DormancyAlert(type=AlertType.CLOSURE_NEEDED, accounts=[], reason="")
        assert alert.average_age == 0
        assert alert.oldest_age == 0
