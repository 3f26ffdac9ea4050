"""Unit tests for the Unit API client."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from structlog.testing import capture_logs

from dormancy_checker.core.exceptions import (
    UnitAPIError,
    UnitAuthError,
    UnitNotFoundError,
    UnitRateLimitError,
)
from dormancy_checker.services.unit import UnitClient


def _account_resource(index: int) -> dict:
    return {
        "type": "depositAccount",
        "id": str(index),
        "attributes": {
            "createdAt": "2024-01-15T10:30:00.000Z",
            "balance": index * 100,
            "status": "Open",
        },
        "relationships": {"customer": {"data": {"type": "individualCustomer", "id": f"c{index}"}}},
    }


def _response(status: int = 200, data=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.json.return_value = {"data": [] if data is None else data}
    response.text = text
    return response


def _pages(*sizes: int) -> list[MagicMock]:
    """One response per page, with consecutive account IDs."""
    responses = []
    start = 0
    for size in sizes:
        responses.append(_response(data=[_account_resource(i) for i in range(start, start + size)]))
        start += size
    return responses


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return UnitClient(
        base_url="https://api.s.unit.sh/",
        token="test-token",
        session=session,
        page_size=100,
        max_accounts=50_000,
        page_delay=0.05,
    )


class TestRequests:
    """Tests for request construction and error mapping."""

    def test_headers_and_url(self, client, session):
        session.get.return_value = _response(data={"id": "org-1"})
        client.check_identity()

        args, kwargs = session.get.call_args
        assert args[0] == "https://api.s.unit.sh/identity"
        assert kwargs["headers"]["Authorization"] == "Bearer test-token"
        assert kwargs["headers"]["Content-Type"] == "application/vnd.api+json"
        assert kwargs["timeout"] == client.timeout

    @pytest.mark.parametrize(
        "status, error",
        [
            (401, UnitAuthError),
            (403, UnitAuthError),
            (404, UnitNotFoundError),
            (429, UnitRateLimitError),
        ],
    )
    def test_status_mapping(self, client, session, status, error):
        session.get.return_value = _response(status=status, text="error body")
        with pytest.raises(error) as exc_info:
            client.list_accounts(100)
        assert exc_info.value.status_code == status

    def test_server_error_is_generic(self, client, session):
        session.get.return_value = _response(status=503)
        with pytest.raises(UnitAPIError) as exc_info:
            client.list_accounts(100)
        assert type(exc_info.value) is UnitAPIError
        assert exc_info.value.status_code == 503

    def test_transport_error_wrapped(self, client, session):
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(UnitAPIError) as exc_info:
            client.list_accounts(100)
        assert exc_info.value.status_code is None


@patch("dormancy_checker.services.unit.time.sleep")
class TestPagination:
    """Tests for iter_accounts pagination."""

    def test_short_last_page_stops_without_extra_request(self, mock_sleep, client, session):
        session.get.side_effect = _pages(100, 100, 50)

        accounts = client.fetch_all_accounts()

        assert len(accounts) == 250
        assert session.get.call_count == 3
        assert [a.id for a in accounts[:2]] == ["0", "1"]

    def test_full_last_page_triggers_one_more_request(self, mock_sleep, client, session):
        session.get.side_effect = _pages(100, 100, 0)

        accounts = client.fetch_all_accounts()

        assert len(accounts) == 200
        assert session.get.call_count == 3

    def test_offsets_and_sort(self, mock_sleep, client, session):
        session.get.side_effect = _pages(100, 10)
        client.fetch_all_accounts()

        first, second = (c.kwargs["params"] for c in session.get.call_args_list)
        assert first == {"page[limit]": 100, "page[offset]": 0, "sort": "createdAt"}
        assert second["page[offset]"] == 100

    def test_pacing_delay_between_pages_only(self, mock_sleep, client, session):
        session.get.side_effect = _pages(100, 100, 50)
        client.fetch_all_accounts()

        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(0.05)

    def test_single_short_page_no_delay(self, mock_sleep, client, session):
        session.get.side_effect = _pages(3)
        assert len(client.fetch_all_accounts()) == 3
        mock_sleep.assert_not_called()

    def test_safety_cap_logs_warning(self, mock_sleep, session):
        client = UnitClient(
            base_url="https://api.s.unit.sh",
            token="t",
            session=session,
            page_size=100,
            max_accounts=150,
            page_delay=0,
        )
        session.get.side_effect = _pages(100, 100, 100)

        with capture_logs() as logs:
            accounts = client.fetch_all_accounts()

        assert len(accounts) == 150
        assert session.get.call_count == 2
        assert any(
            entry["event"] == "account_fetch_cap_reached" and entry["log_level"] == "warning"
            for entry in logs
        )

    def test_closed_and_frozen_not_filtered(self, mock_sleep, client, session):
        resources = [_account_resource(i) for i in range(3)]
        resources[1]["attributes"]["status"] = "Closed"
        resources[2]["attributes"]["status"] = "Frozen"
        session.get.side_effect = [_response(data=resources)]

        statuses = [a.status.value for a in client.fetch_all_accounts()]
        assert statuses == ["Open", "Closed", "Frozen"]

    def test_page_failure_aborts(self, mock_sleep, client, session):
        session.get.side_effect = [*_pages(100), _response(status=500)]
        with pytest.raises(UnitAPIError):
            client.fetch_all_accounts()


class TestLatestTransaction:
    """Tests for get_latest_transaction."""

    def test_returns_most_recent(self, client, session):
        session.get.return_value = _response(data=[{
            "type": "bookTransaction",
            "id": "9001",
            "attributes": {"createdAt": "2024-05-01T12:00:00Z"},
            "relationships": {"account": {"data": {"id": "1001"}}},
        }])

        transaction = client.get_latest_transaction("1001")

        assert transaction.id == "9001"
        args, kwargs = session.get.call_args
        assert args[0].endswith("/accounts/1001/transactions")
        assert kwargs["params"] == {"page[limit]": 1, "sort": "-createdAt"}

    def test_empty_page_is_no_activity(self, client, session):
        session.get.return_value = _response(data=[])
        assert client.get_latest_transaction("1001") is None

    def test_not_found_is_no_activity(self, client, session):
        session.get.return_value = _response(status=404)
        assert client.get_latest_transaction("1001") is None

    def test_forbidden_raises(self, client, session):
        session.get.return_value = _response(status=403)
        with pytest.raises(UnitAuthError):
            client.get_latest_transaction("1001")


class TestCustomer:
    def test_get_customer_with_timeout(self, client, session, sample_customer_resource):
        session.get.return_value = _response(data=sample_customer_resource)

        customer = client.get_customer("501", timeout=5)

        assert customer.full_name == "Maria Lopez"
        assert session.get.call_args.kwargs["timeout"] == 5
