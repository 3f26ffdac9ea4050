"""
Unit API client for ledger reads.

Read-only: accounts, the latest transaction per account, customers.
"""

import time
from collections.abc import Iterator
from typing import Any

import requests

from dormancy_checker.config import settings
from dormancy_checker.core.exceptions import (
    UnitAPIError,
    UnitNotFoundError,
    error_for_status,
)
from dormancy_checker.core.logging import get_logger
from dormancy_checker.core.models import Account, Customer, Transaction

log = get_logger(__name__)


class UnitClient:
    """Client for Unit API operations."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        max_accounts: int | None = None,
        page_delay: float | None = None,
    ):
        self.base_url = (base_url or settings.unit_api_base_url).rstrip("/")
        self.token = token or settings.unit_api_token
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.unit_timeout_seconds
        self.page_size = page_size or settings.unit_page_size
        self.max_accounts = max_accounts or settings.unit_max_accounts
        self.page_delay = (
            page_delay if page_delay is not None else settings.unit_page_delay_seconds
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/vnd.api+json",
        }

    def _get(
        self,
        endpoint: str,
        params: dict | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Make GET request to the Unit API.

        Raises:
            UnitAPIError: on transport errors and non-2xx responses (the
                subclass matches the status code)
        """
        try:
            response = self.session.get(
                f"{self.base_url}{endpoint}",
                params=params,
                headers=self._headers,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            raise UnitAPIError(f"Unit API request to {endpoint} failed: {e}") from e

        status = response.status_code
        if status >= 400:
            if status == 401:
                log.error("unit_auth_failed", endpoint=endpoint)
            elif status == 429:
                log.error("unit_rate_limited", endpoint=endpoint)
            raise error_for_status(
                status,
                f"Unit API {endpoint} returned {status}: {response.text[:500]}",
            )
        return response.json()

    # Identity

    def check_identity(self) -> dict[str, Any]:
        """Verify the token against /identity before a run."""
        return self._get("/identity").get("data", {})

    # Accounts

    def list_accounts(self, limit: int, offset: int = 0) -> list[Account]:
        """Fetch one page of accounts ordered by creation time ascending."""
        result = self._get(
            "/accounts",
            params={
                "page[limit]": limit,
                "page[offset]": offset,
                "sort": "createdAt",
            },
        )
        return [Account.from_api(item) for item in result.get("data", [])]

    def iter_accounts(self) -> Iterator[Account]:
        """
        Yield every account in the ledger, one page at a time.

        No status filter is applied: Closed and Frozen accounts are yielded
        too. Stops on a short page or at the max_accounts safety cap.
        """
        offset = 0
        fetched = 0
        while True:
            if offset:
                time.sleep(self.page_delay)

            page = self.list_accounts(self.page_size, offset)
            remaining = self.max_accounts - fetched
            for account in page[:remaining]:
                yield account
            fetched += min(len(page), remaining)

            log.debug("accounts_page_fetched", offset=offset, count=len(page))

            if len(page) < self.page_size:
                break
            if fetched >= self.max_accounts:
                log.warning(
                    "account_fetch_cap_reached",
                    max_accounts=self.max_accounts,
                )
                break
            offset += self.page_size

        log.info("accounts_fetched", count=fetched)

    def fetch_all_accounts(self) -> list[Account]:
        return list(self.iter_accounts())

    # Transactions

    def get_latest_transaction(self, account_id: str) -> Transaction | None:
        """
        Get the most recent transaction for an account.

        Returns:
            The transaction, or None when the account has none (empty page
            or 404).
        """
        try:
            result = self._get(
                f"/accounts/{account_id}/transactions",
                params={"page[limit]": 1, "sort": "-createdAt"},
            )
        except UnitNotFoundError:
            return None

        data = result.get("data", [])
        if not data:
            return None
        return Transaction.from_api(data[0])

    # Customers

    def get_customer(self, customer_id: str, timeout: float | None = None) -> Customer:
        """Fetch a customer record."""
        result = self._get(f"/customers/{customer_id}", timeout=timeout)
        return Customer.from_api(result["data"])

    def close(self):
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
