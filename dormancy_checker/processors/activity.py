"""
Activity resolution: one AccountActivity per Unit account.
"""

import time
from collections.abc import Iterable
from datetime import datetime, timezone

from dormancy_checker.config import settings
from dormancy_checker.core.exceptions import (
    UnitAPIError,
    UnitAuthError,
    UnitRateLimitError,
)
from dormancy_checker.core.logging import get_logger
from dormancy_checker.core.models import Account, AccountActivity, days_between
from dormancy_checker.services.unit import UnitClient

log = get_logger(__name__)


class ActivityResolver:
    """
    Determine per account whether it has any transactions and how recent
    the latest one is.

    Accounts of every status pass through here so the status tallies stay
    accurate; filtering happens in the classifier.

    When transaction lookups are disabled (token without the transactions
    scope), accounts are resolved from their creation date only and report
    no activity.
    """

    def __init__(
        self,
        client: UnitClient,
        transaction_lookup_enabled: bool | None = None,
        pacing_delay: float | None = None,
        pacing_batch: int | None = None,
    ):
        self.client = client
        self.transaction_lookup_enabled = (
            settings.transaction_lookup_enabled
            if transaction_lookup_enabled is None
            else transaction_lookup_enabled
        )
        self.pacing_delay = (
            settings.activity_pacing_delay_seconds if pacing_delay is None else pacing_delay
        )
        self.pacing_batch = pacing_batch or settings.activity_pacing_batch

    def resolve(self, account: Account, now: datetime | None = None) -> AccountActivity:
        """
        Build the activity record for one account.

        Raises:
            UnitAPIError: if the transaction lookup fails for a reason other
                than "no transactions"
            KeyError, ValueError: if the transaction payload is malformed
        """
        now = now or datetime.now(timezone.utc)

        last_activity = None
        if self.transaction_lookup_enabled:
            transaction = self.client.get_latest_transaction(account.id)
            if transaction is not None:
                last_activity = transaction.created_at

        return AccountActivity(
            account_id=account.id,
            customer_id=account.customer_id,
            balance=account.balance,
            status=account.status,
            account_created=account.created_at,
            has_activity=last_activity is not None,
            last_activity=last_activity,
            days_since_creation=days_between(account.created_at, now),
            days_since_last_activity=(
                days_between(last_activity, now) if last_activity else 0
            ),
        )

    def resolve_all(
        self,
        accounts: Iterable[Account],
        now: datetime | None = None,
    ) -> list[AccountActivity]:
        """
        Resolve every account sequentially.

        A failed lookup for one account is logged and the account is
        skipped. Auth and rate-limit errors abort the whole batch.
        """
        now = now or datetime.now(timezone.utc)
        activities: list[AccountActivity] = []
        failed = 0

        for index, account in enumerate(accounts, start=1):
            try:
                activities.append(self.resolve(account, now))
            except (UnitAuthError, UnitRateLimitError):
                raise
            except (UnitAPIError, KeyError, ValueError) as e:
                # ValueError/KeyError: malformed transaction payload
                failed += 1
                log.error(
                    "activity_lookup_failed",
                    account_id=account.id,
                    status=getattr(e, "status_code", None),
                    error=str(e),
                )

            if (
                self.transaction_lookup_enabled
                and self.pacing_delay
                and index % self.pacing_batch == 0
            ):
                time.sleep(self.pacing_delay)

        log.info(
            "activity_resolved",
            accounts=len(activities),
            failed=failed,
            with_activity=sum(1 for a in activities if a.has_activity),
            transaction_lookup=self.transaction_lookup_enabled,
        )
        return activities
