"""
Best-effort customer and employer enrichment.

Enrichment only adds display fields. It never raises and never changes
which accounts are classified as dormant.
"""

import time
from collections.abc import Iterable
from dataclasses import replace

from dormancy_checker.config import settings
from dormancy_checker.core.exceptions import UnitNotFoundError
from dormancy_checker.core.logging import get_logger
from dormancy_checker.core.models import AccountActivity, Enrichment
from dormancy_checker.services.employer_mapping import EmployerDirectory
from dormancy_checker.services.unit import UnitClient

log = get_logger(__name__)


class IdentityEnricher:
    """
    Attach customer name/email/address and employer to activity records.

    Customer lookups use a shorter timeout than the ledger reads. After
    failure_budget failed lookups in one enrich() call the remaining
    accounts pass through unchanged. If the whole stage runs past its
    deadline, all enrichment from that call is discarded.

    Customer lookups hit the same rate-limited Unit API as the ledger
    reads and pause for pacing_delay every pacing_batch lookups.
    """

    def __init__(
        self,
        client: UnitClient,
        directory: EmployerDirectory,
        enabled: bool | None = None,
        timeout: float | None = None,
        failure_budget: int | None = None,
        deadline: float | None = None,
        pacing_delay: float | None = None,
        pacing_batch: int | None = None,
    ):
        self.client = client
        self.directory = directory
        self.enabled = settings.enrichment_enabled if enabled is None else enabled
        self.timeout = timeout or settings.enrichment_timeout_seconds
        self.failure_budget = failure_budget or settings.enrichment_failure_budget
        self.deadline = deadline or settings.enrichment_deadline_seconds
        self.pacing_delay = (
            settings.enrichment_pacing_delay_seconds if pacing_delay is None else pacing_delay
        )
        self.pacing_batch = pacing_batch or settings.enrichment_pacing_batch

    def enrich_one(self, activity: AccountActivity) -> AccountActivity:
        """
        Enrich a single record.

        Raises:
            UnitAPIError: if the customer lookup fails
        """
        customer = self.client.get_customer(activity.customer_id, timeout=self.timeout)
        employer = self.directory.resolve(customer.id, customer.address)

        return replace(
            activity,
            enrichment=Enrichment(
                customer_name=customer.full_name or None,
                customer_email=customer.email,
                customer_address=customer.address,
                company_name=employer.company_name if employer else None,
                company_id=employer.company_id if employer else None,
            ),
        )

    def enrich(self, activities: Iterable[AccountActivity]) -> list[AccountActivity]:
        """Enrich every record; returns a list in the input order."""
        activities = list(activities)
        if not self.enabled or not activities:
            return activities

        try:
            self.directory.load()
        except Exception as e:
            log.exception(
                "enrichment_skipped",
                reason="employer_mappings_unavailable",
                error=str(e),
            )
            return activities

        deadline = time.monotonic() + self.deadline
        failures = 0
        lookups = 0
        circuit_open = False
        result: list[AccountActivity] = []

        for index, activity in enumerate(activities):
            if time.monotonic() > deadline:
                log.warning(
                    "enrichment_deadline_exceeded",
                    processed=index,
                    total=len(activities),
                    deadline_seconds=self.deadline,
                )
                return activities

            if circuit_open or not activity.customer_id:
                result.append(activity)
                continue

            try:
                result.append(self.enrich_one(activity))
            except UnitNotFoundError:
                log.info("customer_not_found", customer_id=activity.customer_id)
                result.append(activity)
            except Exception as e:
                failures += 1
                log.warning(
                    "enrichment_failed",
                    account_id=activity.account_id,
                    customer_id=activity.customer_id,
                    error=str(e),
                )
                result.append(activity)
                if failures >= self.failure_budget:
                    circuit_open = True
                    log.warning(
                        "enrichment_circuit_open",
                        failures=failures,
                        remaining=len(activities) - index - 1,
                    )

            lookups += 1
            if self.pacing_delay and lookups % self.pacing_batch == 0:
                time.sleep(self.pacing_delay)

        log.info(
            "enrichment_complete",
            total=len(result),
            enriched=sum(1 for a in result if a.is_enriched),
            with_company=sum(1 for a in result if a.company_name),
            failures=failures,
        )
        return result
