"""
Dormancy analysis pipeline.

fetch accounts -> resolve activity -> enrich (optional) -> classify

Per-account failures are absorbed inside the stages. Configuration errors
and systemic Unit API errors (auth, rate limit, failed ledger fetch)
propagate out of run_dormancy_analysis().
"""

import traceback
import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from dormancy_checker.config import settings
from dormancy_checker.core.logging import bind_context, clear_context, get_logger
from dormancy_checker.core.models import (
    AlertType,
    CheckResult,
    DormancyAlert,
    DormancyReport,
)
from dormancy_checker.processors import classifier
from dormancy_checker.processors.activity import ActivityResolver
from dormancy_checker.processors.enrichment import IdentityEnricher
from dormancy_checker.services.employer_mapping import EmployerDirectory
from dormancy_checker.services.slack import SlackNotifier
from dormancy_checker.services.unit import UnitClient

log = get_logger(__name__)


class DormancyService:
    """Runs dormancy analysis and dispatches the resulting alerts."""

    def __init__(
        self,
        client: UnitClient,
        resolver: ActivityResolver | None = None,
        enricher: IdentityEnricher | None = None,
        notifier: SlackNotifier | None = None,
    ):
        self.client = client
        self.resolver = resolver or ActivityResolver(client)
        self.enricher = enricher
        self.notifier = notifier

    @classmethod
    def from_settings(
        cls,
        directory: EmployerDirectory | None = None,
        with_notifier: bool = True,
    ) -> "DormancyService":
        """
        Build the service from environment configuration.

        Raises:
            ConfigurationError: if Unit (or Slack, when with_notifier)
                settings are missing; no network call is made first
        """
        settings.require_unit()
        if with_notifier:
            settings.require_slack()

        client = UnitClient()
        enricher = None
        if settings.enrichment_enabled:
            enricher = IdentityEnricher(client, directory or EmployerDirectory())

        return cls(
            client=client,
            enricher=enricher,
            notifier=SlackNotifier() if with_notifier else None,
        )

    def analyze(self, now: datetime | None = None, enrich: bool = True) -> DormancyReport:
        """Run the full pipeline once and return both classified sets."""
        started_at = datetime.now(timezone.utc)
        as_of = now or started_at

        accounts = self.client.fetch_all_accounts()
        activities = self.resolver.resolve_all(accounts, as_of)

        if enrich and self.enricher is not None:
            activities = self.enricher.enrich(activities)

        result = classifier.classify(activities)
        report = DormancyReport(
            communication_needed=result.communication_needed,
            closure_needed=result.closure_needed,
            total_accounts=len(activities),
            accounts_by_status=classifier.status_breakdown(activities),
            upcoming=classifier.upcoming(activities),
            activities=activities,
            enriched=any(a.is_enriched for a in activities),
            transaction_lookup_enabled=self.resolver.transaction_lookup_enabled,
            as_of=as_of,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )

        log.info(
            "dormancy_analysis_complete",
            total_accounts=report.total_accounts,
            communication_needed=len(report.communication_needed),
            closure_needed=len(report.closure_needed),
            by_status=report.accounts_by_status,
            enriched=report.enriched,
        )
        return report

    def build_alerts(self, report: DormancyReport) -> list[DormancyAlert]:
        """One alert per non-empty tier, communication first."""
        alerts = []
        tiers = (
            (AlertType.COMMUNICATION_NEEDED, report.communication_needed),
            (AlertType.CLOSURE_NEEDED, report.closure_needed),
        )
        for alert_type, accounts in tiers:
            if not accounts:
                continue
            alerts.append(DormancyAlert(
                type=alert_type,
                accounts=accounts,
                reason=classifier.alert_reason(
                    alert_type, accounts, report.transaction_lookup_enabled
                ),
            ))
        return alerts

    def check_dormant_accounts(
        self,
        manual: bool = False,
        now: datetime | None = None,
    ) -> CheckResult:
        """
        Run a check and post the alerts to Slack.

        Automated runs are skipped on weekends; manual runs always run.
        Failures are reported to Slack and returned as success=False.
        """
        now = now or datetime.now(timezone.utc)
        local_now = now.astimezone(ZoneInfo(settings.scheduler_timezone))

        if not manual and local_now.weekday() >= 5:
            message = f"Skipping automated dormancy check - today is {local_now:%A} (weekend)"
            log.info("dormancy_check_skipped", reason="weekend", day=f"{local_now:%A}")
            return CheckResult(success=True, message=message, skipped=True)

        bind_context(run_id=uuid.uuid4().hex[:12], manual=manual)
        log.info("dormancy_check_starting")
        try:
            report = self.analyze(now)

            if self.notifier is not None:
                for alert in self.build_alerts(report):
                    self.notifier.send_dormancy_alert(alert)

            communication = len(report.communication_needed)
            closure = len(report.closure_needed)
            log.info(
                "dormancy_check_complete",
                communication_needed=communication,
                closure_needed=closure,
                duration_seconds=report.duration_seconds,
            )
            return CheckResult(
                success=True,
                message=(
                    f"Check completed successfully. Found {communication} accounts "
                    f"needing communication, {closure} needing closure."
                ),
                communication_needed=communication,
                closure_needed=closure,
            )
        except Exception as e:
            log.exception("dormancy_check_failed", error=str(e))
            if self.notifier is not None:
                self.notifier.send_error_alert(
                    "Dormancy check failed",
                    f"{e}\n\n{traceback.format_exc()}",
                )
            return CheckResult(success=False, message=f"Check failed: {e}")
        finally:
            clear_context()


def run_dormancy_analysis(
    service: DormancyService | None = None,
    now: datetime | None = None,
    directory: EmployerDirectory | None = None,
) -> DormancyReport:
    """
    Classify every account in the ledger.

    Pass the process-wide EmployerDirectory as directory when building the
    service from settings, so the mapping is fetched once per process.

    Returns:
        DormancyReport with both sets, status tallies and upcoming alerts.
        Empty sets mean nothing is dormant.

    Raises:
        ConfigurationError: missing Unit credentials
        UnitAPIError: systemic upstream failure (auth, rate limit, ledger fetch)
    """
    service = service or DormancyService.from_settings(
        directory=directory,
        with_notifier=False,
    )
    return service.analyze(now)
