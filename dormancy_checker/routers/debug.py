"""
Debug endpoint: per-account activity and threshold counts, no Slack.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from dormancy_checker.config import settings
from dormancy_checker.core.exceptions import UnitAPIError
from dormancy_checker.core.logging import get_logger
from dormancy_checker.processors import classifier
from dormancy_checker.processors.dormancy import DormancyService
from dormancy_checker.routers.deps import get_analysis_service, require_cron_secret

log = get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.get("/debug")
def get_debug(service: DormancyService = Depends(get_analysis_service)):
    try:
        report = service.analyze(enrich=False)
    except UnitAPIError as e:
        raise HTTPException(status_code=502, detail=f"Unit API error: {e}")

    activities = report.activities
    eligible = [a for a in activities if classifier.is_eligible(a)]
    no_activity = [a for a in eligible if not a.has_activity]
    with_activity = [a for a in eligible if a.has_activity]

    log.info("debug_report", accounts=len(activities))
    return {
        "success": True,
        "debug": {
            "totalAccounts": report.total_accounts,
            "accountsByStatus": report.accounts_by_status,
            "accounts": [a.to_dict() for a in activities],
            "dormancyAnalysis": {
                "noActivityCount": len(no_activity),
                "olderThan120DaysCount": sum(
                    1 for a in no_activity
                    if a.days_since_creation >= classifier.NO_ACTIVITY_CLOSURE_DAYS
                ),
                "needs9MonthCommunication": sum(
                    1 for a in with_activity
                    if a.days_since_last_activity >= classifier.COMMUNICATION_THRESHOLD_DAYS
                ),
                "needs12MonthClosure": sum(
                    1 for a in with_activity
                    if a.days_since_last_activity >= classifier.CLOSURE_THRESHOLD_DAYS
                ),
            },
            "config": {
                "pageSize": settings.unit_page_size,
                "maxAccounts": settings.unit_max_accounts,
                "transactionLookup": settings.transaction_lookup_enabled,
                "environment": "sandbox" if settings.is_sandbox else "production",
            },
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
