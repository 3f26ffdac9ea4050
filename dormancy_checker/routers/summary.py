"""
Account summary endpoint.

GET /summary: totals, status breakdown and accounts approaching a threshold
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from dormancy_checker.core.exceptions import UnitAPIError
from dormancy_checker.core.logging import get_logger
from dormancy_checker.processors.dormancy import DormancyService
from dormancy_checker.routers.deps import get_analysis_service, require_cron_secret

log = get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.get("/summary")
def get_summary(service: DormancyService = Depends(get_analysis_service)):
    try:
        report = service.analyze(enrich=False)
    except UnitAPIError as e:
        log.error("summary_failed", error=str(e))
        raise HTTPException(status_code=502, detail=f"Unit API error: {e}")

    return {
        "success": True,
        "data": {
            "totalAccounts": report.total_accounts,
            "accountsByStatus": report.accounts_by_status,
            "flagged": {
                "communicationNeeded": len(report.communication_needed),
                "closureNeeded": len(report.closure_needed),
            },
            "upcomingAlerts": {
                "communicationSoon": [a.to_dict() for a in report.upcoming.communication_soon],
                "closureSoon": [a.to_dict() for a in report.upcoming.closure_soon],
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }
