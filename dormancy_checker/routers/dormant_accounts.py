"""
Dormant account list for review and download.

GET /dormant-accounts              : JSON summary + account list
GET /dormant-accounts?format=csv   : CSV attachment
"""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from dormancy_checker.config import settings
from dormancy_checker.core.exceptions import UnitAPIError
from dormancy_checker.core.logging import get_logger
from dormancy_checker.processors.dormancy import DormancyService
from dormancy_checker.routers.deps import get_analysis_service, require_cron_secret
from dormancy_checker.services.export import export_csv, export_rows, export_summary

log = get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.get("/dormant-accounts")
def get_dormant_accounts(
    request: Request,
    format: str = Query(default="json", pattern="^(json|csv)$"),
    service: DormancyService = Depends(get_analysis_service),
):
    log.info(
        "dormant_accounts_export",
        format=format,
        environment="sandbox" if settings.is_sandbox else "production",
    )
    try:
        report = service.analyze()
    except UnitAPIError as e:
        log.error("dormant_accounts_export_failed", error=str(e))
        raise HTTPException(status_code=502, detail=f"Unit API error: {e}")

    rows = export_rows(report)

    if format == "csv":
        filename = f"dormant-accounts-{date.today().isoformat()}.csv"
        return Response(
            content=export_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    base = str(request.url.remove_query_params("format"))
    return {
        "success": True,
        "summary": {
            **export_summary(report),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        "accounts": rows,
        "downloadUrls": {
            "csv": f"{base}?format=csv",
            "json": base,
        },
    }
