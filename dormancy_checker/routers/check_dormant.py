"""
Dormancy check endpoint, called by cron (weekdays) or manually.

GET|POST /check-dormant?manual=true
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from dormancy_checker.processors.dormancy import DormancyService
from dormancy_checker.routers.deps import get_check_service, require_cron_secret

router = APIRouter(dependencies=[Depends(require_cron_secret)])


class CheckDormantData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    communication_needed: int
    closure_needed: int
    skipped: bool
    timestamp: datetime


class CheckDormantResponse(BaseModel):
    success: bool
    message: str
    data: CheckDormantData


@router.api_route(
    "/check-dormant",
    methods=["GET", "POST"],
    response_model=CheckDormantResponse,
    response_model_by_alias=True,
)
def check_dormant(
    manual: bool = Query(default=False, description="Run even on weekends"),
    service: DormancyService = Depends(get_check_service),
):
    result = service.check_dormant_accounts(manual=manual)

    body = CheckDormantResponse(
        success=result.success,
        message=result.message,
        data=CheckDormantData(
            communication_needed=result.communication_needed,
            closure_needed=result.closure_needed,
            skipped=result.skipped,
            timestamp=datetime.now(timezone.utc),
        ),
    )
    # 500 on failure so the cron caller sees the run as failed
    return JSONResponse(
        body.model_dump(mode="json", by_alias=True),
        status_code=200 if result.success else 500,
    )
