"""
Shared route dependencies: bearer secret check and service construction.
"""

import hmac

from fastapi import Header, HTTPException, Request

from dormancy_checker.config import settings
from dormancy_checker.core.exceptions import ConfigurationError
from dormancy_checker.core.logging import get_logger
from dormancy_checker.processors.dormancy import DormancyService

log = get_logger(__name__)


def require_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Reject requests without 'Bearer <CRON_SECRET>' when a secret is set."""
    if not settings.cron_secret:
        return
    expected = f"Bearer {settings.cron_secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        log.warning("unauthorized_request")
        raise HTTPException(status_code=401, detail="Unauthorized")


def _build_service(request: Request, with_notifier: bool) -> DormancyService:
    try:
        return DormancyService.from_settings(
            directory=getattr(request.app.state, "employer_directory", None),
            with_notifier=with_notifier,
        )
    except ConfigurationError as e:
        log.error("configuration_error", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))


def get_check_service(request: Request) -> DormancyService:
    """Service that also posts to Slack."""
    return _build_service(request, with_notifier=True)


def get_analysis_service(request: Request) -> DormancyService:
    """Read-only service (no Slack)."""
    return _build_service(request, with_notifier=False)
