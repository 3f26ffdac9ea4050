"""
FastAPI application for the dormant account checker.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from dormancy_checker.config import settings
from dormancy_checker.core.logging import configure_logging, get_logger
from dormancy_checker.routers.check_dormant import router as check_dormant_router
from dormancy_checker.routers.debug import router as debug_router
from dormancy_checker.routers.dormant_accounts import router as dormant_accounts_router
from dormancy_checker.routers.summary import router as summary_router
from dormancy_checker.scheduler import start_scheduler, stop_scheduler
from dormancy_checker.services.employer_mapping import EmployerDirectory

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging(settings.log_level, json_output=settings.log_json)
    log.info(
        "application_starting",
        environment="sandbox" if settings.is_sandbox else "production",
    )

    # One employer directory per process, loaded on first use
    app.state.employer_directory = EmployerDirectory()

    if settings.scheduler_enabled:
        start_scheduler(app.state.employer_directory)
    else:
        log.info("scheduler_disabled", reason="trigger /check-dormant from an external cron")

    yield

    if settings.scheduler_enabled:
        stop_scheduler()
    log.info("application_stopped")


app = FastAPI(
    title="Dormant Account Checker",
    description="Flags dormant Unit accounts and alerts Slack",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(check_dormant_router)
app.include_router(summary_router)
app.include_router(dormant_accounts_router)
app.include_router(debug_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# Run with: uvicorn dormancy_checker.main:app --host 0.0.0.0 --port 8000
