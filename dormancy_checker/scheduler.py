"""
APScheduler job runner for the weekday dormancy check.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from dormancy_checker.config import settings
from dormancy_checker.core.logging import get_logger
from dormancy_checker.services.employer_mapping import EmployerDirectory

log = get_logger(__name__)

# Global scheduler instance
_scheduler: BackgroundScheduler | None = None


def check_dormant_job(directory: EmployerDirectory | None = None):
    """Scheduled job: run the dormancy check and post alerts to Slack."""
    from dormancy_checker.processors.dormancy import DormancyService

    log.info("scheduled_job_starting", job="check_dormant")
    try:
        service = DormancyService.from_settings(directory=directory)
        result = service.check_dormant_accounts(manual=False)
        log.info("scheduled_job_complete", job="check_dormant", **result.to_dict())
    except Exception as e:
        log.error("scheduled_job_error", job="check_dormant", error=str(e))


def start_scheduler(directory: EmployerDirectory | None = None) -> BackgroundScheduler:
    """
    Start the background scheduler.

    The job fires Monday to Friday at the configured hour; the check itself
    also skips weekends, so a misconfigured trigger still cannot alert on
    Saturday or Sunday.

    Args:
        directory: Shared employer directory, loaded once per process

    Returns:
        The scheduler instance
    """
    global _scheduler

    if _scheduler is not None:
        log.warning("scheduler_already_running")
        return _scheduler

    _scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
    _scheduler.add_job(
        check_dormant_job,
        trigger=CronTrigger(
            day_of_week="mon-fri",
            hour=settings.scheduler_hour,
            minute=settings.scheduler_minute,
            timezone=settings.scheduler_timezone,
        ),
        kwargs={"directory": directory},
        id="check_dormant",
        name="Check dormant accounts",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    _scheduler.start()
    log.info(
        "scheduler_started",
        hour=settings.scheduler_hour,
        minute=settings.scheduler_minute,
        timezone=settings.scheduler_timezone,
    )
    return _scheduler


def stop_scheduler():
    """Stop the background scheduler."""
    global _scheduler

    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        log.info("scheduler_stopped")


def get_scheduler() -> BackgroundScheduler | None:
    """Get the current scheduler instance."""
    return _scheduler


def run_now(directory: EmployerDirectory | None = None):
    """Manually trigger the check job."""
    check_dormant_job(directory)
