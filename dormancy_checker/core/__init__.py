"""Core modules for the dormancy pipeline."""

from .logging import configure_logging, get_logger, bind_context, clear_context
from .exceptions import (
    DormancyCheckerError,
    ConfigurationError,
    UnitAPIError,
    UnitAuthError,
    UnitNotFoundError,
    UnitRateLimitError,
)
from .models import (
    Account,
    AccountActivity,
    AccountStatus,
    AlertType,
    CheckResult,
    ClassificationResult,
    Customer,
    DormancyAlert,
    DormancyReport,
    Enrichment,
    Transaction,
    UpcomingAlerts,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "DormancyCheckerError",
    "ConfigurationError",
    "UnitAPIError",
    "UnitAuthError",
    "UnitNotFoundError",
    "UnitRateLimitError",
    "Account",
    "AccountActivity",
    "AccountStatus",
    "AlertType",
    "CheckResult",
    "ClassificationResult",
    "Customer",
    "DormancyAlert",
    "DormancyReport",
    "Enrichment",
    "Transaction",
    "UpcomingAlerts",
]
