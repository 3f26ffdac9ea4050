"""
Exception hierarchy for the dormancy checker.

Per-account lookup failures are absorbed inside the pipeline stages; only
configuration errors and systemic Unit API errors reach callers.
"""


class DormancyCheckerError(Exception):
    """Base exception for the dormancy checker."""


class ConfigurationError(DormancyCheckerError):
    """Required credentials or URLs are missing."""


class UnitAPIError(DormancyCheckerError):
    """Unit API request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnitAuthError(UnitAPIError):
    """Token rejected (401) or missing a scope (403)."""


class UnitNotFoundError(UnitAPIError):
    """Resource does not exist (404)."""


class UnitRateLimitError(UnitAPIError):
    """Rate limit exceeded (429)."""


def error_for_status(status_code: int, message: str) -> UnitAPIError:
    """Map an HTTP status code to the matching exception."""
    if status_code in (401, 403):
        return UnitAuthError(message, status_code)
    if status_code == 404:
        return UnitNotFoundError(message, status_code)
    if status_code == 429:
        return UnitRateLimitError(message, status_code)
    return UnitAPIError(message, status_code)
