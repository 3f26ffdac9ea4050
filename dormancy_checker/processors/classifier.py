"""
Dormancy classification rules.

Open accounts with activity:
    365+ days since last transaction -> closure
    270+ days since last transaction -> communication
Open accounts without any transaction:
    120+ days since creation         -> closure

Closed and Frozen accounts are never flagged.
"""

from collections import Counter
from collections.abc import Iterable

from dormancy_checker.core.models import (
    AccountActivity,
    AccountStatus,
    AlertType,
    ClassificationResult,
    UpcomingAlerts,
)

COMMUNICATION_THRESHOLD_DAYS = 270  # 9 months
CLOSURE_THRESHOLD_DAYS = 365  # 12 months
NO_ACTIVITY_CLOSURE_DAYS = 120

# Upcoming windows (summary view)
COMMUNICATION_SOON_DAYS = 240  # 8 months
CLOSURE_SOON_DAYS = 330  # 11 months
NO_ACTIVITY_CLOSURE_SOON_DAYS = 100

EXCLUDED_STATUSES = {AccountStatus.CLOSED, AccountStatus.FROZEN}


def is_eligible(activity: AccountActivity) -> bool:
    return activity.status not in EXCLUDED_STATUSES


def classify_one(activity: AccountActivity) -> AlertType | None:
    """Alert tier for one account, or None when it is not flagged."""
    if not is_eligible(activity):
        return None

    if activity.has_activity:
        if activity.days_since_last_activity >= CLOSURE_THRESHOLD_DAYS:
            return AlertType.CLOSURE_NEEDED
        if activity.days_since_last_activity >= COMMUNICATION_THRESHOLD_DAYS:
            return AlertType.COMMUNICATION_NEEDED
        return None

    # No communication tier for accounts that never transacted
    if activity.days_since_creation >= NO_ACTIVITY_CLOSURE_DAYS:
        return AlertType.CLOSURE_NEEDED
    return None


def classify(activities: Iterable[AccountActivity]) -> ClassificationResult:
    """Split accounts into the communication and closure sets."""
    result = ClassificationResult()
    for activity in activities:
        tier = classify_one(activity)
        if tier is AlertType.CLOSURE_NEEDED:
            result.closure_needed.append(activity)
        elif tier is AlertType.COMMUNICATION_NEEDED:
            result.communication_needed.append(activity)
    return result


def upcoming(activities: Iterable[AccountActivity]) -> UpcomingAlerts:
    """Accounts about to cross a threshold."""
    result = UpcomingAlerts()
    for activity in activities:
        if not is_eligible(activity):
            continue

        days = activity.days_since_last_activity
        if activity.has_activity:
            if COMMUNICATION_SOON_DAYS <= days < COMMUNICATION_THRESHOLD_DAYS:
                result.communication_soon.append(activity)
            elif CLOSURE_SOON_DAYS <= days < CLOSURE_THRESHOLD_DAYS:
                result.closure_soon.append(activity)
        elif (
            NO_ACTIVITY_CLOSURE_SOON_DAYS
            <= activity.days_since_creation
            < NO_ACTIVITY_CLOSURE_DAYS
        ):
            result.closure_soon.append(activity)
    return result


def status_breakdown(activities: Iterable[AccountActivity]) -> dict[str, int]:
    """Count accounts per status, Closed and Frozen included."""
    return dict(Counter(a.status.value for a in activities))


def sort_by_balance(activities: Iterable[AccountActivity]) -> list[AccountActivity]:
    """Highest balance first."""
    return sorted(activities, key=lambda a: a.balance, reverse=True)


def alert_reason(
    alert_type: AlertType,
    accounts: list[AccountActivity],
    transaction_lookup_enabled: bool = True,
) -> str:
    """Human-readable reason attached to an alert."""
    if alert_type is AlertType.COMMUNICATION_NEEDED:
        return "9 months of inactivity - communication attempt required"

    if any(a.has_activity for a in accounts):
        reason = "12 months of inactivity or 120 days with no activity - closure required"
    else:
        reason = "120 days with no activity - closure required"

    if not transaction_lookup_enabled:
        reason += " (based on account creation date only - transaction lookups disabled)"
    return reason
