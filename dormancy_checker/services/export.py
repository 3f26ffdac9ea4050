"""
Dormant account export (JSON rows and CSV download).
"""

import csv
import io

from dormancy_checker.core.models import AccountActivity, DormancyReport
from dormancy_checker.processors.classifier import (
    CLOSURE_THRESHOLD_DAYS,
    NO_ACTIVITY_CLOSURE_DAYS,
    sort_by_balance,
)
from dormancy_checker.services.slack import format_currency

CSV_HEADERS = [
    "Priority",
    "Account ID",
    "Customer ID",
    "Customer Name",
    "Company",
    "Balance (USD)",
    "Days Since Creation",
    "Days Since Last Activity",
    "Created Date",
    "Status",
    "Alert",
    "Reason",
]


def flag_reason(account: AccountActivity, closure: bool) -> str:
    if not closure:
        return "No activity for 270+ days"
    if account.has_activity:
        return f"No activity for {CLOSURE_THRESHOLD_DAYS}+ days"
    return f"No transactions in {NO_ACTIVITY_CLOSURE_DAYS}+ days since opening"


def export_rows(report: DormancyReport) -> list[dict]:
    """Flagged accounts, highest balance first."""
    closure_ids = {a.account_id for a in report.closure_needed}
    rows = []
    for priority, account in enumerate(sort_by_balance(report.flagged), start=1):
        closure = account.account_id in closure_ids
        rows.append({
            "priority": priority,
            "accountId": account.account_id,
            "customerId": account.customer_id,
            "customerName": account.customer_name,
            "companyName": account.company_name,
            "balance": account.balance,
            "balanceFormatted": format_currency(account.balance),
            "daysSinceCreation": account.days_since_creation,
            "daysSinceLastActivity": account.days_since_last_activity,
            "accountCreated": account.account_created.date().isoformat(),
            "status": account.status.value,
            "alert": "closure_needed" if closure else "communication_needed",
            "reason": flag_reason(account, closure),
        })
    return rows


def export_summary(report: DormancyReport) -> dict:
    flagged = report.flagged
    total_balance = sum(a.balance for a in flagged)
    average_age = (
        round(sum(a.days_since_creation for a in flagged) / len(flagged)) if flagged else 0
    )
    return {
        "totalDormantAccounts": len(flagged),
        "communicationNeeded": len(report.communication_needed),
        "closureNeeded": len(report.closure_needed),
        "totalBalance": total_balance,
        "totalBalanceFormatted": format_currency(total_balance),
        "averageAge": average_age,
        "oldestAccount": max((a.days_since_creation for a in flagged), default=0),
    }


def export_csv(rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow([
            row["priority"],
            row["accountId"],
            row["customerId"],
            row["customerName"] or "",
            row["companyName"] or "",
            f"{row['balance'] / 100:.2f}",
            row["daysSinceCreation"],
            row["daysSinceLastActivity"],
            row["accountCreated"],
            row["status"],
            row["alert"],
            row["reason"],
        ])
    return buffer.getvalue()
