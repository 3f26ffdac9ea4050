"""Unit tests for the dormant account export."""

import csv
import io

from dormancy_checker.core.models import DormancyReport
from dormancy_checker.services.export import (
    CSV_HEADERS,
    export_csv,
    export_rows,
    export_summary,
)
from dormancy_checker.tests.factories import make_activity


def _report() -> DormancyReport:
    return DormancyReport(
        communication_needed=[
            make_activity("1", days_since_creation=400, days_since_last_activity=300, balance=500),
        ],
        closure_needed=[
            make_activity("2", days_since_creation=130, balance=90_000),
            make_activity("3", days_since_creation=700, days_since_last_activity=400, balance=2_000),
        ],
        total_accounts=5,
    )


class TestExportRows:
    def test_priority_by_balance(self):
        rows = export_rows(_report())

        assert [r["accountId"] for r in rows] == ["2", "3", "1"]
        assert [r["priority"] for r in rows] == [1, 2, 3]

    def test_alert_and_reason(self):
        rows = {r["accountId"]: r for r in export_rows(_report())}

        assert rows["1"]["alert"] == "communication_needed"
        assert rows["2"]["alert"] == "closure_needed"
        assert rows["2"]["reason"] == "No transactions in 120+ days since opening"
        assert rows["3"]["reason"] == "No activity for 365+ days"
        assert rows["2"]["balanceFormatted"] == "$900.00"

    def test_empty_report(self):
        assert export_rows(DormancyReport()) == []


class TestExportSummary:
    def test_totals(self):
        summary = export_summary(_report())

        assert summary["totalDormantAccounts"] == 3
        assert summary["communicationNeeded"] == 1
        assert summary["closureNeeded"] == 2
        assert summary["totalBalance"] == 92_500
        assert summary["averageAge"] == 410
        assert summary["oldestAccount"] == 700

    def test_empty(self):
        summary = export_summary(DormancyReport())
        assert summary["totalDormantAccounts"] == 0
        assert summary["averageAge"] == 0


class TestExportCsv:
    def test_header_and_rows(self):
        content = export_csv(export_rows(_report()))

        parsed = list(csv.reader(io.StringIO(content)))
        assert parsed[0] == CSV_HEADERS
        assert len(parsed) == 4
        assert parsed[1][1] == "2"
        assert parsed[1][5] == "900.00"

    def test_commas_quoted(self):
        activity = make_activity("9", days_since_creation=130)
        rows = export_rows(DormancyReport(closure_needed=[activity]))
        rows[0]["customerName"] = "Lopez, Maria"

        parsed = list(csv.reader(io.StringIO(export_csv(rows))))
        assert parsed[1][3] == "Lopez, Maria"
