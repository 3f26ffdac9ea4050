"""
Slack incoming-webhook notifier for dormancy alerts.
"""

from datetime import datetime, timezone

import httpx

from dormancy_checker.config import settings
from dormancy_checker.core.logging import get_logger
from dormancy_checker.core.models import AccountActivity, AlertType, DormancyAlert
from dormancy_checker.processors.classifier import sort_by_balance

log = get_logger(__name__)


def format_currency(cents: int) -> str:
    """Format Unit minor units as USD, e.g. 123456 -> '$1,234.56'."""
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _header(text: str) -> dict:
    return {"type": "header", "text": {"type": "plain_text", "text": text}}


class SlackNotifier:
    """Posts Block Kit messages to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str | None = None,
        timeout: float | None = None,
        max_listed_accounts: int | None = None,
        client: httpx.Client | None = None,
    ):
        self.webhook_url = webhook_url or settings.slack_webhook_url
        self.timeout = timeout or settings.slack_timeout_seconds
        self.max_listed_accounts = max_listed_accounts or settings.slack_max_listed_accounts
        self._client = client or httpx.Client(timeout=self.timeout)

    def _post(self, message: dict) -> None:
        response = self._client.post(self.webhook_url, json=message)
        response.raise_for_status()

    # Formatting

    def format_account_list(self, accounts: list[AccountActivity], limit: int = 10) -> str:
        shown = accounts[:limit]
        lines = []
        for index, account in enumerate(shown, start=1):
            entry = (
                f"{index}. *{account.display_name}* (ID: {account.account_id})\n"
                f"   💰 Balance: {format_currency(account.balance)}\n"
                f"   📅 Created: {account.account_created:%b %d, %Y}\n"
                f"   ⏰ Age: {account.days_since_creation} days old"
            )
            if account.has_activity:
                entry += f"\n   🕒 Last activity: {account.days_since_last_activity} days ago"
            if account.company_name:
                entry += f"\n   🏢 Employer: {account.company_name}"
            lines.append(entry)

        result = "\n\n".join(lines)
        remaining = len(accounts) - len(shown)
        if remaining > 0:
            result += f"\n\n... and {remaining} more accounts"
        return result

    def build_communication_alert(self, alert: DormancyAlert) -> dict:
        count = len(alert.accounts)
        return {
            "text": "🔔 Account Communication Alert - 9 Month Dormancy",
            "blocks": [
                _header("🔔 Communication Required - 9 Month Dormant Accounts"),
                _section(
                    f"*{count}* accounts have been dormant for 9+ months and need "
                    f"communication attempts.\n*Total Balance:* {format_currency(alert.total_balance)}"
                ),
                _section(
                    "*Action Required:* Send good faith communication attempts via:\n"
                    "• Email\n• WhatsApp\n• Phone\n\n"
                    "*Goal:* Allow customers to update address, withdraw funds, "
                    "or confirm account retention."
                ),
                {"type": "divider"},
                _section(f"*Affected Accounts:*\n\n{self.format_account_list(alert.accounts)}"),
            ],
        }

    def build_closure_alert(self, alert: DormancyAlert) -> dict:
        accounts = sort_by_balance(alert.accounts)
        limit = 5 if len(accounts) > 20 else 10

        text = (
            f"*{len(accounts)}* accounts are ready for closure.\n"
            f"*Total Balance:* {format_currency(alert.total_balance)}\n"
            f"*Average Age:* {alert.average_age} days\n"
            f"*Oldest Account:* {alert.oldest_age} days\n\n"
            f"*Reason:* {alert.reason}"
        )
        return {
            "text": "⚠️ Account Closure Alert - Final Notice Required",
            "blocks": [
                _header("⚠️ Account Closure Required - Final Notice"),
                _section(text),
                _section(
                    "*Action Required:*\n• Send final closure notification via email\n"
                    "• Process account closure\n• Handle remaining balance per policy"
                ),
                {"type": "divider"},
                _section(
                    f"*Top {limit} Accounts by Balance:*\n\n"
                    f"{self.format_account_list(accounts, limit)}"
                ),
            ],
        }

    def build_summary_alert(self, alert: DormancyAlert) -> dict:
        if alert.type is AlertType.COMMUNICATION_NEEDED:
            title = "🔔 Large-Scale Communication Alert"
            action = "Send communication attempts to all flagged accounts"
        else:
            title = "⚠️ Large-Scale Closure Alert"
            action = "Process closure for all flagged accounts"

        heading = f"{title} - {len(alert.accounts)} Accounts"
        return {
            "text": heading,
            "blocks": [
                _header(heading),
                _section(
                    f"*Account Count:* {len(alert.accounts)}\n"
                    f"*Total Balance:* {format_currency(alert.total_balance)}\n"
                    f"*Average Age:* {alert.average_age} days\n"
                    f"*Oldest Account:* {alert.oldest_age} days"
                ),
                _section(
                    f"*Action Required:* {action}\n\n"
                    "⚠️ *Note:* Too many accounts to list individually. "
                    "Use the dormant-accounts CSV export for details."
                ),
            ],
        }

    # Sending

    def send_dormancy_alert(self, alert: DormancyAlert) -> None:
        """Send one alert tier. Large batches collapse into a summary."""
        if len(alert.accounts) > self.max_listed_accounts:
            log.warning(
                "slack_alert_summarized",
                alert_type=alert.type.value,
                accounts=len(alert.accounts),
            )
            message = self.build_summary_alert(alert)
        elif alert.type is AlertType.COMMUNICATION_NEEDED:
            message = self.build_communication_alert(alert)
        else:
            message = self.build_closure_alert(alert)

        self._post(message)
        log.info("slack_alert_sent", alert_type=alert.type.value, accounts=len(alert.accounts))

    def send_status_message(self, message: str) -> None:
        self._post({
            "text": message,
            "blocks": [_section(f"🤖 *Account Checker Status*\n\n{message}")],
        })
        log.info("slack_status_sent")

    def send_error_alert(self, error: str, details: str | None = None) -> None:
        """Report a failed run. Never raises."""
        blocks = [_header("❌ Account Checker Error"), _section(f"*Error:* {error}")]
        if details:
            blocks.append(_section(f"*Details:* ```{details[:2500]}```"))
        blocks.append(_section(f"*Time:* {datetime.now(timezone.utc):%Y-%m-%d %H:%M:%S} UTC"))

        try:
            self._post({"text": "❌ Account Checker Error", "blocks": blocks})
            log.info("slack_error_alert_sent")
        except httpx.HTTPError as e:
            log.error("slack_error_alert_failed", error=str(e))

    def close(self):
        self._client.close()
