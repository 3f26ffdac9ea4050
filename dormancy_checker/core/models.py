"""
Data models for the dormancy pipeline.

Uses dataclasses for clean, typed data structures. Upstream entities are
built from Unit's JSON:API resources via from_api().
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AccountStatus(str, Enum):
    """Unit account lifecycle status."""

    OPEN = "Open"
    FROZEN = "Frozen"
    CLOSED = "Closed"


class AlertType(str, Enum):
    """Dormancy alert tiers."""

    COMMUNICATION_NEEDED = "communication_needed"
    CLOSURE_NEEDED = "closure_needed"


def parse_timestamp(value: str) -> datetime:
    """Parse a Unit ISO timestamp into an aware UTC datetime.

    Unit sends values like '2024-03-01T17:21:09.123Z'.
    """
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_between(earlier: datetime, now: datetime) -> int:
    """Whole calendar days from earlier to now (UTC dates), never negative."""
    delta = now.astimezone(timezone.utc).date() - earlier.astimezone(timezone.utc).date()
    return max(delta.days, 0)


@dataclass(frozen=True)
class Account:
    """Unit deposit account."""

    id: str
    customer_id: str
    created_at: datetime
    balance: int  # cents
    status: AccountStatus
    name: str = ""
    currency: str = "USD"

    @classmethod
    def from_api(cls, resource: dict[str, Any]) -> "Account":
        """Create Account from a Unit 'depositAccount' resource."""
        attributes = resource.get("attributes", {})
        customer = (
            resource.get("relationships", {}).get("customer", {}).get("data") or {}
        )
        return cls(
            id=str(resource["id"]),
            customer_id=str(customer.get("id", "")),
            created_at=parse_timestamp(attributes["createdAt"]),
            balance=int(attributes.get("balance", 0)),
            status=AccountStatus(attributes.get("status", "Open")),
            name=attributes.get("name", ""),
            currency=attributes.get("currency", "USD"),
        )


@dataclass(frozen=True)
class Transaction:
    """Unit transaction (only its timestamp matters here)."""

    id: str
    account_id: str
    created_at: datetime

    @classmethod
    def from_api(cls, resource: dict[str, Any]) -> "Transaction":
        account = (
            resource.get("relationships", {}).get("account", {}).get("data") or {}
        )
        return cls(
            id=str(resource["id"]),
            account_id=str(account.get("id", "")),
            created_at=parse_timestamp(resource["attributes"]["createdAt"]),
        )


@dataclass(frozen=True)
class Customer:
    """Unit individual customer."""

    id: str
    full_name: str = ""
    email: str | None = None
    address: str | None = None

    @classmethod
    def from_api(cls, resource: dict[str, Any]) -> "Customer":
        attributes = resource.get("attributes", {})
        name = attributes.get("fullName") or {}
        full_name = " ".join(
            part for part in (name.get("first"), name.get("last")) if part
        )
        return cls(
            id=str(resource["id"]),
            full_name=full_name,
            email=attributes.get("email"),
            address=cls._format_address(attributes.get("address")),
        )

    @staticmethod
    def _format_address(address: dict[str, Any] | None) -> str | None:
        """Format as '548 Pleasant Mill Rd Charlotte NC 28203'."""
        if not address:
            return None
        parts = [
            address.get("street"),
            address.get("street2"),
            address.get("city"),
            address.get("state"),
            address.get("postalCode"),
        ]
        formatted = " ".join(p.strip() for p in parts if p and p.strip())
        return formatted or None


@dataclass(frozen=True)
class Enrichment:
    """Customer and employer details attached to an account."""

    customer_name: str | None = None
    customer_email: str | None = None
    customer_address: str | None = None
    company_name: str | None = None
    company_id: int | str | None = None


@dataclass(frozen=True)
class AccountActivity:
    """Activity snapshot for one account, built once per analysis run."""

    account_id: str
    customer_id: str
    balance: int
    status: AccountStatus
    account_created: datetime
    has_activity: bool
    days_since_creation: int
    days_since_last_activity: int = 0
    last_activity: datetime | None = None
    enrichment: Enrichment | None = None  # None = not enriched

    @property
    def is_enriched(self) -> bool:
        return self.enrichment is not None

    @property
    def customer_name(self) -> str | None:
        return self.enrichment.customer_name if self.enrichment else None

    @property
    def customer_email(self) -> str | None:
        return self.enrichment.customer_email if self.enrichment else None

    @property
    def customer_address(self) -> str | None:
        return self.enrichment.customer_address if self.enrichment else None

    @property
    def company_name(self) -> str | None:
        return self.enrichment.company_name if self.enrichment else None

    @property
    def company_id(self) -> int | str | None:
        return self.enrichment.company_id if self.enrichment else None

    @property
    def display_name(self) -> str:
        """Customer name when known, otherwise the customer ID."""
        return self.customer_name or f"Customer {self.customer_id}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict (camelCase, as the API returns)."""
        return {
            "accountId": self.account_id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "companyName": self.company_name,
            "companyId": self.company_id,
            "status": self.status.value,
            "balance": self.balance,
            "hasActivity": self.has_activity,
            "daysSinceCreation": self.days_since_creation,
            "daysSinceLastActivity": self.days_since_last_activity,
            "accountCreated": self.account_created.isoformat(),
            "lastActivity": self.last_activity.isoformat() if self.last_activity else None,
        }


@dataclass
class DormancyAlert:
    """Accounts that triggered one alert tier."""

    type: AlertType
    accounts: list[AccountActivity]
    reason: str

    @property
    def total_balance(self) -> int:
        return sum(a.balance for a in self.accounts)

    @property
    def average_age(self) -> int:
        if not self.accounts:
            return 0
        return round(sum(a.days_since_creation for a in self.accounts) / len(self.accounts))

    @property
    def oldest_age(self) -> int:
        return max((a.days_since_creation for a in self.accounts), default=0)


@dataclass
class ClassificationResult:
    """Disjoint output sets of the classifier."""

    communication_needed: list[AccountActivity] = field(default_factory=list)
    closure_needed: list[AccountActivity] = field(default_factory=list)


@dataclass
class UpcomingAlerts:
    """Accounts approaching a threshold (summary view only)."""

    communication_soon: list[AccountActivity] = field(default_factory=list)
    closure_soon: list[AccountActivity] = field(default_factory=list)


@dataclass
class DormancyReport:
    """Result of one dormancy analysis run."""

    communication_needed: list[AccountActivity] = field(default_factory=list)
    closure_needed: list[AccountActivity] = field(default_factory=list)
    total_accounts: int = 0
    accounts_by_status: dict[str, int] = field(default_factory=dict)
    upcoming: UpcomingAlerts = field(default_factory=UpcomingAlerts)
    activities: list[AccountActivity] = field(default_factory=list)
    enriched: bool = False
    transaction_lookup_enabled: bool = True
    as_of: datetime | None = None  # Reference time for day counts
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def flagged(self) -> list[AccountActivity]:
        return [*self.communication_needed, *self.closure_needed]

    @property
    def duration_seconds(self) -> int:
        if not self.started_at or not self.finished_at:
            return 0
        return round((self.finished_at - self.started_at).total_seconds())


@dataclass
class CheckResult:
    """Outcome of a scheduled or manual dormancy check."""

    success: bool
    message: str
    communication_needed: int = 0
    closure_needed: int = 0
    skipped: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "communicationNeeded": self.communication_needed,
            "closureNeeded": self.closure_needed,
            "skipped": self.skipped,
        }
