"""
Centralized configuration using Pydantic Settings.

All environment variables are loaded and validated here.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from dormancy_checker.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Unit API
    unit_api_token: str = ""
    unit_api_base_url: str = "https://api.s.unit.sh"
    unit_timeout_seconds: float = 30.0
    unit_page_size: int = 100
    unit_max_accounts: int = 50_000  # Safety cap for a single run
    unit_page_delay_seconds: float = 0.05

    # Activity lookups
    # Tokens without the transactions scope get 403 on every lookup;
    # disable to classify by creation date only.
    transaction_lookup_enabled: bool = True
    activity_pacing_delay_seconds: float = 0.05
    activity_pacing_batch: int = 100

    # Customer / employer enrichment
    enrichment_enabled: bool = True
    enrichment_timeout_seconds: float = 10.0
    enrichment_failure_budget: int = 25
    enrichment_deadline_seconds: float = 120.0
    enrichment_pacing_delay_seconds: float = 0.05
    enrichment_pacing_batch: int = 100
    employer_mapping_url: str = (
        "https://raw.githubusercontent.com/standardholdingsllc/"
        "hubspot-address-mapper/main/web-app/data/address_mappings.json"
    )
    employer_mapping_timeout_seconds: float = 10.0

    # Slack
    slack_webhook_url: str = ""
    slack_timeout_seconds: float = 10.0
    slack_max_listed_accounts: int = 500  # Above this, send a summary alert only

    # Bearer secret for the HTTP routes (unset = open)
    cron_secret: str = ""

    # Scheduler (weekdays only)
    scheduler_enabled: bool = False
    scheduler_hour: int = 14
    scheduler_minute: int = 0
    scheduler_timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def is_sandbox(self) -> bool:
        """True when pointed at the Unit sandbox environment."""
        return "s.unit.sh" in self.unit_api_base_url

    @property
    def unit_auth_header(self) -> dict[str, str]:
        """Unit API authorization header."""
        return {"Authorization": f"Bearer {self.unit_api_token}"}

    def require_unit(self) -> None:
        """Fail fast when Unit credentials are missing."""
        missing = []
        if not self.unit_api_token:
            missing.append("UNIT_API_TOKEN")
        if not self.unit_api_base_url:
            missing.append("UNIT_API_BASE_URL")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

    def require_slack(self) -> None:
        """Fail fast when the Slack webhook is missing."""
        if not self.slack_webhook_url:
            raise ConfigurationError(
                "Missing required environment variables: SLACK_WEBHOOK_URL"
            )


# Global settings instance
settings = Settings()
