"""
Configuration Management for FinanceTracker

Typed settings read from environment variables and an optional .env file.

DESIGN DECISION: Every tunable lives here, grouped by concern.
The backend location and the PayPal plans have their own env prefixes,
and each group is validated when it is first read.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Backend (webhook) connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCETRACKER_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:5678/webhook",
        description="Base URL of the webhook backend"
    )
    api_prefix: str = Field(
        default="/finance",
        description="Path prefix prepended to every endpoint"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request timeout (the backend may run OCR)"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def url_for(self, endpoint: str) -> str:
        """Build the absolute URL for an endpoint path like '/api/message'."""
        return f"{self.base_url}{self.api_prefix}{endpoint}"


class PayPalSettings(BaseSettings):
    """PayPal hosted subscription checkout configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PAYPAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    monthly_plan_id: str = Field(
        default="P-XXXXXXXXXXXXXXXXXXXXXXXXXX",
        description="PayPal plan ID for the monthly Pro subscription"
    )
    yearly_plan_id: str = Field(
        default="P-YYYYYYYYYYYYYYYYYYYYYYYYYY",
        description="PayPal plan ID for the yearly Pro subscription"
    )
    subscribe_url: str = Field(
        default="https://www.paypal.com/webapps/billing/plans/subscribe",
        description="Hosted subscription page"
    )


class AppSettings(BaseSettings):
    """Client behaviour: logging, paging, local storage and uploads."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Browsing
    transactions_page_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Rows per page in the transactions view"
    )
    dashboard_recent_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of recent transactions on the dashboard"
    )

    # Durable client storage (token + user profile)
    storage_dir: Path = Field(
        default=Path.home() / ".financetracker",
        description="Directory holding the persisted session file"
    )

    # Receipt uploads
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt image size in MB"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp",
        description="Comma-separated list of supported image formats"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def supported_formats_list(self) -> list[str]:
        """Receipt extensions the uploader accepts, lower-cased."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Each group is read fresh from the environment when accessed.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def paypal(self) -> PayPalSettings:
        return PayPalSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Shared Settings instance.

    Tests and long-running surfaces can call get_settings.cache_clear()
    after changing the environment.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Check that every settings group loads.

    Returns:
        {group: loaded_ok}, plus "<group>_error" with the validation
        message for each group that failed
    """
    results = {}

    settings = get_settings()

    for name in ("api", "paypal", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
