"""Configuration package."""

from financetracker.config.settings import (
    ApiSettings,
    AppSettings,
    PayPalSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "PayPalSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
