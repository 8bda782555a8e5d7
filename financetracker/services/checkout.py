"""
PayPal Checkout Hand-off

Builds the URL of PayPal's hosted subscription page. Opening it ends the
client's involvement; provisioning happens between PayPal and the backend,
which matches the payment to the user through custom_id.
"""

from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from financetracker.config import PayPalSettings, get_settings


class BillingInterval(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CheckoutService:
    """Maps a billing interval to a PayPal subscription URL."""

    def __init__(self, settings: Optional[PayPalSettings] = None):
        self._settings = settings or get_settings().paypal

    def plan_id_for(self, interval: BillingInterval) -> str:
        if interval == BillingInterval.YEARLY:
            return self._settings.yearly_plan_id
        return self._settings.monthly_plan_id

    def subscription_url(self, interval: BillingInterval, user_id: Optional[str]) -> str:
        query = urlencode({
            "plan_id": self.plan_id_for(interval),
            "custom_id": user_id or "",
        })
        return f"{self._settings.subscribe_url}?{query}"
