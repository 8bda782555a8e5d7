"""
Dashboard and Subscription Aggregator

Combines several backend summaries into the numbers shown on the dashboard
and the plan screen.

DESIGN DECISION: The three dashboard reads are independent. Each one fills
its own section when it lands; a failure or an empty result in one section
never blocks or rolls back another. Partial dashboards are acceptable.

Both loaders are read-only and idempotent: running them again against
unchanged backend data yields the same state.
"""

import asyncio
from decimal import Decimal
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from financetracker.config import AppSettings, get_settings
from financetracker.controllers.base import Controller
from financetracker.controllers.views import (
    AccountCard,
    TransactionRow,
    render_accounts,
    render_transactions,
)
from financetracker.formatting import format_date, format_jmd
from financetracker.models.finance import (
    Account,
    SubscriptionUsage,
    SubscriptionView,
    Transaction,
    WeeklySummary,
)
from financetracker.models.results import Ok
from financetracker.services.gateway import ApiGateway, Endpoints


ACCOUNT_LIST = TypeAdapter(list[Account])
TRANSACTION_LIST = TypeAdapter(list[Transaction])


class DashboardAggregator(Controller):
    """
    State behind the dashboard and plan screens.

    Dashboard sections:
        summary   weekly income / expense / net / count
        accounts  account cards
        recent    latest transactions (no delete actions)

    Plan section:
        subscription  SubscriptionView
    """

    name = "dashboard"

    def __init__(self, gateway: ApiGateway, settings: Optional[AppSettings] = None):
        super().__init__()
        self._gateway = gateway
        self._settings = settings or get_settings().app
        self._subscription_seq = 0

        self.summary: Optional[WeeklySummary] = None
        self.accounts: Optional[list[AccountCard]] = None
        self.accounts_empty_message: Optional[str] = None
        self.recent: Optional[list[TransactionRow]] = None
        self.recent_empty_message: Optional[str] = None
        self.subscription: Optional[SubscriptionView] = None

    # ------------------------------------------------------------------
    # Derived dashboard values
    # ------------------------------------------------------------------

    @property
    def income(self) -> Decimal:
        return self.summary.total_income if self.summary else Decimal("0")

    @property
    def expense(self) -> Decimal:
        return self.summary.total_expense if self.summary else Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense

    @property
    def tx_count(self) -> int:
        return self.summary.tx_count if self.summary else 0

    def snapshot(self) -> dict[str, Any]:
        """Everything the surface would render, as plain data."""
        sub = self.subscription
        return {
            "income": format_jmd(self.income),
            "expense": format_jmd(self.expense),
            "net": format_jmd(self.net),
            "tx_count": self.tx_count,
            "accounts": [c.model_dump() for c in self.accounts] if self.accounts is not None else None,
            "accounts_empty_message": self.accounts_empty_message,
            "recent": [r.model_dump() for r in self.recent] if self.recent is not None else None,
            "recent_empty_message": self.recent_empty_message,
            "subscription": self.subscription_lines() if sub else None,
        }

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    async def load_dashboard(self) -> None:
        """
        Fetch weekly summary, accounts and recent transactions concurrently.

        Each section is applied as soon as its own read succeeds. Nothing
        is raised: every failure is contained in its section.
        """
        seq = self._next_seq()
        await asyncio.gather(
            self._load_summary(seq),
            self._load_accounts(seq),
            self._load_recent(seq),
        )

    async def _load_summary(self, seq: int) -> None:
        result = await self._gateway.fetch(Endpoints.SUMMARY, params={"period": "week"})
        if not self._accept(result, seq, "summary"):
            return
        raw = result.get("summary")
        if not raw:
            return
        try:
            self.summary = WeeklySummary.model_validate(raw)
        except ValidationError as e:
            self._logger.error("summary_invalid", error=str(e))
            return
        self._changed("summary")

    async def _load_accounts(self, seq: int) -> None:
        result = await self._gateway.fetch(Endpoints.ACCOUNTS)
        if not self._accept(result, seq, "accounts"):
            return
        raw = result.get("accounts")
        if raw is None:
            return
        try:
            accounts = ACCOUNT_LIST.validate_python(raw)
        except ValidationError as e:
            self._logger.error("accounts_invalid", error=str(e))
            return
        self.accounts, self.accounts_empty_message = render_accounts(accounts)
        self._changed("accounts")

    async def _load_recent(self, seq: int) -> None:
        result = await self._gateway.fetch(
            Endpoints.TRANSACTIONS,
            params={"limit": self._settings.dashboard_recent_limit, "offset": 0},
        )
        if not self._accept(result, seq, "recent"):
            return
        raw = result.get("transactions")
        if raw is None:
            return
        try:
            transactions = TRANSACTION_LIST.validate_python(raw)
        except ValidationError as e:
            self._logger.error("recent_transactions_invalid", error=str(e))
            return
        self.recent, self.recent_empty_message = render_transactions(
            transactions, show_actions=False
        )
        self._changed("recent")

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    async def load_subscription(self) -> Optional[SubscriptionView]:
        """Fetch subscription status and derive the plan screen values."""
        self._subscription_seq += 1
        seq = self._subscription_seq

        result = await self._gateway.fetch(Endpoints.SUBSCRIPTION)
        if not isinstance(result, Ok):
            self._logger.warning("subscription_not_loaded", outcome=type(result).__name__)
            return self.subscription
        if seq != self._subscription_seq:
            self._logger.info("stale_subscription_discarded", seq=seq)
            return self.subscription

        raw = result.get("subscription")
        if not raw:
            return self.subscription
        try:
            usage = SubscriptionUsage.model_validate(raw)
        except ValidationError as e:
            self._logger.error("subscription_invalid", error=str(e))
            return self.subscription

        self.subscription = SubscriptionView.from_usage(usage)
        self._changed("subscription")
        return self.subscription

    def subscription_lines(self) -> dict[str, Any]:
        """Text and bar values for the plan screen."""
        sub = self.subscription
        if sub is None:
            return {}
        status_line = f"Status: {sub.status}"
        if sub.current_period_end:
            status_line += f" · Renews: {format_date(sub.current_period_end)}"
        return {
            "badge": sub.badge,
            "plan_title": sub.plan_title,
            "status_line": status_line,
            "tx_usage": f"{sub.tx_count} / {sub.tx_limit_label}",
            "ocr_usage": f"{sub.ocr_count} / {sub.ocr_limit_label}",
            "tx_pct": sub.tx_pct,
            "ocr_pct": sub.ocr_pct,
            "tx_severity": sub.tx_severity.value,
            "ocr_severity": sub.ocr_severity.value,
        }
