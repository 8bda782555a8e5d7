"""
View Router

Tracks which top-level view is active and runs its loader on activation.
The session gates everything: while anonymous there is no active view and
the surface shows the auth forms.
"""

import asyncio
from enum import Enum
from typing import Optional

from financetracker.controllers.accounts import AccountsView
from financetracker.controllers.base import Controller
from financetracker.controllers.dashboard import DashboardAggregator
from financetracker.controllers.transactions import TransactionBrowser
from financetracker.models.finance import Session
from financetracker.session.store import SessionStore


class View(str, Enum):
    CHAT = "chat"
    DASHBOARD = "dashboard"
    TRANSACTIONS = "transactions"
    ACCOUNTS = "accounts"
    SUBSCRIPTION = "subscription"


class ViewRouter(Controller):
    """Active view plus the loader each view triggers."""

    name = "router"

    def __init__(
        self,
        session_store: SessionStore,
        dashboard: DashboardAggregator,
        transactions: TransactionBrowser,
        accounts: AccountsView,
    ):
        super().__init__()
        self._session = session_store
        self._dashboard = dashboard
        self._transactions = transactions
        self._accounts = accounts
        self.active_view: Optional[View] = None

        session_store.subscribe(self._on_session_change)

    @property
    def is_anonymous(self) -> bool:
        return self.active_view is None

    async def show_app(self) -> None:
        """
        Enter authenticated mode on the chat view.

        Loads the dashboard and subscription so the header badge and
        totals are ready before the user switches view.
        """
        if not self._session.is_authenticated():
            return
        self.active_view = View.CHAT
        self._changed("view")
        await asyncio.gather(
            self._dashboard.load_dashboard(),
            self._dashboard.load_subscription(),
        )

    async def switch_view(self, view: View) -> None:
        """Activate a view and run its loader. Ignored while anonymous."""
        if not self._session.is_authenticated():
            return
        view = View(view)
        self.active_view = view
        self._changed("view")

        if view == View.DASHBOARD:
            await self._dashboard.load_dashboard()
        elif view == View.TRANSACTIONS:
            await self._transactions.load()
        elif view == View.ACCOUNTS:
            await self._accounts.load()
        elif view == View.SUBSCRIPTION:
            await self._dashboard.load_subscription()

    def _on_session_change(self, session: Session) -> None:
        if not session.is_authenticated and self.active_view is not None:
            self.active_view = None
            self._changed("view")
