"""View controllers: in-memory UI state and the operations that change it."""

from financetracker.controllers.accounts import AccountsView
from financetracker.controllers.chat import ChatController, ChatState, Transcript
from financetracker.controllers.dashboard import DashboardAggregator
from financetracker.controllers.router import View, ViewRouter
from financetracker.controllers.transactions import PageDirection, TransactionBrowser
from financetracker.controllers.views import (
    NO_ACCOUNTS_MESSAGE,
    NO_TRANSACTIONS_MESSAGE,
    AccountCard,
    TransactionRow,
)

__all__ = [
    "AccountCard",
    "AccountsView",
    "ChatController",
    "ChatState",
    "DashboardAggregator",
    "NO_ACCOUNTS_MESSAGE",
    "NO_TRANSACTIONS_MESSAGE",
    "PageDirection",
    "TransactionBrowser",
    "TransactionRow",
    "Transcript",
    "View",
    "ViewRouter",
]
