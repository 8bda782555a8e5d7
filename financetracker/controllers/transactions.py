"""
Transaction Browser

Pages through the transaction history and deletes transactions.

State machine:
    cursor.page       current page, never negative
    next_enabled      False once a page comes back short
    prev_enabled      False on the first page

There is no total-count query. A page shorter than page_size is the last
one.

DESIGN DECISION: The cursor moves only when the fetch for the new page
succeeds. A failed "next" leaves the user on the page they can still see.
"""

import asyncio
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from financetracker.config import AppSettings, get_settings
from financetracker.controllers.base import Controller
from financetracker.controllers.dashboard import TRANSACTION_LIST, DashboardAggregator
from financetracker.controllers.views import TransactionRow, render_transactions
from financetracker.models.finance import PaginationCursor
from financetracker.models.results import AuthExpired, Ok, TransportError
from financetracker.notices import Notifier
from financetracker.services.gateway import ApiGateway, Endpoints


DELETE_CONFIRMATION = "Delete this transaction?"
LOAD_FAILED_MESSAGE = "Could not load transactions."

ConfirmPrompt = Callable[[str], bool]


class PageDirection(str, Enum):
    NEXT = "next"
    PREV = "prev"


class TransactionBrowser(Controller):
    """Paginated transaction list with delete actions."""

    name = "transactions"

    def __init__(
        self,
        gateway: ApiGateway,
        notifier: Notifier,
        dashboard: DashboardAggregator,
        confirm: ConfirmPrompt,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__()
        self._gateway = gateway
        self._notifier = notifier
        self._dashboard = dashboard
        self._confirm = confirm
        page_size = (settings or get_settings().app).transactions_page_size

        self.cursor = PaginationCursor(page=0, page_size=page_size)
        self.rows: list[TransactionRow] = []
        self.empty_message: Optional[str] = None
        self.error_message: Optional[str] = None
        self.next_enabled = False

    @property
    def prev_enabled(self) -> bool:
        return self.cursor.has_previous

    @property
    def page_label(self) -> str:
        return f"Page {self.cursor.page + 1}"

    async def load(self, direction: Optional[PageDirection] = None) -> bool:
        """
        Load the next, previous or current page.

        Args:
            direction: PageDirection.NEXT, PageDirection.PREV, or None to
                re-fetch the current page (after a delete)

        Returns:
            True if a page was fetched and applied
        """
        if direction is not None:
            direction = PageDirection(direction)

        if direction == PageDirection.PREV and not self.cursor.has_previous:
            return False

        if direction == PageDirection.NEXT:
            target = self.cursor.next()
        elif direction == PageDirection.PREV:
            target = self.cursor.previous()
        else:
            target = self.cursor

        seq = self._next_seq()
        result = await self._gateway.fetch(
            Endpoints.TRANSACTIONS,
            params={"limit": target.page_size, "offset": target.offset},
        )
        if not self._is_current(seq):
            return False

        if not isinstance(result, Ok):
            if not isinstance(result, (AuthExpired, TransportError)):
                self.error_message = result.message or LOAD_FAILED_MESSAGE
                self._changed("transactions")
            return False

        try:
            transactions = TRANSACTION_LIST.validate_python(result.get("transactions") or [])
        except ValidationError as e:
            self._logger.error("transactions_invalid", error=str(e))
            self.error_message = LOAD_FAILED_MESSAGE
            self._changed("transactions")
            return False

        self.cursor = target
        self.rows, self.empty_message = render_transactions(transactions, show_actions=True)
        self.next_enabled = len(transactions) >= target.page_size
        self.error_message = None
        self._changed("transactions")
        return True

    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Delete a transaction after the user confirms.

        On success the current page and the dashboard are both reloaded so
        balances reflect the deletion. On failure nothing changes.

        Returns:
            True if the backend deleted the transaction
        """
        if not self._confirm(DELETE_CONFIRMATION):
            return False

        result = await self._gateway.fetch(
            Endpoints.EDIT_TRANSACTION,
            method="POST",
            body={"transaction_id": transaction_id, "action": "delete"},
        )

        if isinstance(result, Ok):
            self._notifier.transaction_deleted(transaction_id)
            await asyncio.gather(self.load(), self._dashboard.load_dashboard())
            return True

        if isinstance(result, AuthExpired):
            return False
        if isinstance(result, TransportError):
            self._notifier.delete_failed(transaction_id)
        else:
            self._notifier.delete_failed(transaction_id, result.message)
        return False
