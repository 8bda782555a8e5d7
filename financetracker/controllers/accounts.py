"""Accounts view: the full account list with balances."""

from typing import Optional

from pydantic import ValidationError

from financetracker.controllers.base import Controller
from financetracker.controllers.dashboard import ACCOUNT_LIST
from financetracker.controllers.views import AccountCard, render_accounts
from financetracker.services.gateway import ApiGateway, Endpoints


class AccountsView(Controller):
    """Loads and holds the account cards for the accounts screen."""

    name = "accounts"

    def __init__(self, gateway: ApiGateway):
        super().__init__()
        self._gateway = gateway
        self.cards: Optional[list[AccountCard]] = None
        self.empty_message: Optional[str] = None

    async def load(self) -> bool:
        seq = self._next_seq()
        result = await self._gateway.fetch(Endpoints.ACCOUNTS)
        if not self._accept(result, seq, "accounts"):
            return False

        try:
            accounts = ACCOUNT_LIST.validate_python(result.get("accounts") or [])
        except ValidationError as e:
            self._logger.error("accounts_invalid", error=str(e))
            return False

        self.cards, self.empty_message = render_accounts(accounts)
        self._changed("accounts")
        return True
