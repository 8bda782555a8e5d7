"""
View Models

Plain rows and cards the rendering surface draws as-is. Building them here
keeps the Streamlit page free of formatting rules and lets tests assert on
exactly what a user would see.
"""

from typing import Optional

from pydantic import BaseModel

from financetracker.formatting import format_date, format_jmd
from financetracker.models.finance import Account, Direction, Transaction


NO_TRANSACTIONS_MESSAGE = "No transactions yet. Start by sending a message!"
NO_ACCOUNTS_MESSAGE = 'No accounts yet. Tell me: "I have 30k in NCB and 5k cash"'


class TransactionRow(BaseModel):
    id: Optional[str]
    item: str
    meta: str
    amount_text: str
    direction: Direction
    deletable: bool


class AccountCard(BaseModel):
    account_type: str
    name: str
    balance_text: str


def transaction_row(tx: Transaction, show_actions: bool) -> TransactionRow:
    sign = "+" if tx.is_inflow else "-"
    meta = " · ".join([
        tx.category,
        tx.payment_method or "unknown",
        format_date(tx.created_at),
    ])
    return TransactionRow(
        id=tx.id,
        item=tx.item,
        meta=meta,
        amount_text=f"{sign}{format_jmd(tx.amount)}",
        direction=tx.direction,
        deletable=show_actions and tx.id is not None,
    )


def render_transactions(
    transactions: list[Transaction],
    show_actions: bool,
) -> tuple[list[TransactionRow], Optional[str]]:
    """
    Rows for a transaction list.

    Returns:
        (rows, empty_message). empty_message is set only when there are
        no rows, so the surface shows guidance instead of an empty list.
    """
    if not transactions:
        return [], NO_TRANSACTIONS_MESSAGE
    return [transaction_row(tx, show_actions) for tx in transactions], None


def render_accounts(accounts: list[Account]) -> tuple[list[AccountCard], Optional[str]]:
    """Cards for an account list, or guidance when there are none."""
    if not accounts:
        return [], NO_ACCOUNTS_MESSAGE
    cards = [
        AccountCard(
            account_type=acc.account_type,
            name=acc.name,
            balance_text=format_jmd(acc.balance),
        )
        for acc in accounts
    ]
    return cards, None


def transaction_summary_line(tx: Transaction) -> str:
    """One chat line per logged transaction, e.g. 💸 lunch: J$2,000.00 (food)."""
    glyph = "💵" if tx.is_inflow else "💸"
    return f"{glyph} {tx.item}: {format_jmd(tx.amount)} ({tx.category})"
