"""Tests for money/date formatting and view rows."""

from datetime import datetime
from decimal import Decimal

from financetracker.controllers.views import (
    NO_ACCOUNTS_MESSAGE,
    NO_TRANSACTIONS_MESSAGE,
    render_accounts,
    render_transactions,
    transaction_summary_line,
)
from financetracker.formatting import format_date, format_jmd
from financetracker.models.finance import Account, Transaction


class TestFormatting:

    def test_format_jmd_groups_thousands(self):
        """Test J$ formatting with separators and two decimals."""
        assert format_jmd(Decimal("2000")) == "J$2,000.00"
        assert format_jmd(1234567.5) == "J$1,234,567.50"

    def test_format_jmd_rounds_half_away_from_zero(self):
        """Test that half-cents round up, not to the even cent."""
        assert format_jmd(Decimal("2.125")) == "J$2.13"
        assert format_jmd("2.135") == "J$2.14"
        assert format_jmd("-2.125") == "J$-2.13"

    def test_format_jmd_bad_input_is_zero(self):
        """Test that garbage never raises."""
        assert format_jmd(None) == "J$0.00"
        assert format_jmd("abc") == "J$0.00"
        assert format_jmd("NaN") == "J$0.00"

    def test_format_date(self):
        assert format_date(datetime(2025, 1, 5)) == "05 Jan 2025"
        assert format_date(None) == ""


class TestViewRows:

    def test_transaction_row(self):
        """Test row text for an expense."""
        tx = Transaction(
            id="t-1", item="lunch", amount=2000, direction="outflow",
            category="food", created_at="2025-01-05T10:00:00Z",
        )
        rows, empty = render_transactions([tx], show_actions=True)
        assert empty is None
        row = rows[0]
        assert row.amount_text == "-J$2,000.00"
        assert row.meta == "food · unknown · 05 Jan 2025"
        assert row.deletable

    def test_inflow_row_has_plus(self):
        tx = Transaction(id="t-2", item="salary", amount=50000, direction="inflow")
        rows, _ = render_transactions([tx], show_actions=False)
        assert rows[0].amount_text == "+J$50,000.00"
        assert not rows[0].deletable

    def test_empty_lists_show_guidance(self):
        """Test that empty lists become guidance, not blank space."""
        assert render_transactions([], show_actions=True) == ([], NO_TRANSACTIONS_MESSAGE)
        assert render_accounts([]) == ([], NO_ACCOUNTS_MESSAGE)

    def test_account_cards(self):
        cards, empty = render_accounts([Account(account_type="bank", name="NCB", balance="30000")])
        assert empty is None
        assert cards[0].balance_text == "J$30,000.00"

    def test_summary_line(self):
        """Test the chat line for a logged expense."""
        tx = Transaction(item="lunch", amount=2000, category="food")
        assert transaction_summary_line(tx) == "💸 lunch: J$2,000.00 (food)"
