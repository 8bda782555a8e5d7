"""Display formatting for money and dates."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union


Amount = Union[Decimal, int, float, str, None]

CENTS = Decimal("0.01")


def format_jmd(amount: Amount) -> str:
    """Format an amount as Jamaican dollars, e.g. J$2,000.00."""
    try:
        value = Decimal(str(amount)) if amount not in (None, "") else Decimal("0")
    except InvalidOperation:
        value = Decimal("0")
    if not value.is_finite():
        value = Decimal("0")
    # Half-cents round away from zero, not to even
    value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"J${value:,.2f}"


def format_date(value: Optional[datetime]) -> str:
    """Format a timestamp as e.g. 05 Jan 2025. None renders as empty."""
    if value is None:
        return ""
    return value.strftime("%d %b %Y")
