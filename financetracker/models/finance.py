"""
Core Data Models for FinanceTracker

These models define the schemas for everything the client receives from the
webhook backend or keeps in memory for rendering. They are designed to:
1. Enforce type safety at the network boundary
2. Keep derived UI values (usage bars, plan badge) out of the views
3. Be serializable for durable storage and logging

DESIGN DECISION: The backend owns all financial data. These models are
read-mostly snapshots; the client never edits a Transaction or Account
locally, it asks the backend and re-fetches.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# Free plan ceilings per billing period
FREE_TX_LIMIT = 100
FREE_OCR_LIMIT = 3

# Usage bars for unlimited plans have nothing to divide by, so they are drawn
# at a fixed nominal width. This is not a usage metric.
PRO_DISPLAY_PCT = 10.0


def _lenient_datetime(value):
    """Parse ISO timestamps, turning anything unparseable into None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _lenient_count(value) -> int:
    """Counts arrive as ints, numeric strings or garbage. Garbage is 0."""
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


# =============================================================================
# ENUMS
# =============================================================================

class Direction(str, Enum):
    """Money flowing into or out of the user's accounts."""
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class UsageSeverity(str, Enum):
    """Visual tier of a usage bar."""
    NORMAL = "normal"
    WARNING = "warning"
    DANGER = "danger"

    @classmethod
    def for_percentage(cls, pct: float) -> "UsageSeverity":
        if pct > 80:
            return cls.DANGER
        if pct > 50:
            return cls.WARNING
        return cls.NORMAL


# =============================================================================
# IDENTITY
# =============================================================================

class User(BaseModel):
    """The signed-in user's profile as returned by the auth endpoints."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.first_name or "User"


class Session(BaseModel):
    """
    Authentication state.

    CRITICAL: token and user are both present or both absent.
    A half-populated session is rejected at construction time.
    """
    model_config = ConfigDict(frozen=True)

    token: Optional[str] = None
    user: Optional[User] = None

    @model_validator(mode="after")
    def validate_pairing(self) -> "Session":
        if (self.token is None) != (self.user is None):
            raise ValueError("Session token and user must be set together")
        if self.token is not None and not self.token:
            raise ValueError("Session token cannot be empty")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None


# =============================================================================
# FINANCIAL DATA
# =============================================================================

class Transaction(BaseModel):
    """A logged transaction. Amounts are in JMD."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    id: Optional[str] = None
    item: str = ""
    amount: Decimal = Field(default=Decimal("0"))
    direction: Direction = Direction.OUTFLOW
    category: str = "uncategorized"
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("item", "category", mode="before")
    @classmethod
    def null_is_default(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def amount_or_zero(cls, v):
        return 0 if v is None or v == "" else v

    @field_validator("direction", mode="before")
    @classmethod
    def unknown_direction_is_outflow(cls, v):
        return Direction.INFLOW if v == Direction.INFLOW.value else Direction.OUTFLOW

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v):
        return _lenient_datetime(v)

    @property
    def is_inflow(self) -> bool:
        return self.direction == Direction.INFLOW


class Account(BaseModel):
    """A user account (bank, cash, card). Read-only on the client."""
    model_config = ConfigDict(extra="ignore")

    account_type: str = ""
    name: str = ""
    balance: Decimal = Field(default=Decimal("0"))

    @field_validator("balance", mode="before")
    @classmethod
    def balance_or_zero(cls, v):
        return 0 if v is None or v == "" else v


class WeeklySummary(BaseModel):
    """Totals for the current week, as computed by the backend."""
    model_config = ConfigDict(extra="ignore")

    total_income: Decimal = Field(default=Decimal("0"))
    total_expense: Decimal = Field(default=Decimal("0"))
    tx_count: int = 0

    @field_validator("total_income", "total_expense", mode="before")
    @classmethod
    def money_or_zero(cls, v):
        return 0 if v is None or v == "" else v

    @field_validator("tx_count", mode="before")
    @classmethod
    def count_or_zero(cls, v):
        return _lenient_count(v)

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense


# =============================================================================
# SUBSCRIPTION
# =============================================================================

class SubscriptionUsage(BaseModel):
    """Raw subscription status and usage counters for the current period."""
    model_config = ConfigDict(extra="ignore")

    plan_name: str = "free"
    status: str = "active"
    current_period_end: Optional[datetime] = None
    tx_count: int = 0
    ocr_count: int = 0

    @field_validator("plan_name", "status", mode="before")
    @classmethod
    def blank_is_default(cls, v, info):
        if not v:
            return "free" if info.field_name == "plan_name" else "active"
        return v

    @field_validator("current_period_end", mode="before")
    @classmethod
    def parse_period_end(cls, v):
        return _lenient_datetime(v)

    @field_validator("tx_count", "ocr_count", mode="before")
    @classmethod
    def count_or_zero(cls, v):
        return _lenient_count(v)


class SubscriptionView(BaseModel):
    """
    Usage figures derived from SubscriptionUsage for the plan screen.

    Limits of None mean unlimited. For unlimited plans the percentages are
    PRO_DISPLAY_PCT, a fixed bar width rather than a measurement.
    """
    model_config = ConfigDict(frozen=True)

    is_pro: bool
    plan_name: str
    status: str
    current_period_end: Optional[datetime] = None
    tx_count: int
    ocr_count: int
    tx_limit: Optional[int]
    ocr_limit: Optional[int]
    tx_pct: float
    ocr_pct: float

    @classmethod
    def from_usage(cls, usage: SubscriptionUsage) -> "SubscriptionView":
        is_pro = usage.plan_name != "free" and usage.status == "active"

        if is_pro:
            tx_limit = ocr_limit = None
            tx_pct = ocr_pct = PRO_DISPLAY_PCT
        else:
            tx_limit, ocr_limit = FREE_TX_LIMIT, FREE_OCR_LIMIT
            tx_pct = min(usage.tx_count / tx_limit * 100, 100.0)
            ocr_pct = min(usage.ocr_count / ocr_limit * 100, 100.0)

        return cls(
            is_pro=is_pro,
            plan_name=usage.plan_name,
            status=usage.status,
            current_period_end=usage.current_period_end,
            tx_count=usage.tx_count,
            ocr_count=usage.ocr_count,
            tx_limit=tx_limit,
            ocr_limit=ocr_limit,
            tx_pct=tx_pct,
            ocr_pct=ocr_pct,
        )

    @property
    def tx_severity(self) -> UsageSeverity:
        return UsageSeverity.for_percentage(self.tx_pct)

    @property
    def ocr_severity(self) -> UsageSeverity:
        return UsageSeverity.for_percentage(self.ocr_pct)

    @property
    def badge(self) -> str:
        return "PRO" if self.is_pro else "Free"

    @property
    def plan_title(self) -> str:
        return "Pro Plan" if self.is_pro else "Free Plan"

    @property
    def tx_limit_label(self) -> str:
        return "∞" if self.tx_limit is None else str(self.tx_limit)

    @property
    def ocr_limit_label(self) -> str:
        return "∞" if self.ocr_limit is None else str(self.ocr_limit)


# =============================================================================
# PAGINATION
# =============================================================================

class PaginationCursor(BaseModel):
    """
    Which slice of the transaction history is on screen.

    Immutable: moving the cursor returns a new cursor.
    """
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=20, ge=1)

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    def next(self) -> "PaginationCursor":
        return self.model_copy(update={"page": self.page + 1})

    def previous(self) -> "PaginationCursor":
        if self.page == 0:
            return self
        return self.model_copy(update={"page": self.page - 1})
