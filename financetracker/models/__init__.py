"""
Data Models Package

This package contains all Pydantic models used by the FinanceTracker client.
Everything received from the backend is parsed into these schemas before a
controller looks at it.
"""

from financetracker.models.finance import (
    FREE_OCR_LIMIT,
    FREE_TX_LIMIT,
    PRO_DISPLAY_PCT,
    Account,
    Direction,
    PaginationCursor,
    Session,
    SubscriptionUsage,
    SubscriptionView,
    Transaction,
    UsageSeverity,
    User,
    WeeklySummary,
)
from financetracker.models.chat import (
    ChatMessage,
    PendingImage,
    Sender,
    TypingIndicator,
)
from financetracker.models.notice import (
    Notice,
    NoticeBuilder,
    NoticeKind,
    NoticeLevel,
)
from financetracker.models.results import (
    AuthExpired,
    BackendResult,
    Ok,
    QuotaExceeded,
    Rejected,
    TransportError,
    classify,
)

__all__ = [
    # Finance models
    "FREE_OCR_LIMIT",
    "FREE_TX_LIMIT",
    "PRO_DISPLAY_PCT",
    "Account",
    "Direction",
    "PaginationCursor",
    "Session",
    "SubscriptionUsage",
    "SubscriptionView",
    "Transaction",
    "UsageSeverity",
    "User",
    "WeeklySummary",
    # Chat models
    "ChatMessage",
    "PendingImage",
    "Sender",
    "TypingIndicator",
    # Notice models
    "Notice",
    "NoticeBuilder",
    "NoticeKind",
    "NoticeLevel",
    # Result variants
    "AuthExpired",
    "BackendResult",
    "Ok",
    "QuotaExceeded",
    "Rejected",
    "TransportError",
    "classify",
]
