"""
Notice Models for FinanceTracker

A notice is a short user-visible message (a toast) about something that
happened outside the chat transcript: a login, an expired session, a failed
delete, a network error.

DESIGN DECISION: Notices are records, not side effects. The notifier keeps
them so any rendering surface (or a test) can see exactly which notices
were emitted and how many times.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class NoticeKind(str, Enum):
    """What a notice is about."""
    LOGIN_SUCCEEDED = "login_succeeded"
    REGISTRATION_SUCCEEDED = "registration_succeeded"
    SESSION_EXPIRED = "session_expired"
    CONNECTION_ERROR = "connection_error"
    TRANSACTION_DELETED = "transaction_deleted"
    DELETE_FAILED = "delete_failed"
    CHECKOUT_REDIRECT = "checkout_redirect"


class NoticeLevel(str, Enum):
    """Toast styling."""
    SUCCESS = "success"
    ERROR = "error"


class Notice(BaseModel):
    """A single user-visible notice."""

    notice_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the notice was emitted (UTC)"
    )
    kind: NoticeKind
    level: NoticeLevel = NoticeLevel.SUCCESS
    message: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "notice_id": str(self.notice_id),
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "level": self.level.value,
            "message": self.message,
            "details": self.details,
        }


class NoticeBuilder:
    """
    Helper class to build the notices the client emits.

    Usage:
        notice = NoticeBuilder.session_expired()
        notice = NoticeBuilder.delete_failed("Transaction not found")
    """

    @staticmethod
    def login_succeeded(first_name: str) -> Notice:
        return Notice(
            kind=NoticeKind.LOGIN_SUCCEEDED,
            message=f"Welcome back, {first_name}!",
        )

    @staticmethod
    def registration_succeeded(first_name: str) -> Notice:
        return Notice(
            kind=NoticeKind.REGISTRATION_SUCCEEDED,
            message=f"Account created! Welcome, {first_name}!",
        )

    @staticmethod
    def session_expired(endpoint: str) -> Notice:
        return Notice(
            kind=NoticeKind.SESSION_EXPIRED,
            level=NoticeLevel.ERROR,
            message="Session expired. Please login again.",
            details={"endpoint": endpoint},
        )

    @staticmethod
    def connection_error(endpoint: str, error: str) -> Notice:
        return Notice(
            kind=NoticeKind.CONNECTION_ERROR,
            level=NoticeLevel.ERROR,
            message="Connection error. Check your network.",
            details={"endpoint": endpoint, "error": error},
        )

    @staticmethod
    def transaction_deleted(transaction_id: str) -> Notice:
        return Notice(
            kind=NoticeKind.TRANSACTION_DELETED,
            message="Transaction deleted",
            details={"transaction_id": transaction_id},
        )

    @staticmethod
    def delete_failed(transaction_id: str, error: str = None) -> Notice:
        return Notice(
            kind=NoticeKind.DELETE_FAILED,
            level=NoticeLevel.ERROR,
            message=error or "Delete failed",
            details={"transaction_id": transaction_id},
        )

    @staticmethod
    def checkout_redirect(plan_id: str, url: str) -> Notice:
        return Notice(
            kind=NoticeKind.CHECKOUT_REDIRECT,
            message="Redirecting to PayPal...",
            details={"plan_id": plan_id, "url": url},
        )
