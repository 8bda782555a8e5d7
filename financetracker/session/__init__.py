"""Session package. AuthService lives in financetracker.session.auth."""

from financetracker.session.store import SessionStore

__all__ = ["SessionStore"]
