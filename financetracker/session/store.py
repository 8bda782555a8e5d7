"""
Session Store

The single source of truth for whether the client is authenticated.

DESIGN DECISION: The session is an owned, injectable service rather than
ambient global state. Every component that needs the token receives the
store and reads it; only set() and clear() ever change it.

CRITICAL: token and user change together. set() validates the pair and
persists it before publishing it in memory; clear() drops both.
"""

from typing import Callable, Optional

from pydantic import ValidationError

from financetracker.models.finance import Session, User
from financetracker.notices import get_logger
from financetracker.services.storage import (
    TOKEN_KEY,
    USER_KEY,
    SessionStorageInterface,
    StorageError,
)


SessionListener = Callable[[Session], None]


class SessionStore:
    """
    Holds the current Session and mirrors it to durable storage.

    The generation counter increases on every set() and clear(). The API
    gateway records the generation a request was issued under, so a 401
    for a session that has already been replaced is recognised as stale.
    """

    def __init__(self, storage: SessionStorageInterface):
        self._storage = storage
        self._session = Session()
        self._generation = 0
        self._listeners: list[SessionListener] = []
        self._logger = get_logger("financetracker.session")

    @classmethod
    def restore(cls, storage: SessionStorageInterface) -> "SessionStore":
        """
        Build a store from whatever was persisted on a previous run.

        A half-written or undecodable session is discarded.
        """
        store = cls(storage)
        token = storage.get(TOKEN_KEY)
        raw_user = storage.get(USER_KEY)
        if token is None and raw_user is None:
            return store

        try:
            store._session = Session(
                token=token,
                user=User.model_validate(raw_user) if raw_user is not None else None,
            )
            store._generation = 1
        except ValidationError as e:
            store._logger.warning("persisted_session_discarded", error=str(e))
            try:
                storage.remove(TOKEN_KEY, USER_KEY)
            except StorageError as cleanup_error:
                store._logger.error("session_cleanup_failed", error=str(cleanup_error))
        return store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self) -> Session:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def user(self) -> Optional[User]:
        return self._session.user

    @property
    def generation(self) -> int:
        return self._generation

    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, token: str, user: User) -> Session:
        """
        Replace the session with a new authenticated one.

        Raises:
            ValidationError: If token or user is missing
            StorageError: If the session could not be persisted. In that
                case the in-memory session is left untouched.
        """
        session = Session(token=token, user=user)
        self._storage.set_many({
            TOKEN_KEY: session.token,
            USER_KEY: session.user.model_dump(),
        })
        self._session = session
        self._generation += 1
        self._logger.info("session_started", user_id=session.user.id)
        self._notify()
        return session

    def clear(self) -> None:
        """
        Drop the session from memory and from durable storage.

        Memory is cleared first: a storage failure is logged but never
        leaves the client looking authenticated.
        """
        was_authenticated = self._session.is_authenticated
        self._session = Session()
        self._generation += 1
        try:
            self._storage.remove(TOKEN_KEY, USER_KEY)
        except StorageError as e:
            self._logger.error("session_storage_clear_failed", error=str(e))
        if was_authenticated:
            self._logger.info("session_cleared")
        self._notify()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> None:
        """Call listener with the new Session after every set() and clear()."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)
