"""
Auth Service

Login, registration and logout: the transitions of the session lifecycle.

No retries: a failed attempt is reported once and the user tries again.
"""

from typing import Optional

from pydantic import BaseModel, ValidationError

from financetracker.models.finance import User
from financetracker.models.results import AuthExpired, Ok, TransportError
from financetracker.notices import Notifier, get_logger
from financetracker.services.gateway import ApiGateway, Endpoints
from financetracker.services.storage import StorageError
from financetracker.session.store import SessionStore


CONNECTION_ERROR_MESSAGE = "Connection error. Is the backend running?"


class AuthOutcome(BaseModel):
    """Result of a login or registration attempt, ready for the auth form."""
    success: bool
    error: Optional[str] = None


class AuthService:
    """Drives the session in and out of the authenticated state."""

    def __init__(
        self,
        session_store: SessionStore,
        gateway: ApiGateway,
        notifier: Notifier,
    ):
        self._session = session_store
        self._gateway = gateway
        self._notifier = notifier
        self._logger = get_logger("financetracker.auth")

    async def login(self, email: str, password: str) -> AuthOutcome:
        """Log in with email and password."""
        outcome = await self._authenticate(
            Endpoints.LOGIN,
            {"email": email.strip(), "password": password},
            fallback_error="Login failed",
        )
        if outcome.success:
            self._notifier.login_succeeded(self._session.user.display_name)
        return outcome

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> AuthOutcome:
        """Create an account and log straight into it."""
        outcome = await self._authenticate(
            Endpoints.REGISTER,
            {
                "email": email.strip(),
                "password": password,
                "first_name": first_name.strip(),
                "last_name": last_name.strip(),
            },
            fallback_error="Registration failed",
        )
        if outcome.success:
            self._notifier.registration_succeeded(self._session.user.display_name)
        return outcome

    def logout(self) -> None:
        """Explicit logout by the user."""
        self._session.clear()

    async def _authenticate(
        self,
        endpoint: str,
        body: dict,
        fallback_error: str,
    ) -> AuthOutcome:
        result = await self._gateway.fetch(endpoint, method="POST", body=body)

        if isinstance(result, TransportError):
            return AuthOutcome(success=False, error=CONNECTION_ERROR_MESSAGE)
        if isinstance(result, AuthExpired):
            return AuthOutcome(success=False, error=result.message or fallback_error)
        if not isinstance(result, Ok):
            return AuthOutcome(success=False, error=result.message or fallback_error)

        try:
            user = User.model_validate(result.get("user"))
            self._session.set(result.get("token"), user)
        except ValidationError as e:
            self._logger.error("auth_response_invalid", endpoint=endpoint, error=str(e))
            return AuthOutcome(success=False, error=fallback_error)
        except StorageError as e:
            self._logger.error("session_persist_failed", endpoint=endpoint, error=str(e))
            return AuthOutcome(success=False, error="Could not save your session on this device.")

        return AuthOutcome(success=True)
