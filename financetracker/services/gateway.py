"""
API Gateway Client

DESIGN DECISION: Every backend call goes through ApiGateway.call().
This gives one place that:
1. Attaches the bearer token of the current session
2. Turns HTTP 401 into a logout plus a single "session expired" notice
3. Turns transport and parse failures into ConnectionFailureError
4. Logs every failure with the endpoint it came from

The gateway NEVER retries. Each call is fire-once; retrying is a fresh
user action.

Concurrency model: the client runs on one asyncio event loop. The blocking
HTTP request runs in a worker thread (asyncio.to_thread) so the loop is
never blocked, but reading the session, clearing it and emitting notices
all happen on the loop, between awaits, so they cannot interleave.
"""

import asyncio
from typing import Any, Optional

import requests

from financetracker.config import ApiSettings, get_settings
from financetracker.models.results import (
    AuthExpired,
    BackendResult,
    TransportError,
    classify,
)
from financetracker.notices import Notifier, get_logger
from financetracker.session.store import SessionStore


class Endpoints:
    """Backend endpoint paths, relative to base_url + api_prefix."""
    REGISTER = "/auth/register"
    LOGIN = "/auth/login"
    MESSAGE = "/api/message"
    OCR = "/api/ocr"
    ACCOUNTS = "/api/accounts"
    TRANSACTIONS = "/api/transactions"
    SUMMARY = "/api/summary"
    SUBSCRIPTION = "/api/subscription"
    EDIT_TRANSACTION = "/api/edit-transaction"


class GatewayError(Exception):
    """Base exception for failed backend calls."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(message)


class UnauthorizedError(GatewayError):
    """
    The backend answered 401.

    By the time this is raised the session is already cleared. Callers must
    not render anything from the response. The one exception is a call made
    without a token, where backend_error carries the body's error text.
    """

    def __init__(self, endpoint: str, backend_error: Optional[str] = None):
        self.backend_error = backend_error
        super().__init__(endpoint, "Unauthorized")


class ConnectionFailureError(GatewayError):
    """Network unreachable, timed out, or the response was not a JSON object."""
    pass


class ApiGateway:
    """
    Single chokepoint for backend HTTP calls.

    The notice and logout side effects of a failing call happen exactly
    once for that call. For 401s they happen once per session: when several
    in-flight calls carrying the same token all come back 401, only the
    first one logs out and shows the expiry notice.
    """

    def __init__(
        self,
        session_store: SessionStore,
        notifier: Notifier,
        settings: Optional[ApiSettings] = None,
        http: Optional[requests.Session] = None,
    ):
        self._session = session_store
        self._notifier = notifier
        self._settings = settings or get_settings().api
        self._http = http or requests.Session()
        self._logger = get_logger("financetracker.gateway")

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Issue one backend request and return the decoded JSON object.

        Args:
            endpoint: Path from Endpoints
            method: HTTP method
            body: JSON body for POST requests
            params: Query-string parameters

        Returns:
            The decoded response body. A well-formed {success: false}
            body is returned, not raised.

        Raises:
            UnauthorizedError: HTTP 401 (session already cleared)
            ConnectionFailureError: Transport failure or malformed body
        """
        # Token and generation are captured before suspending
        generation = self._session.generation
        headers = self._build_headers()
        url = self._settings.url_for(endpoint)

        try:
            response = await asyncio.to_thread(
                self._http.request,
                method,
                url,
                headers=headers,
                json=body,
                params=params,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise self._connection_failure(endpoint, str(e)) from e

        if response.status_code == 401:
            if "Authorization" in headers:
                self._handle_unauthorized(endpoint, generation)
                raise UnauthorizedError(endpoint)
            # Anonymous calls (login, register) have no session to expire
            raise UnauthorizedError(endpoint, self._error_from(response))

        try:
            payload = response.json()
        except ValueError as e:
            raise self._connection_failure(
                endpoint, f"Invalid JSON (HTTP {response.status_code}): {e}"
            ) from e

        if not isinstance(payload, dict):
            raise self._connection_failure(
                endpoint, f"Expected a JSON object, got {type(payload).__name__}"
            )

        return payload

    async def fetch(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> BackendResult:
        """
        Like call(), but classify every outcome into a result variant.

        Side effects (logout, notices) are the same as call().
        """
        try:
            payload = await self.call(endpoint, method=method, body=body, params=params)
        except UnauthorizedError as e:
            return AuthExpired(message=e.backend_error)
        except ConnectionFailureError as e:
            return TransportError(detail=str(e))
        return classify(payload)

    def _handle_unauthorized(self, endpoint: str, generation: int) -> None:
        if generation != self._session.generation or not self._session.is_authenticated():
            # Another call already ended this session
            self._logger.info("unauthorized_after_logout", endpoint=endpoint)
            return

        self._logger.warning("session_expired", endpoint=endpoint)
        self._session.clear()
        self._notifier.session_expired(endpoint)

    @staticmethod
    def _error_from(response) -> Optional[str]:
        try:
            payload = response.json()
        except ValueError:
            return None
        if isinstance(payload, dict):
            return payload.get("error") or None
        return None

    def _connection_failure(self, endpoint: str, error: str) -> ConnectionFailureError:
        self._logger.error("api_connection_error", endpoint=endpoint, error=error)
        self._notifier.connection_error(endpoint, error)
        return ConnectionFailureError(endpoint, error)
