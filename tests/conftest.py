"""
Shared fixtures for FinanceTracker tests

No real network: the API gateway is given FakeHttp, a stand-in for
requests.Session that routes (method, path) pairs to canned responses or to
FakeFinanceBackend, a small in-memory backend with real state.
"""

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Optional

import pytest
import requests

from financetracker.app import create_app
from financetracker.config import ApiSettings, AppSettings, PayPalSettings
from financetracker.notices import Notifier
from financetracker.services.gateway import ApiGateway
from financetracker.services.storage import TOKEN_KEY, USER_KEY, InMemorySessionStorage
from financetracker.session.store import SessionStore


BASE_URL = "http://backend.test/webhook"
PREFIX = "/finance"
TOKEN = "tok-123"
USER = {"id": "u-1", "first_name": "Ava", "last_name": "Brown", "email": "ava@example.com"}


@dataclass
class Call:
    method: str
    path: str
    headers: dict
    json: Optional[dict]
    params: Optional[dict]


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, invalid_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeHttp:
    """
    requests.Session stand-in.

    A route value can be a dict (200 JSON), a FakeResponse, an exception
    instance (raised) or a callable taking the Call and returning any of
    those.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[Call] = []
        self._lock = threading.Lock()

    def route(self, method: str, path: str, response: Any) -> None:
        self.routes[(method, path)] = response

    def calls_to(self, path: str) -> list[Call]:
        return [c for c in self.calls if c.path == path]

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        prefix = BASE_URL + PREFIX
        assert url.startswith(prefix), url
        call = Call(method, url[len(prefix):], dict(headers or {}), json, params)
        with self._lock:
            self.calls.append(call)

        response = self.routes.get((method, call.path))
        if response is None:
            return FakeResponse(404, {"success": False, "error": "No route"})
        if callable(response):
            response = response(call)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, FakeResponse):
            return response
        return FakeResponse(200, response)


@dataclass
class FakeFinanceBackend:
    """Tiny stateful backend: transactions, accounts, subscription."""

    transactions: list[dict] = field(default_factory=list)
    accounts: list[dict] = field(default_factory=list)
    subscription: dict = field(default_factory=lambda: {
        "plan_name": "free", "status": "active", "tx_count": 0, "ocr_count": 0,
    })

    def install(self, http: FakeHttp) -> None:
        http.route("GET", "/api/transactions", self._list_transactions)
        http.route("GET", "/api/summary", self._summary)
        http.route("GET", "/api/accounts", lambda call: {"success": True, "accounts": self.accounts})
        http.route("GET", "/api/subscription", lambda call: {
            "success": True, "subscription": self.subscription,
        })
        http.route("POST", "/api/edit-transaction", self._edit)

    def _list_transactions(self, call: Call) -> dict:
        limit = int(call.params["limit"])
        offset = int(call.params["offset"])
        newest_first = list(reversed(self.transactions))
        return {"success": True, "transactions": newest_first[offset:offset + limit]}

    def _summary(self, call: Call) -> dict:
        income = sum(Decimal(str(t["amount"])) for t in self.transactions if t["direction"] == "inflow")
        expense = sum(Decimal(str(t["amount"])) for t in self.transactions if t["direction"] == "outflow")
        return {
            "success": True,
            "summary": {
                "total_income": str(income),
                "total_expense": str(expense),
                "tx_count": len(self.transactions),
            },
        }

    def _edit(self, call: Call) -> dict:
        tx_id = call.json["transaction_id"]
        before = len(self.transactions)
        self.transactions = [t for t in self.transactions if t["id"] != tx_id]
        if len(self.transactions) == before:
            return {"success": False, "error": "Transaction not found"}
        return {"success": True}


def make_transactions(count: int, start: int = 1) -> list[dict]:
    return [
        {
            "id": f"t-{i}",
            "item": f"item {i}",
            "amount": 100 * i,
            "direction": "outflow",
            "category": "food",
            "payment_method": "cash",
            "created_at": "2025-01-05T10:00:00Z",
        }
        for i in range(start, start + count)
    ]


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def settings(tmp_path: Path) -> SimpleNamespace:
    return SimpleNamespace(
        api=ApiSettings(base_url=BASE_URL, api_prefix=PREFIX, timeout_seconds=5),
        app=AppSettings(storage_dir=tmp_path, transactions_page_size=3, dashboard_recent_limit=5),
        paypal=PayPalSettings(monthly_plan_id="P-MONTH", yearly_plan_id="P-YEAR"),
    )


@pytest.fixture
def storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def logged_in_storage() -> InMemorySessionStorage:
    return InMemorySessionStorage({TOKEN_KEY: TOKEN, USER_KEY: USER})


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def session_store(logged_in_storage) -> SessionStore:
    return SessionStore.restore(logged_in_storage)


@pytest.fixture
def gateway(session_store, notifier, settings, http) -> ApiGateway:
    return ApiGateway(session_store, notifier, settings.api, http=http)


@pytest.fixture
def backend(http) -> FakeFinanceBackend:
    fake = FakeFinanceBackend()
    fake.install(http)
    return fake


@pytest.fixture
def confirm_answers() -> list[bool]:
    """Answers the confirm prompt gives, in order. Empty means yes."""
    return []


@pytest.fixture
def make_app(settings, http, notifier, confirm_answers) -> Callable:
    def _make(storage=None, logged_in: bool = True):
        if storage is None:
            storage = InMemorySessionStorage(
                {TOKEN_KEY: TOKEN, USER_KEY: USER} if logged_in else {}
            )

        def confirm(_: str) -> bool:
            return confirm_answers.pop(0) if confirm_answers else True

        return create_app(
            settings=settings,
            storage=storage,
            http=http,
            confirm=confirm,
            notifier=notifier,
        )
    return _make


@pytest.fixture
def connection_refused() -> requests.ConnectionError:
    return requests.ConnectionError("Connection refused")
