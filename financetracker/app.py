"""
Application Wiring for FinanceTracker

This module builds every component once and exposes each UI action as a
named command with a typed payload.

DESIGN DECISION: Rendering surfaces never call controllers ad hoc. They
dispatch commands ("send_message", "delete_transaction", ...) through the
CommandDispatcher. This keeps:
- Every user action listed in one place
- Payloads validated before any state changes
- The core independent of Streamlit (or any other surface)
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict

from financetracker.config import Settings, get_settings
from financetracker.controllers import (
    AccountsView,
    ChatController,
    DashboardAggregator,
    PageDirection,
    TransactionBrowser,
    View,
    ViewRouter,
)
from financetracker.controllers.transactions import ConfirmPrompt
from financetracker.notices import Notifier, get_logger
from financetracker.services.checkout import BillingInterval, CheckoutService
from financetracker.services.gateway import ApiGateway
from financetracker.services.storage import (
    FileSessionStorage,
    SessionStorageInterface,
)
from financetracker.session.auth import AuthOutcome, AuthService
from financetracker.session.store import SessionStore


# =============================================================================
# COMMAND PAYLOADS
# =============================================================================

class NoPayload(BaseModel):
    pass


class LoginCommand(BaseModel):
    email: str
    password: str


class RegisterCommand(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str = ""


class SwitchViewCommand(BaseModel):
    view: View


class SendMessageCommand(BaseModel):
    text: Optional[str] = None


class AttachImageCommand(BaseModel):
    data_uri: str


class LoadTransactionsCommand(BaseModel):
    direction: Optional[PageDirection] = None


class DeleteTransactionCommand(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    transaction_id: str


class SubscribeCommand(BaseModel):
    interval: BillingInterval = BillingInterval.MONTHLY


# =============================================================================
# DISPATCHER
# =============================================================================

Handler = Callable[[Any], Union[Any, Awaitable[Any]]]


class UnknownCommandError(KeyError):
    """No handler is registered under that command name."""
    pass


class CommandDispatcher:
    """Registry of named UI actions."""

    def __init__(self):
        self._handlers: dict[str, tuple[type[BaseModel], Handler]] = {}
        self._logger = get_logger("financetracker.commands")

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    def register(self, name: str, payload_type: type[BaseModel], handler: Handler) -> None:
        self._handlers[name] = (payload_type, handler)

    async def dispatch(self, name: str, payload: Union[BaseModel, dict, None] = None) -> Any:
        """
        Validate payload against the command's type and run its handler.

        Raises:
            UnknownCommandError: If name is not registered
            ValidationError: If payload does not fit the command
        """
        try:
            payload_type, handler = self._handlers[name]
        except KeyError:
            raise UnknownCommandError(name) from None

        if isinstance(payload, payload_type):
            command = payload
        elif isinstance(payload, BaseModel):
            command = payload_type.model_validate(payload.model_dump())
        else:
            command = payload_type.model_validate(payload or {})

        self._logger.debug("command_dispatched", command=name)
        result = handler(command)
        if inspect.isawaitable(result):
            result = await result
        return result


# =============================================================================
# APPLICATION
# =============================================================================

class TrackerApp:
    """
    All client components, wired together.

    Construct with create_app(). Components are public attributes so a
    rendering surface can read their state directly.
    """

    def __init__(
        self,
        session_store: SessionStore,
        notifier: Notifier,
        gateway: ApiGateway,
        confirm: ConfirmPrompt,
        settings: Settings,
        checkout: Optional[CheckoutService] = None,
    ):
        self.session = session_store
        self.notifier = notifier
        self.gateway = gateway
        self.auth = AuthService(session_store, gateway, notifier)
        self.dashboard = DashboardAggregator(gateway, settings.app)
        self.transactions = TransactionBrowser(
            gateway, notifier, self.dashboard, confirm, settings.app
        )
        self.accounts = AccountsView(gateway)
        self.chat = ChatController(gateway, self.dashboard)
        self.router = ViewRouter(
            session_store, self.dashboard, self.transactions, self.accounts
        )
        self.checkout = checkout or CheckoutService(settings.paypal)
        self.commands = CommandDispatcher()
        self._logger = get_logger("financetracker.app")

        self._register_commands()

    def _register_commands(self) -> None:
        register = self.commands.register
        register("login", LoginCommand, self._login)
        register("register", RegisterCommand, self._register)
        register("logout", NoPayload, lambda _: self.auth.logout())
        register("switch_view", SwitchViewCommand, lambda c: self.router.switch_view(c.view))
        register("send_message", SendMessageCommand, lambda c: self.chat.send(c.text))
        register("attach_image", AttachImageCommand, lambda c: self.chat.attach_image(c.data_uri))
        register("remove_image", NoPayload, lambda _: self.chat.remove_image())
        register(
            "load_transactions",
            LoadTransactionsCommand,
            lambda c: self.transactions.load(c.direction),
        )
        register(
            "delete_transaction",
            DeleteTransactionCommand,
            lambda c: self.transactions.delete_transaction(c.transaction_id),
        )
        register("subscribe", SubscribeCommand, lambda c: self.subscribe_pro(c.interval))

    async def start(self) -> None:
        """Enter the app if a persisted session was restored."""
        if self.session.is_authenticated():
            await self.router.show_app()

    async def _login(self, command: LoginCommand) -> AuthOutcome:
        outcome = await self.auth.login(command.email, command.password)
        if outcome.success:
            await self.router.show_app()
        return outcome

    async def _register(self, command: RegisterCommand) -> AuthOutcome:
        outcome = await self.auth.register(
            command.email,
            command.password,
            command.first_name,
            command.last_name,
        )
        if outcome.success:
            await self.router.show_app()
        return outcome

    def subscribe_pro(self, interval: BillingInterval) -> str:
        """
        Build the PayPal checkout URL for the current user.

        Opening the URL is left to the surface; this is a terminal hand-off.
        """
        user = self.session.user
        url = self.checkout.subscription_url(interval, user.id if user else None)
        plan_id = self.checkout.plan_id_for(interval)
        self.notifier.checkout_redirect(plan_id, url)
        self._logger.info(
            "checkout_url_built",
            plan_id=plan_id,
            user_id=user.id if user else None,
            url=url,
        )
        return url

    async def wait_background(self) -> None:
        await self.chat.wait_background()


def _decline(_: str) -> bool:
    return False


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[SessionStorageInterface] = None,
    http: Optional[requests.Session] = None,
    confirm: Optional[ConfirmPrompt] = None,
    notifier: Optional[Notifier] = None,
) -> TrackerApp:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        storage: Durable session storage (defaults to a file under
                 AppSettings.storage_dir)
        http: requests.Session-compatible transport
        confirm: Confirmation prompt for destructive actions. Without one,
                 destructive actions are declined.
        notifier: Notice sink (defaults to a fresh Notifier)

    Returns:
        The wired TrackerApp, with any persisted session restored
    """
    settings = settings or get_settings()
    storage = storage or FileSessionStorage(settings.app.storage_dir)
    notifier = notifier or Notifier()

    session_store = SessionStore.restore(storage)
    gateway = ApiGateway(session_store, notifier, settings.api, http=http)

    return TrackerApp(
        session_store=session_store,
        notifier=notifier,
        gateway=gateway,
        confirm=confirm or _decline,
        settings=settings,
    )
