"""
Chat Controller

Orchestrates one send/receive cycle of the chat:

    Idle -> Sending -> (Success | Failure) -> Idle

Flow:
1. Validate: non-empty text or a pending image, otherwise do nothing
2. Optimistic render: the user's text appears before any network call
3. Typing indicator appended after the user's message
4. Image branch -> OCR endpoint, text branch -> message endpoint
5. Typing indicator removed, then the response-derived messages appended
6. Cleanup (always): indicator gone exactly once, send re-enabled, focus back

CRITICAL: Step 6 runs in a finally block. A connection failure, an expired
session or a bug in response handling must never leave the send control
disabled or the indicator on screen.
"""

import asyncio
from enum import Enum
from typing import Callable, Optional, Union

from pydantic import ValidationError

from financetracker.controllers.base import Controller
from financetracker.controllers.dashboard import TRANSACTION_LIST, DashboardAggregator
from financetracker.controllers.views import transaction_summary_line
from financetracker.models.chat import ChatMessage, PendingImage, Sender, TypingIndicator
from financetracker.models.results import (
    AuthExpired,
    Ok,
    QuotaExceeded,
    TransportError,
)
from financetracker.services.gateway import (
    ApiGateway,
    ConnectionFailureError,
    Endpoints,
    UnauthorizedError,
)


UPLOAD_NOTE = "📷 Uploading receipt for OCR..."
IMAGE_RECEIVED = "Image received."
GENERIC_FAILURE = "Something went wrong."
CONNECTION_FAILURE = "Sorry, I had trouble connecting. Please try again."
QUOTA_FALLBACK = "You have reached your plan limit."
UPGRADE_HINT = "Go to Plan tab to upgrade."

TranscriptEntry = Union[ChatMessage, TypingIndicator]
TranscriptListener = Callable[[str, TranscriptEntry], None]


class ChatState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class Transcript:
    """
    Append-only list of chat entries for the current run.

    Messages are only ever appended. Typing indicators are the only entries
    that can be removed, and removing one twice is a no-op.
    """

    def __init__(self):
        self._entries: list[TranscriptEntry] = []
        self._listeners: list[TranscriptListener] = []

    @property
    def entries(self) -> list[TranscriptEntry]:
        return list(self._entries)

    @property
    def messages(self) -> list[ChatMessage]:
        return [e for e in self._entries if isinstance(e, ChatMessage)]

    @property
    def is_typing(self) -> bool:
        return any(isinstance(e, TypingIndicator) for e in self._entries)

    def subscribe(self, listener: TranscriptListener) -> None:
        """listener("append" | "remove", entry) after each change."""
        self._listeners.append(listener)

    def add(self, text: str, sender: Sender) -> ChatMessage:
        message = ChatMessage(text=text, sender=sender)
        self._append(message)
        return message

    def show_typing(self) -> TypingIndicator:
        indicator = TypingIndicator()
        self._append(indicator)
        return indicator

    def remove_typing(self, indicator: TypingIndicator) -> bool:
        """Remove an indicator. Returns False if it was already gone."""
        for i, entry in enumerate(self._entries):
            if entry is indicator:
                del self._entries[i]
                self._emit("remove", indicator)
                return True
        return False

    def _append(self, entry: TranscriptEntry) -> None:
        self._entries.append(entry)
        self._emit("append", entry)

    def _emit(self, op: str, entry: TranscriptEntry) -> None:
        for listener in list(self._listeners):
            listener(op, entry)


class ChatController(Controller):
    """State and actions of the chat view."""

    name = "chat"

    def __init__(
        self,
        gateway: ApiGateway,
        dashboard: DashboardAggregator,
        transcript: Optional[Transcript] = None,
    ):
        super().__init__()
        self._gateway = gateway
        self._dashboard = dashboard
        self._background: set[asyncio.Task] = set()

        self.transcript = transcript or Transcript()
        self.state = ChatState.IDLE
        self.input_text = ""
        self.pending_image: Optional[PendingImage] = None
        self.send_enabled = True
        self.input_focused = True

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_input(self, text: str) -> None:
        self.input_text = text

    def attach_image(self, data_uri: str) -> PendingImage:
        """Attach a receipt image, replacing any image already pending."""
        self.pending_image = PendingImage(data_uri=data_uri)
        self._changed("image")
        return self.pending_image

    def attach_image_bytes(self, raw: bytes, mime_type: str) -> PendingImage:
        self.pending_image = PendingImage.from_bytes(raw, mime_type)
        self._changed("image")
        return self.pending_image

    def remove_image(self) -> None:
        self.pending_image = None
        self._changed("image")

    # ------------------------------------------------------------------
    # Send cycle
    # ------------------------------------------------------------------

    async def send(self, text: Optional[str] = None) -> bool:
        """
        Send the current input (or text) and any pending image.

        Returns:
            False if nothing was sent (empty input, or a send is already
            running), True once a full cycle has completed
        """
        if self.state == ChatState.SENDING:
            return False

        message = (self.input_text if text is None else text).strip()
        image = self.pending_image
        if not message and image is None:
            return False

        self.state = ChatState.SENDING
        if message:
            self.transcript.add(message, Sender.USER)
        self.input_text = ""
        self.send_enabled = False
        self.input_focused = False
        if image is not None:
            self.transcript.add(UPLOAD_NOTE, Sender.USER)
        typing = self.transcript.show_typing()
        self._changed("chat")

        try:
            if image is not None:
                await self._send_image(image, message, typing)
            else:
                await self._send_text(message, typing)
        finally:
            self.transcript.remove_typing(typing)
            if image is not None and self.pending_image is image:
                self.pending_image = None
            self.send_enabled = True
            self.input_focused = True
            self.state = ChatState.IDLE
            self._changed("chat")

        return True

    async def _send_image(
        self,
        image: PendingImage,
        caption: str,
        typing: TypingIndicator,
    ) -> None:
        try:
            payload = await self._gateway.call(
                Endpoints.OCR,
                method="POST",
                body={"image": image.data_uri, "message": caption},
            )
        except UnauthorizedError:
            self.transcript.remove_typing(typing)
            return
        except ConnectionFailureError:
            self.transcript.remove_typing(typing)
            self.transcript.add(CONNECTION_FAILURE, Sender.BOT)
            return

        self.transcript.remove_typing(typing)
        if payload.get("upgrade_required"):
            self.transcript.add(self._upgrade_prompt(payload.get("error")), Sender.BOT)
            return
        reply = (
            payload.get("message")
            or payload.get("note")
            or payload.get("error")
            or IMAGE_RECEIVED
        )
        self.transcript.add(reply, Sender.BOT)

    async def _send_text(self, message: str, typing: TypingIndicator) -> None:
        result = await self._gateway.fetch(
            Endpoints.MESSAGE,
            method="POST",
            body={"message": message},
        )
        self.transcript.remove_typing(typing)

        if isinstance(result, AuthExpired):
            return
        if isinstance(result, TransportError):
            self.transcript.add(CONNECTION_FAILURE, Sender.BOT)
            return
        if isinstance(result, QuotaExceeded):
            self.transcript.add(self._upgrade_prompt(result.message), Sender.BOT)
            return
        if not isinstance(result, Ok):
            reply = result.message or result.payload.get("message") or GENERIC_FAILURE
            self.transcript.add(reply, Sender.BOT)
            return

        reply = result.get("message")
        if reply:
            self.transcript.add(reply, Sender.BOT)

        self._add_transaction_details(result.get("transactions"))

        data = result.get("data")
        if isinstance(data, dict) and data.get("total_income") is not None:
            self._spawn_dashboard_refresh()

    def _add_transaction_details(self, raw_transactions) -> None:
        if not raw_transactions:
            return
        try:
            transactions = TRANSACTION_LIST.validate_python(raw_transactions)
        except ValidationError as e:
            self._logger.error("logged_transactions_invalid", error=str(e))
            return
        lines = [transaction_summary_line(tx) for tx in transactions]
        self.transcript.add("\n".join(lines), Sender.BOT)

    @staticmethod
    def _upgrade_prompt(error: Optional[str]) -> str:
        return f"⭐ {error or QUOTA_FALLBACK}\n\n{UPGRADE_HINT}"

    # ------------------------------------------------------------------
    # Background dashboard refresh
    # ------------------------------------------------------------------

    def _spawn_dashboard_refresh(self) -> None:
        """
        Refresh the dashboard without waiting for it.

        The send cycle returns to Idle whether or not the refresh has
        finished, and a failing refresh is only logged.
        """
        task = asyncio.create_task(self._dashboard.load_dashboard())
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._logger.error(
                "background_refresh_failed",
                error=str(error),
                error_type=type(error).__name__,
            )

    @property
    def background_tasks(self) -> int:
        return len(self._background)

    async def wait_background(self) -> None:
        """
        Wait for outstanding background refreshes.

        For surfaces that close their event loop after every interaction.
        """
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
