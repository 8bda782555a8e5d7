"""
Chat Models

The chat transcript is append-only and lives only for the current run.
Messages are frozen once created. The typing indicator is its own entry
type so it can be removed without ever editing a real message.
"""

import base64
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sender(str, Enum):
    """Who a chat entry belongs to."""
    USER = "user"
    BOT = "bot"


class ChatMessage(BaseModel):
    """A rendered chat message."""
    model_config = ConfigDict(frozen=True)

    entry_id: UUID = Field(default_factory=uuid4)
    text: str
    sender: Sender

    @property
    def lines(self) -> list[str]:
        """Each line renders as its own paragraph."""
        return self.text.split("\n")


class TypingIndicator(BaseModel):
    """Transient placeholder shown while the backend is working."""
    model_config = ConfigDict(frozen=True)

    entry_id: UUID = Field(default_factory=uuid4)
    sender: Sender = Sender.BOT


class PendingImage(BaseModel):
    """A receipt image waiting to be sent, held as a data URI."""
    model_config = ConfigDict(frozen=True)

    data_uri: str

    @field_validator("data_uri")
    @classmethod
    def must_be_data_uri(cls, v: str) -> str:
        if not v.startswith("data:"):
            raise ValueError("Image must be a data URI")
        return v

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "PendingImage":
        encoded = base64.b64encode(raw).decode("ascii")
        return cls(data_uri=f"data:{mime_type};base64,{encoded}")

    @property
    def mime_type(self) -> str:
        return self.data_uri[len("data:"):].split(";", 1)[0]
