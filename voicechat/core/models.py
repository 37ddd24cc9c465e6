"""
Data model: contacts, messages, chats, transcripts and typed commands.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from . import config


def contact_key(name: str) -> str:
    """Case-insensitive lookup key for a contact name."""
    return name.strip().lower()


@dataclass(frozen=True)
class Contact:
    """A chat participant, keyed case-insensitively by name."""

    display_name: str

    @property
    def key(self) -> str:
        return contact_key(self.display_name)


@dataclass
class Message:
    """A chat message. Only ``read`` changes after creation."""

    id: str
    sender: str
    content: str
    timestamp: float
    read: bool = False
    reply_to: str | None = None

    @property
    def from_self(self) -> bool:
        return self.sender == config.SELF_SENDER


@dataclass
class Chat:
    """One chat per contact; ``messages`` is in chronological order."""

    contact: Contact
    messages: list[Message] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.contact.key

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    @property
    def unread_count(self) -> int:
        return sum(1 for m in self.messages if not m.read and not m.from_self)


@dataclass(frozen=True)
class Transcript:
    """A recognizer hypothesis, partial or final."""

    text: str
    confidence: float
    is_final: bool


class CommandType(str, Enum):
    NAVIGATION = "navigation"
    REPLY = "reply"
    SEND = "send"
    CONTROL = "control"


@dataclass(frozen=True)
class NavigationParams:
    contact: str | None = None


@dataclass(frozen=True)
class ReplyParams:
    contact: str | None = None
    message_index: int | None = None


@dataclass(frozen=True)
class SendParams:
    message: str | None = None
    contact: str | None = None


@dataclass(frozen=True)
class ControlParams:
    pass


CommandParams = Union[NavigationParams, ReplyParams, SendParams, ControlParams]


@dataclass(frozen=True)
class Command:
    """A parsed voice command with a payload typed by command kind."""

    type: CommandType
    action: str
    params: CommandParams
    original_text: str = ""

    @property
    def parameters(self) -> dict[str, Any]:
        """Flat mapping view of the payload, omitting absent values."""
        values = {
            name: value
            for name, value in vars(self.params).items()
            if value is not None
        }
        values["original_text"] = self.original_text
        return values


@dataclass(frozen=True)
class CommandResult:
    """Outcome of executing a command, forwarded to the UI."""

    success: bool
    message: str
    data: dict[str, Any] | None = None
