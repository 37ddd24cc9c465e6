"""
In-memory chat state: contacts, per-contact message lists and the active
chat cursor.

Every public method is one indivisible step under the store lock, so a
reader never sees a chat that is half created or a message that is half
appended.
"""

import logging
import threading
import time
from typing import Any, Callable, Iterable, Mapping, Union
from uuid import uuid4

from . import config
from .models import Chat, Contact, Message, contact_key

logger = logging.getLogger(__name__)

SeedMessage = Union[tuple[str, str], Mapping[str, Any]]

DEMO_SEED: dict[str, list[SeedMessage]] = {
    "Sam": [
        ("Sam", "Hey, are you free tonight?"),
        ("Sam", "We could grab dinner somewhere"),
    ],
    "John": [
        ("John", "The meeting is at 3 PM"),
    ],
}


class ChatStore:
    """
    Owns the contact -> Chat mapping and the active chat cursor.

    The active chat, if set, always names an existing chat and message
    ids are unique across the whole store.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._chats: dict[str, Chat] = {}
        self._active_key: str | None = None
        self._last_ts = float("-inf")
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Chats and the active cursor
    # ------------------------------------------------------------------
    def ensure_chat(self, contact: str) -> Chat:
        """Return the chat for ``contact``, creating an empty one if unknown."""
        key = contact_key(contact)
        with self._lock:
            chat = self._chats.get(key)
            if chat is None:
                chat = Chat(contact=Contact(display_name=contact.strip()))
                self._chats[key] = chat
                logger.debug("Created chat for %r", chat.contact.display_name)
            return chat

    def get_chat(self, contact: str) -> Chat | None:
        with self._lock:
            return self._chats.get(contact_key(contact))

    def set_active_chat(self, contact: str | None) -> Chat | None:
        """Move the cursor; None clears it. Unknown contacts get a chat."""
        with self._lock:
            if contact is None:
                self._active_key = None
                return None
            chat = self.ensure_chat(contact)
            self._active_key = chat.key
            return chat

    def get_active_chat(self) -> Chat | None:
        with self._lock:
            if self._active_key is None:
                return None
            return self._chats[self._active_key]

    def chats(self) -> list[Chat]:
        """All chats in creation order."""
        with self._lock:
            return list(self._chats.values())

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    def append_message(
        self,
        contact: str,
        sender: str,
        content: str,
        reply_to: str | None = None,
    ) -> Message:
        """Append a message to ``contact``'s chat and return it."""
        with self._lock:
            chat = self.ensure_chat(contact)
            message = Message(
                id=uuid4().hex,
                sender=sender,
                content=content,
                timestamp=self._next_timestamp(),
                read=sender == config.SELF_SENDER,
                reply_to=reply_to,
            )
            chat.messages.append(message)
            return message

    def find_message_by_ordinal_from_end(
        self, contact: str, n: int, exclude_self: bool = True
    ) -> Message | None:
        """
        Return the n-th most recent message in a chat.

        Args:
            contact: Contact name
            n: 1 for the most recent message, 2 for the one before, ...
            exclude_self: Skip messages sent by the user

        Returns:
            The message, or None if the chat is unknown or n is out of range
        """
        if n < 1:
            return None
        with self._lock:
            chat = self._chats.get(contact_key(contact))
            if chat is None:
                return None
            candidates = [
                m for m in chat.messages if not (exclude_self and m.from_self)
            ]
            if n > len(candidates):
                return None
            return candidates[-n]

    def mark_read(self, contact: str, message_id: str) -> None:
        """Mark one message read; unknown chats or ids are ignored."""
        with self._lock:
            chat = self._chats.get(contact_key(contact))
            if chat is None:
                return
            for message in chat.messages:
                if message.id == message_id:
                    message.read = True
                    return

    def unread_messages(self) -> list[Message]:
        """Unread messages from other people, across all chats."""
        with self._lock:
            return [
                m
                for chat in self._chats.values()
                for m in chat.messages
                if not m.read and not m.from_self
            ]

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------
    def seed(self, data: Mapping[str, Iterable[SeedMessage]]) -> None:
        """
        Pre-populate chats.

        Args:
            data: Contact name -> ordered messages. Each message is a
                ``(sender, content)`` pair or a mapping with ``sender``,
                ``content`` and optional ``read`` keys.
        """
        with self._lock:
            for name, messages in data.items():
                self.ensure_chat(name)
                for entry in messages:
                    if isinstance(entry, Mapping):
                        sender = entry["sender"]
                        content = entry["content"]
                        read = entry.get("read")
                    else:
                        sender, content = entry
                        read = None
                    message = self.append_message(name, sender, content)
                    if read is not None:
                        message.read = bool(read) or message.from_self

    def _next_timestamp(self) -> float:
        # Never go backwards, even with a coarse or adjusted clock.
        ts = max(self._clock(), self._last_ts)
        self._last_ts = ts
        return ts
