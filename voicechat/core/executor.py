"""
Command executor: applies navigation, reply and send commands to the
chat store and reports a CommandResult.
"""

import logging
from dataclasses import dataclass

from . import config
from .chat_store import ChatStore
from .errors import ExecutionFailure
from .models import (
    Command,
    CommandResult,
    CommandType,
    NavigationParams,
    ReplyParams,
    SendParams,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingReply:
    """Reply context left by a reply command, consumed by the next send."""

    contact: str
    message_id: str | None
    message_index: int | None


class CommandExecutor:
    """
    Executes commands against a ChatStore.

    Execution is synchronous and never raises for bad input: missing
    parameters and missing targets come back as ``success=False``.
    Control commands belong to the controller and are rejected here.
    """

    def __init__(self, store: ChatStore):
        self.store = store
        self.pending_reply: PendingReply | None = None

    def execute(self, command: Command) -> CommandResult:
        """Execute one command and describe the outcome."""
        handlers = {
            CommandType.NAVIGATION: self._navigate,
            CommandType.REPLY: self._reply,
            CommandType.SEND: self._send,
        }
        handler = handlers.get(command.type)
        try:
            if handler is None:
                raise ExecutionFailure(
                    f"{command.type.value} command {command.action!r} "
                    "is not handled by the executor"
                )
            result = handler(command)
        except ExecutionFailure as e:
            logger.warning("Command %s/%s failed: %s", command.type.value, command.action, e)
            return CommandResult(success=False, message=str(e))

        logger.info("Executed %s/%s: %s", command.type.value, command.action, result.message)
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _navigate(self, command: Command) -> CommandResult:
        params: NavigationParams = command.params
        if command.action == "back":
            self.store.set_active_chat(None)
            self.pending_reply = None
            return CommandResult(success=True, message="Navigated back")

        if command.action == "openChat":
            if not params.contact:
                raise ExecutionFailure("No contact specified")
            chat = self.store.set_active_chat(params.contact)
            self.pending_reply = None
            return CommandResult(
                success=True,
                message=f"Opened chat with {chat.contact.display_name}",
                data={"contact": params.contact},
            )

        raise ExecutionFailure(f"Unknown navigation action {command.action!r}")

    def _reply(self, command: Command) -> CommandResult:
        params: ReplyParams = command.params
        if not params.contact:
            raise ExecutionFailure("No contact specified for reply")

        chat = self.store.set_active_chat(params.contact)
        target = None
        if command.action in ("replyToLast", "replyToSpecific"):
            index = params.message_index or 1
            target = self.store.find_message_by_ordinal_from_end(
                params.contact, index, exclude_self=True
            )
        elif command.action != "replyToContact":
            raise ExecutionFailure(f"Unknown reply action {command.action!r}")

        if target is not None:
            self.store.mark_read(params.contact, target.id)

        self.pending_reply = PendingReply(
            contact=chat.key,
            message_id=target.id if target else None,
            message_index=params.message_index,
        )

        name = chat.contact.display_name
        if target is not None:
            message = f'Ready to reply to "{target.content}" from {name}. Please speak your reply.'
        elif params.message_index is not None:
            message = f"No message {params.message_index} from {name}. Please speak your reply."
        else:
            message = f"Ready to reply to {name}. Please speak your reply."

        return CommandResult(
            success=True,
            message=message,
            data={
                "contact": params.contact,
                "message_index": params.message_index,
                "message_id": target.id if target else None,
                "awaiting_reply": True,
            },
        )

    def _send(self, command: Command) -> CommandResult:
        params: SendParams = command.params
        if not params.message:
            raise ExecutionFailure("No message content specified")

        if params.contact:
            chat = self.store.set_active_chat(params.contact)
        else:
            chat = self.store.get_active_chat()
            if chat is None:
                raise ExecutionFailure("No active chat to send message to")

        reply_to = None
        if self.pending_reply is not None and self.pending_reply.contact == chat.key:
            reply_to = self.pending_reply.message_id
        self.pending_reply = None

        sent = self.store.append_message(
            chat.key, config.SELF_SENDER, params.message, reply_to=reply_to
        )
        return CommandResult(
            success=True,
            message=f'Message sent to {chat.contact.display_name}: "{params.message}"',
            data={
                "contact": chat.key,
                "message": params.message,
                "message_id": sent.id,
                "reply_to": reply_to,
            },
        )
