"""
Intent parser: maps a final transcript to a typed Command.

Parsing is deterministic pattern matching over an ordered rule table.
Groups are tried navigation -> reply -> send -> control, rules within a
group in declaration order, and the first match wins.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from .models import (
    Command,
    CommandParams,
    CommandType,
    ControlParams,
    NavigationParams,
    ReplyParams,
    SendParams,
)

logger = logging.getLogger(__name__)

ORDINALS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "last": 1,
    "latest": 1,
}


def ordinal_to_index(word: str) -> int:
    """Map an ordinal word to a 1-based index from the end; unknown words give 1."""
    return ORDINALS.get(word.lower(), 1)


@dataclass(frozen=True)
class Rule:
    """One entry of the rule table."""

    pattern: re.Pattern
    extract: Callable[[re.Match], CommandParams]
    type: CommandType
    action: str


def _rule(
    pattern: str,
    extract: Callable[[re.Match], CommandParams],
    type_: CommandType,
    action: str,
) -> Rule:
    return Rule(re.compile(pattern, re.IGNORECASE), extract, type_, action)


def _contact(match: re.Match, group: int = 1) -> str:
    return match.group(group).lower()


# Extractors. Free text keeps its original case, contact names are lowered.


def _no_navigation_params(match: re.Match) -> NavigationParams:
    return NavigationParams()


def _navigation_contact(match: re.Match) -> NavigationParams:
    return NavigationParams(contact=_contact(match))


def _reply_latest(match: re.Match) -> ReplyParams:
    return ReplyParams(contact=_contact(match), message_index=1)


def _reply_ordinal(match: re.Match) -> ReplyParams:
    return ReplyParams(
        contact=_contact(match, 2), message_index=ordinal_to_index(match.group(1))
    )


def _reply_contact(match: re.Match) -> ReplyParams:
    return ReplyParams(contact=_contact(match))


def _send_to_active(match: re.Match) -> SendParams:
    return SendParams(message=match.group(1))


def _send_text_to_contact(match: re.Match) -> SendParams:
    return SendParams(message=match.group(1), contact=_contact(match, 2))


def _tell_contact_text(match: re.Match) -> SendParams:
    return SendParams(message=match.group(2), contact=_contact(match, 1))


def _no_control_params(match: re.Match) -> ControlParams:
    return ControlParams()


NAV = CommandType.NAVIGATION
REPLY = CommandType.REPLY
SEND = CommandType.SEND
CONTROL = CommandType.CONTROL

RULES: tuple[Rule, ...] = (
    # navigation
    _rule(r"go back", _no_navigation_params, NAV, "back"),
    _rule(r"go to (\w+)'?s? chat", _navigation_contact, NAV, "openChat"),
    _rule(r"open (\w+)'?s? chat", _navigation_contact, NAV, "openChat"),
    _rule(r"switch to (\w+)", _navigation_contact, NAV, "openChat"),
    # reply
    _rule(
        r"reply to (?:the )?(?:last|latest) message from (\w+)",
        _reply_latest,
        REPLY,
        "replyToLast",
    ),
    _rule(
        r"reply to (?:the )?(\w+) (?:last )?message from (\w+)",
        _reply_ordinal,
        REPLY,
        "replyToSpecific",
    ),
    _rule(r"reply to (\w+)", _reply_contact, REPLY, "replyToContact"),
    # send
    _rule(r"send message (.+)", _send_to_active, SEND, "sendMessage"),
    _rule(r"send (.+) to (\w+)", _send_text_to_contact, SEND, "sendToContact"),
    _rule(r"tell (\w+) (.+)", _tell_contact_text, SEND, "sendToContact"),
    # control
    _rule(r"\bhide overlay\b", _no_control_params, CONTROL, "hideOverlay"),
    _rule(r"\bshow overlay\b", _no_control_params, CONTROL, "showOverlay"),
    _rule(r"\bminimize\b", _no_control_params, CONTROL, "minimize"),
    _rule(r"\bclose\b", _no_control_params, CONTROL, "close"),
)


class IntentParser:
    """
    Stateless parser over an ordered rule table.

    The table can be swapped for testing; it must already be in priority
    order.
    """

    def __init__(self, rules: tuple[Rule, ...] = RULES):
        self.rules = rules

    def parse(self, transcript: str) -> Command | None:
        """
        Parse a transcript into a command.

        Args:
            transcript: Final recognizer text

        Returns:
            The first matching command, or None if no rule matches
        """
        text = transcript.strip()
        if not text:
            return None

        for rule in self.rules:
            match = rule.pattern.search(text)
            if match:
                command = Command(
                    type=rule.type,
                    action=rule.action,
                    params=rule.extract(match),
                    original_text=text,
                )
                logger.debug("Parsed %r as %s/%s", text, rule.type.value, rule.action)
                return command

        logger.debug("No rule matched %r", text)
        return None


_default_parser = IntentParser()


def parse(transcript: str) -> Command | None:
    """Parse with the default rule table."""
    return _default_parser.parse(transcript)
