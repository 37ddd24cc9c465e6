"""
Inbound events delivered to the voice controller.

Leaf adapters translate recognizer and microphone callbacks into these
and push them through an ``emit`` sink. The controller processes them in
arrival order on a single consumer.
"""

from dataclasses import dataclass
from typing import Callable, Union

from .models import Transcript


@dataclass(frozen=True)
class RecognitionStarted:
    pass


@dataclass(frozen=True)
class TranscriptReceived:
    transcript: Transcript


@dataclass(frozen=True)
class RecognitionFailed:
    code: str
    fatal: bool = True


@dataclass(frozen=True)
class RecognitionEnded:
    pass


@dataclass(frozen=True)
class LevelSampled:
    level: float  # 0..100


@dataclass(frozen=True)
class MicrophoneFailed:
    message: str


@dataclass(frozen=True)
class TextSubmitted:
    """Command text typed in the UI rather than spoken."""

    text: str


Event = Union[
    RecognitionStarted,
    TranscriptReceived,
    RecognitionFailed,
    RecognitionEnded,
    LevelSampled,
    MicrophoneFailed,
    TextSubmitted,
]

EventSink = Callable[[Event], None]
