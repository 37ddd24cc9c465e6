"""
Capability contracts between the pipeline and the outside world.

``interfaces/`` implements these; ``app/`` consumes them.
"""

from dataclasses import dataclass
from typing import Callable, Protocol


class AudioCallback(Protocol):
    """Protocol for audio chunk callbacks."""

    def __call__(self, audio_bytes: bytes, timestamp: float) -> None: ...


class Microphone(Protocol):
    """Microphone capability consumed by the level monitor."""

    def start(self, on_audio: AudioCallback) -> None: ...

    def stop(self) -> None: ...


@dataclass
class RecognizerHandlers:
    """Callbacks a recognizer invokes during a session."""

    on_start: Callable[[], None]
    on_result: Callable[[str, float, bool], None]
    on_error: Callable[[str], None]
    on_end: Callable[[], None]


class Recognizer(Protocol):
    """Speech recognizer capability consumed by the transcript source."""

    def is_supported(self) -> bool: ...

    def start(self, handlers: RecognizerHandlers) -> None: ...

    def stop(self) -> None: ...
