"""
Scripted recognizer: a Recognizer driven by text instead of audio.

Used by the demo UI's "say" box and by tests to inject synthetic
transcript sequences without a live speech engine.
"""

import logging
import threading

from ..core.capabilities import RecognizerHandlers

logger = logging.getLogger(__name__)


class ScriptedRecognizer:
    """
    Replays utterances as recognizer callbacks.

    ``say`` emits one partial hypothesis per word followed by the final
    result, the way streaming recognizers revise a growing hypothesis.
    """

    def __init__(self, supported: bool = True, auto_start: bool = True):
        self.supported = supported
        self.auto_start = auto_start
        self._handlers: RecognizerHandlers | None = None
        self._lock = threading.Lock()

    def is_supported(self) -> bool:
        return self.supported

    @property
    def is_active(self) -> bool:
        return self._handlers is not None

    def start(self, handlers: RecognizerHandlers) -> None:
        with self._lock:
            self._handlers = handlers
        if self.auto_start:
            handlers.on_start()

    def stop(self) -> None:
        with self._lock:
            handlers, self._handlers = self._handlers, None
        if handlers is not None:
            handlers.on_end()

    def begin(self) -> None:
        """Fire the start callback when ``auto_start`` is off."""
        handlers = self._handlers
        if handlers is not None:
            handlers.on_start()

    def say(self, text: str, confidence: float = 0.9, partials: bool = True) -> None:
        """Emit partial hypotheses for ``text`` and then the final result."""
        handlers = self._handlers
        if handlers is None:
            logger.debug("Ignoring %r: recognizer not started", text)
            return

        words = text.split()
        if partials:
            for i in range(1, len(words)):
                handlers.on_result(" ".join(words[:i]), confidence, False)
        handlers.on_result(text, confidence, True)

    def fail(self, code: str) -> None:
        handlers = self._handlers
        if handlers is not None:
            handlers.on_error(code)

    def end(self) -> None:
        """End the session as an engine timeout would."""
        self.stop()
