"""
Transcript source: wraps a streaming speech recognizer and turns its
callbacks into inbound events.
"""

import logging
import threading

from ..core import config
from ..core.capabilities import Recognizer, RecognizerHandlers
from ..core.errors import RecognitionError
from ..core.events import (
    EventSink,
    RecognitionEnded,
    RecognitionFailed,
    RecognitionStarted,
    TranscriptReceived,
)
from ..core.models import Transcript

logger = logging.getLogger(__name__)


class TranscriptSource:
    """
    One recognition session at a time over a Recognizer.

    After the session ends (or ``stop`` is called) late callbacks from the
    recognizer are dropped until ``start`` is called again.
    """

    def __init__(self, recognizer: Recognizer | None):
        self.recognizer = recognizer
        self._session = 0
        self._running = False
        self._lock = threading.Lock()

    def is_supported(self) -> bool:
        return self.recognizer is not None and self.recognizer.is_supported()

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, emit: EventSink) -> None:
        """
        Begin a session, reporting its lifecycle through ``emit``.

        Unsupported hosts get a single fatal ``not-supported`` failure and
        no start event.
        """
        if not self.is_supported():
            logger.warning("Speech recognition not supported")
            emit(RecognitionFailed(code=config.NOT_SUPPORTED, fatal=True))
            return

        with self._lock:
            self._session += 1
            session = self._session
            self._running = True

        try:
            self.recognizer.start(self._handlers(session, emit))
        except RecognitionError as e:
            logger.error("Failed to start speech recognition: %s", e)
            self._finish(session)
            emit(RecognitionFailed(code=e.code or config.START_FAILED, fatal=True))
        except Exception:
            logger.exception("Failed to start speech recognition")
            self._finish(session)
            emit(RecognitionFailed(code=config.START_FAILED, fatal=True))

    def stop(self) -> None:
        """Request termination. No-op when not running."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._session += 1
        self.recognizer.stop()

    def _live(self, session: int) -> bool:
        with self._lock:
            return self._running and session == self._session

    def _finish(self, session: int) -> bool:
        with self._lock:
            if not self._running or session != self._session:
                return False
            self._running = False
            return True

    def _handlers(self, session: int, emit: EventSink) -> RecognizerHandlers:
        def on_start() -> None:
            if self._live(session):
                emit(RecognitionStarted())

        def on_result(text: str, confidence: float, is_final: bool) -> None:
            if self._live(session):
                emit(
                    TranscriptReceived(
                        Transcript(
                            text=text,
                            confidence=float(confidence or 0.0),
                            is_final=bool(is_final),
                        )
                    )
                )

        def on_error(code: str) -> None:
            if not self._live(session):
                return
            fatal = code not in config.RECOVERABLE_RECOGNITION_ERRORS
            emit(RecognitionFailed(code=code, fatal=fatal))

        def on_end() -> None:
            if self._finish(session):
                emit(RecognitionEnded())

        return RecognizerHandlers(
            on_start=on_start,
            on_result=on_result,
            on_error=on_error,
            on_end=on_end,
        )
