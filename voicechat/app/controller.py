"""
Voice Controller - orchestrates recognizer → intent parser → executor.

Recognizer and microphone adapters push events into one inbound queue.
The controller consumes that queue in arrival order, either on its own
worker thread (``start``) or synchronously (``process_pending``). Every
dispatch and state transition holds one re-entrant lock, so UI callbacks
run one at a time and may call back into the controller.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..core import config
from ..core.errors import ParseMiss
from ..core.events import (
    Event,
    EventSink,
    LevelSampled,
    MicrophoneFailed,
    RecognitionEnded,
    RecognitionFailed,
    RecognitionStarted,
    TextSubmitted,
    TranscriptReceived,
)
from ..core.executor import CommandExecutor
from ..core.intent import IntentParser
from ..core.models import Command, CommandResult, CommandType, Transcript
from ..core.runtime_config import ConfigStore, RuntimeConfig
from .audio_level import AudioLevelMonitor
from .transcript_source import TranscriptSource

logger = logging.getLogger(__name__)


class ListeningState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"  # waiting for the recognizer to confirm
    LISTENING = "listening"


@dataclass
class ControllerCallbacks:
    """UI callback surface. Unset callbacks are skipped."""

    on_listening_start: Callable[[], None] | None = None
    on_listening_stop: Callable[[], None] | None = None
    on_transcript: Callable[[str, bool], None] | None = None
    on_command_processed: Callable[[Command, CommandResult], None] | None = None
    on_error: Callable[[str], None] | None = None
    on_audio_level: Callable[[float], None] | None = None
    on_overlay_control: Callable[[str], None] | None = None


class VoiceController:
    """
    Idle/Listening state machine over a transcript source and an audio
    level monitor.

    Final transcripts above the confidence threshold are parsed. Control
    commands go straight to ``on_overlay_control``; everything else is
    executed and the result reported through ``on_command_processed``.
    """

    def __init__(
        self,
        transcript_source: TranscriptSource,
        level_monitor: AudioLevelMonitor,
        executor: CommandExecutor,
        parser: IntentParser | None = None,
        callbacks: ControllerCallbacks | None = None,
        config_store: ConfigStore | None = None,
    ):
        self.transcript_source = transcript_source
        self.level_monitor = level_monitor
        self.executor = executor
        self.parser = parser or IntentParser()
        self.callbacks = callbacks or ControllerCallbacks()
        self.config_store = config_store or ConfigStore()
        self.config_store.add_listener(self._on_config_change)

        self._state = ListeningState.IDLE
        self._session = 0
        self._current_transcript = ""
        self._lock = threading.RLock()

        # Inbound channel: (session, event); session None for UI input
        self._queue: queue.Queue[tuple[int | None, Event]] = queue.Queue()
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> ListeningState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state is ListeningState.LISTENING

    @property
    def current_transcript(self) -> str:
        return self._current_transcript

    def is_supported(self) -> bool:
        return self.transcript_source.is_supported()

    # ------------------------------------------------------------------
    # Event worker
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the event processing thread."""
        if self._worker is not None:
            return
        self._stop_event.clear()
        self._worker = threading.Thread(target=self._event_worker, daemon=True)
        self._worker.start()

    def shutdown(self) -> None:
        """Stop listening and the event processing thread."""
        self.stop_listening()
        self._stop_event.set()
        if self._worker:
            self._worker.join(timeout=1.0)
            self._worker = None

    def process_pending(self) -> int:
        """
        Process queued events on the calling thread.

        Returns:
            Number of events processed
        """
        count = 0
        while True:
            try:
                session, event = self._queue.get_nowait()
            except queue.Empty:
                return count
            self._dispatch(session, event)
            count += 1

    def _event_worker(self) -> None:
        while not self._stop_event.is_set():
            try:
                session, event = self._queue.get(timeout=config.EVENT_POLL_S)
            except queue.Empty:
                continue
            self._dispatch(session, event)

    # ------------------------------------------------------------------
    # Commands from the UI
    # ------------------------------------------------------------------
    def start_listening(self) -> None:
        """Start recognition and level monitoring. No-op unless idle."""
        with self._lock:
            if self._state is not ListeningState.IDLE:
                return
            if not self.transcript_source.is_supported():
                self._report("Speech recognition not supported")
                return

            self._session += 1
            self._state = ListeningState.STARTING
            sink = self._sink(self._session)
            self.level_monitor.start(sink)
            self.transcript_source.start(sink)
            logger.info("Listening requested (session %d)", self._session)

    def stop_listening(self) -> None:
        """Stop both services; no callbacks fire for this session afterwards."""
        with self._lock:
            if self._state is ListeningState.IDLE:
                return
            was_listening = self._state is ListeningState.LISTENING
            self._go_idle()
            if was_listening:
                self._notify("on_listening_stop")

    def submit_text(self, text: str) -> None:
        """Queue a typed command behind any pending voice input."""
        self._queue.put((None, TextSubmitted(text=text)))

    def _sink(self, session: int) -> EventSink:
        def emit(event: Event) -> None:
            self._queue.put((session, event))

        return emit

    def _go_idle(self) -> None:
        self._state = ListeningState.IDLE
        self._session += 1
        self.transcript_source.stop()
        self.level_monitor.stop()
        logger.info("Listening stopped")

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def _dispatch(self, session: int | None, event: Event) -> None:
        with self._lock:
            if session is not None and session != self._session:
                logger.debug("Dropping %s from stale session %d", type(event).__name__, session)
                return
            try:
                self._handle(event)
            except Exception as e:
                logger.exception("Failed to handle %s", type(event).__name__)
                self._report(f"Command processing error: {e}")

    def _handle(self, event: Event) -> None:
        if isinstance(event, TextSubmitted):
            self._process_command_text(event.text)

        elif isinstance(event, RecognitionStarted):
            if self._state is ListeningState.STARTING:
                self._state = ListeningState.LISTENING
                self._notify("on_listening_start")

        elif isinstance(event, TranscriptReceived):
            self._handle_transcript(event.transcript)

        elif isinstance(event, RecognitionFailed):
            self._handle_recognition_failure(event)

        elif isinstance(event, RecognitionEnded):
            self.stop_listening()

        elif isinstance(event, LevelSampled):
            self._notify("on_audio_level", event.level)

        elif isinstance(event, MicrophoneFailed):
            # Level meter only; recognition keeps running
            self._report(f"Audio monitoring error: {event.message}")

    def _handle_transcript(self, transcript: Transcript) -> None:
        session = self._session
        self._current_transcript = transcript.text
        self._notify("on_transcript", transcript.text, transcript.is_final)
        if session != self._session:
            return  # stopped from the transcript callback

        if not transcript.is_final:
            return
        threshold = self.config_store.get().confidence_threshold
        if transcript.confidence <= threshold:
            logger.debug(
                "Ignoring %r: confidence %.2f <= %.2f",
                transcript.text,
                transcript.confidence,
                threshold,
            )
            return
        self._process_command_text(transcript.text)

    def _handle_recognition_failure(self, event: RecognitionFailed) -> None:
        if event.code == config.NOT_SUPPORTED:
            self._report("Speech recognition not supported")
        else:
            self._report(f"Speech recognition error: {event.code}")
        if event.fatal:
            self.stop_listening()

    def _process_command_text(self, text: str) -> None:
        try:
            command = self.parser.parse(text)
            if command is None:
                raise ParseMiss(text)
        except ParseMiss as e:
            logger.info("Command not recognized: %r", e.text)
            self._report(str(e))
            return

        if command.type is CommandType.CONTROL:
            logger.info("Overlay control: %s", command.action)
            self._notify("on_overlay_control", command.action)
            return

        result = self.executor.execute(command)
        self._notify("on_command_processed", command, result)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _report(self, message: str) -> None:
        logger.warning("%s", message)
        self._notify("on_error", message)

    def _notify(self, name: str, *args) -> None:
        callback = getattr(self.callbacks, name)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("UI callback %s failed", name)

    def _on_config_change(self, cfg: RuntimeConfig) -> None:
        self.level_monitor.analyser.smoothing = cfg.smoothing_time_constant
