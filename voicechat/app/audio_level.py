"""
Audio level monitor: turns microphone chunks into loudness samples.
"""

import logging
import threading

from ..core.capabilities import Microphone
from ..core.errors import DeviceError, UnsupportedCapabilityError
from ..core.events import EventSink, LevelSampled, MicrophoneFailed
from ..core.spectrum import SpectrumAnalyser

logger = logging.getLogger(__name__)


class AudioLevelMonitor:
    """
    Samples a microphone and emits ``LevelSampled`` events in [0, 100].

    One sampling loop per instance: starting while active only replaces the
    sink. A microphone that cannot be opened yields one ``MicrophoneFailed``
    event and nothing else.
    """

    def __init__(
        self,
        microphone: Microphone | None,
        analyser: SpectrumAnalyser | None = None,
    ):
        self.microphone = microphone
        self.analyser = analyser or SpectrumAnalyser()
        self._emit: EventSink | None = None
        self._active = False
        self._lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self, emit: EventSink) -> None:
        """Begin sampling, reporting levels and failures through ``emit``."""
        with self._lock:
            self._emit = emit
            if self._active:
                return

            try:
                if self.microphone is None:
                    raise UnsupportedCapabilityError("No microphone available")
                self.analyser.reset()
                self._active = True
                self.microphone.start(self._on_audio)
            except (DeviceError, UnsupportedCapabilityError) as e:
                self._fail(emit, e)
                return
            except Exception as e:
                logger.exception("Microphone failed to start")
                self._fail(emit, DeviceError(f"Failed to access microphone: {e}"))
                return

        logger.info("Audio level monitoring started")

    def stop(self) -> None:
        """Release the microphone. Safe to call repeatedly."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._emit = None
            microphone = self.microphone

        microphone.stop()
        logger.info("Audio level monitoring stopped")

    def _fail(self, emit: EventSink, error: Exception) -> None:
        self._active = False
        self._emit = None
        logger.warning("Audio level monitoring unavailable: %s", error)
        emit(MicrophoneFailed(message=str(error)))

    def _on_audio(self, audio_bytes: bytes, timestamp: float) -> None:
        with self._lock:
            emit = self._emit
            if not self._active or emit is None:
                return
            level = self.analyser.process_bytes(audio_bytes)
        emit(LevelSampled(level=level))
