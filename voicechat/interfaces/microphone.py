"""
Microphone input interface using PyAudio.
"""

import logging
import time

import pyaudio

from ..core import config
from ..core.capabilities import AudioCallback
from ..core.errors import DeviceError

logger = logging.getLogger(__name__)


class MicrophoneInput:
    """
    Microphone input using PyAudio.

    Captures audio from the default microphone and sends chunks
    to a callback function on PyAudio's stream thread.
    """

    def __init__(
        self,
        sample_rate: int = config.SAMPLE_RATE,
        channels: int = config.CHANNELS,
        chunk_ms: int = config.CHUNK_MS,
    ):
        self.on_audio: AudioCallback | None = None
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self.frames_per_buffer = int(sample_rate * chunk_ms / 1000)

        self._pa: pyaudio.PyAudio | None = None
        self._stream: pyaudio.Stream | None = None

    def _callback(
        self,
        in_data: bytes | None,
        frame_count: int,
        time_info: dict[str, float],
        status_flags: int,
    ) -> tuple[None, int]:
        """PyAudio callback."""
        if in_data is not None and self.on_audio:
            ts = time.time()
            try:
                self.on_audio(in_data, ts)
            except Exception:
                # Don't crash the audio thread
                logger.exception("Audio callback failed")
        return (None, pyaudio.paContinue)

    def start(self, on_audio: AudioCallback) -> None:
        """
        Start capturing audio from the microphone.

        Raises:
            DeviceError: If no input device can be opened
        """
        self.on_audio = on_audio
        if self._stream is not None:
            return  # Already running

        self._pa = pyaudio.PyAudio()
        try:
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.frames_per_buffer,
                stream_callback=self._callback,
            )
            self._stream.start_stream()
        except OSError as e:
            self.stop()
            raise DeviceError(f"Failed to access microphone: {e}") from e
        logger.info("Microphone started (%d Hz, %d ms chunks)", self.sample_rate, self.chunk_ms)

    def stop(self) -> None:
        """Stop capturing audio."""
        if self._stream is not None:
            self._stream.stop_stream()
            self._stream.close()
            self._stream = None

        if self._pa is not None:
            self._pa.terminate()
            self._pa = None

        self.on_audio = None
