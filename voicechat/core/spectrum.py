"""
Spectral loudness meter for raw PCM audio.
This module is independent of any transport or UI.
"""

import numpy as np

from . import config


def pcm16_to_float(audio_bytes: bytes) -> np.ndarray:
    """Convert PCM16 (int16, mono) bytes to float32 in [-1, 1]."""
    audio_np = np.frombuffer(audio_bytes, dtype=np.int16).astype(np.float32)
    return audio_np / 32768.0


class SpectrumAnalyser:
    """
    Turns audio chunks into a 0..100 loudness level.

    Each chunk's most recent ``fft_size`` samples are windowed and
    transformed; magnitudes are smoothed over time, converted to decibels,
    clamped to ``[min_db, max_db]`` and scaled linearly. The level is the
    average over all frequency bins.
    """

    def __init__(
        self,
        fft_size: int = config.FFT_SIZE,
        smoothing: float = config.SMOOTHING_TIME_CONSTANT,
        min_db: float = config.MIN_DECIBELS,
        max_db: float = config.MAX_DECIBELS,
    ):
        if fft_size < 2 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two, got {fft_size}")
        if min_db >= max_db:
            raise ValueError("min_db must be below max_db")

        self.fft_size = fft_size
        self.smoothing = smoothing
        self.min_db = min_db
        self.max_db = max_db

        self._window = np.blackman(fft_size).astype(np.float32)
        self._smoothed = np.zeros(fft_size // 2, dtype=np.float32)

    def reset(self) -> None:
        """Forget smoothing history."""
        self._smoothed[:] = 0.0

    def process(self, samples: np.ndarray) -> float:
        """
        Compute the level for one chunk.

        Args:
            samples: float32 audio in [-1, 1]; shorter chunks are zero-padded

        Returns:
            Level in [0, 100]
        """
        frame = np.zeros(self.fft_size, dtype=np.float32)
        tail = samples[-self.fft_size :]
        frame[: tail.size] = tail

        spectrum = np.fft.rfft(frame * self._window)[: self.fft_size // 2]
        magnitude = np.abs(spectrum) / self.fft_size

        self._smoothed = (
            self.smoothing * self._smoothed + (1.0 - self.smoothing) * magnitude
        ).astype(np.float32)

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(self._smoothed)
        scaled = (db - self.min_db) / (self.max_db - self.min_db)
        scaled = np.clip(np.nan_to_num(scaled, neginf=0.0), 0.0, 1.0)

        return float(min(100.0, max(0.0, scaled.mean() * 100.0)))

    def process_bytes(self, audio_bytes: bytes) -> float:
        """Compute the level for a PCM16 chunk."""
        return self.process(pcm16_to_float(audio_bytes))
