"""Spectrum analyser levels and the audio level monitor lifecycle."""
import numpy as np
import pytest

from voicechat.app.audio_level import AudioLevelMonitor
from voicechat.core.errors import DeviceError
from voicechat.core.events import LevelSampled, MicrophoneFailed
from voicechat.core.spectrum import SpectrumAnalyser, pcm16_to_float

SR = 16000


def noise(n: int = 800, amplitude: float = 0.5, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return (rng.uniform(-1, 1, n) * amplitude).astype(np.float32)


def to_pcm16(samples: np.ndarray) -> bytes:
    return (samples * 32767).astype(np.int16).tobytes()


class FakeMicrophone:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.on_audio = None
        self.start_calls = 0
        self.stop_calls = 0

    def start(self, on_audio):
        self.start_calls += 1
        if self.error:
            raise self.error
        self.on_audio = on_audio

    def stop(self):
        self.stop_calls += 1
        self.on_audio = None


def test_pcm16_scaling():
    f = pcm16_to_float(np.asarray([-32768, 0, 16384], dtype=np.int16).tobytes())
    assert f.dtype == np.float32
    assert f.tolist() == [-1.0, 0.0, 0.5]


def test_silence_is_zero():
    analyser = SpectrumAnalyser()
    assert analyser.process(np.zeros(800, dtype=np.float32)) == 0.0


def test_loud_noise_settles_high():
    analyser = SpectrumAnalyser()
    levels = [analyser.process(noise(seed=i)) for i in range(30)]
    assert all(0.0 <= level <= 100.0 for level in levels)
    assert levels[-1] > 50.0
    # smoothing makes the meter rise gradually
    assert levels[0] < levels[-1]


def test_louder_is_higher():
    quiet = SpectrumAnalyser(smoothing=0.0).process(noise(amplitude=0.01))
    loud = SpectrumAnalyser(smoothing=0.0).process(noise(amplitude=0.5))
    assert loud > quiet


def test_short_chunk_is_padded():
    level = SpectrumAnalyser(smoothing=0.0).process(noise(n=10))
    assert 0.0 <= level <= 100.0


def test_invalid_fft_size():
    with pytest.raises(ValueError):
        SpectrumAnalyser(fft_size=200)


def test_monitor_emits_levels():
    mic = FakeMicrophone()
    monitor = AudioLevelMonitor(mic)
    events = []

    monitor.start(events.append)
    mic.on_audio(to_pcm16(noise()), 0.0)

    assert monitor.is_active
    assert len(events) == 1
    assert isinstance(events[0], LevelSampled)
    assert 0.0 < events[0].level <= 100.0


def test_monitor_start_twice_replaces_sink():
    mic = FakeMicrophone()
    monitor = AudioLevelMonitor(mic)
    first, second = [], []

    monitor.start(first.append)
    monitor.start(second.append)
    mic.on_audio(to_pcm16(noise()), 0.0)

    assert mic.start_calls == 1
    assert first == []
    assert len(second) == 1


def test_monitor_stop_is_idempotent():
    mic = FakeMicrophone()
    monitor = AudioLevelMonitor(mic)
    events = []
    monitor.start(events.append)
    callback = mic.on_audio

    monitor.stop()
    monitor.stop()
    callback(to_pcm16(noise()), 0.0)

    assert mic.stop_calls == 1
    assert events == []
    assert not monitor.is_active


def test_monitor_device_error():
    mic = FakeMicrophone(error=DeviceError("Permission denied"))
    monitor = AudioLevelMonitor(mic)
    events = []

    monitor.start(events.append)
    monitor.stop()

    assert events == [MicrophoneFailed("Permission denied")]
    assert not monitor.is_active
    assert mic.stop_calls == 0


def test_monitor_without_microphone():
    events = []
    AudioLevelMonitor(None).start(events.append)
    assert events == [MicrophoneFailed("No microphone available")]


def test_monitor_unexpected_start_error():
    mic = FakeMicrophone(error=RuntimeError("usb reset"))
    monitor = AudioLevelMonitor(mic)
    events = []

    monitor.start(events.append)

    assert events == [MicrophoneFailed("Failed to access microphone: usb reset")]
    assert not monitor.is_active

    mic.error = None
    monitor.start(events.append)
    mic.on_audio(to_pcm16(noise()), 0.0)
    assert monitor.is_active
    assert isinstance(events[-1], LevelSampled)
