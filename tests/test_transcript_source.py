"""Transcript source: session lifecycle and late-callback suppression."""
from voicechat.app.transcript_source import TranscriptSource
from voicechat.core.capabilities import RecognizerHandlers
from voicechat.core.config import NOT_SUPPORTED, START_FAILED
from voicechat.core.errors import RecognitionError
from voicechat.core.events import (
    RecognitionEnded,
    RecognitionFailed,
    RecognitionStarted,
    TranscriptReceived,
)
from voicechat.core.models import Transcript
from voicechat.interfaces.scripted import ScriptedRecognizer


class ManualRecognizer:
    """Recognizer that keeps its handlers so tests can fire them at will."""

    def __init__(self, fail_start: Exception | None = None):
        self.fail_start = fail_start
        self.handlers: RecognizerHandlers | None = None
        self.stop_calls = 0

    def is_supported(self):
        return True

    def start(self, handlers):
        if self.fail_start:
            raise self.fail_start
        self.handlers = handlers

    def stop(self):
        self.stop_calls += 1


def collect(source):
    events = []
    source.start(events.append)
    return events


def test_lifecycle_events():
    recognizer = ManualRecognizer()
    source = TranscriptSource(recognizer)
    events = collect(source)

    h = recognizer.handlers
    h.on_start()
    h.on_result("hi", 0.8, False)
    h.on_result("hi there", None, True)
    h.on_error("no-speech")
    h.on_end()

    assert events == [
        RecognitionStarted(),
        TranscriptReceived(Transcript("hi", 0.8, False)),
        TranscriptReceived(Transcript("hi there", 0.0, True)),
        RecognitionFailed("no-speech", fatal=False),
        RecognitionEnded(),
    ]
    assert not source.is_running


def test_nothing_after_end():
    recognizer = ManualRecognizer()
    source = TranscriptSource(recognizer)
    events = collect(source)

    recognizer.handlers.on_end()
    recognizer.handlers.on_result("late", 0.9, True)
    recognizer.handlers.on_error("network")
    recognizer.handlers.on_end()

    assert events == [RecognitionEnded()]


def test_stop_silences_old_session():
    recognizer = ManualRecognizer()
    source = TranscriptSource(recognizer)
    events = collect(source)
    old = recognizer.handlers

    source.stop()
    old.on_result("late", 0.9, True)
    old.on_end()

    assert events == []
    assert recognizer.stop_calls == 1

    new_events = collect(source)
    old.on_result("stale", 0.9, True)
    recognizer.handlers.on_result("fresh", 0.9, True)
    assert new_events == [TranscriptReceived(Transcript("fresh", 0.9, True))]


def test_stop_when_not_started_is_noop():
    recognizer = ManualRecognizer()
    TranscriptSource(recognizer).stop()
    assert recognizer.stop_calls == 0


def test_fatal_error_codes():
    recognizer = ManualRecognizer()
    source = TranscriptSource(recognizer)
    events = collect(source)
    recognizer.handlers.on_error("not-allowed")
    assert events == [RecognitionFailed("not-allowed", fatal=True)]


def test_unsupported_reports_without_start():
    source = TranscriptSource(ScriptedRecognizer(supported=False))
    events = collect(source)
    assert events == [RecognitionFailed(NOT_SUPPORTED, fatal=True)]
    assert not source.is_running


def test_missing_recognizer_is_unsupported():
    source = TranscriptSource(None)
    assert not source.is_supported()
    assert collect(source) == [RecognitionFailed(NOT_SUPPORTED, fatal=True)]


def test_start_failure_is_reported():
    source = TranscriptSource(ManualRecognizer(fail_start=RecognitionError("audio-capture")))
    events = collect(source)
    assert events == [RecognitionFailed("audio-capture", fatal=True)]
    assert not source.is_running


def test_stop_inside_callback():
    recognizer = ScriptedRecognizer()
    source = TranscriptSource(recognizer)
    events = []

    def emit(event):
        events.append(event)
        if isinstance(event, TranscriptReceived):
            source.stop()

    source.start(emit)
    recognizer.say("one two three")

    assert events == [
        RecognitionStarted(),
        TranscriptReceived(Transcript("one", 0.9, False)),
    ]


def test_unexpected_start_failure_is_reported():
    recognizer = ManualRecognizer(fail_start=RuntimeError("engine busy"))
    source = TranscriptSource(recognizer)
    events = collect(source)

    assert events == [RecognitionFailed(START_FAILED, fatal=True)]
    assert not source.is_running

    recognizer.fail_start = None
    events = collect(source)
    recognizer.handlers.on_start()
    assert events == [RecognitionStarted()]
