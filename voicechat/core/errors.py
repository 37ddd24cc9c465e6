"""
Error taxonomy for the voice command pipeline.

None of these escape the controller: each is caught at the boundary of the
component that owns it and reported as an error event, an ``on_error``
message or an unsuccessful ``CommandResult``.
"""


class VoiceControlError(Exception):
    """Base class for pipeline errors."""


class UnsupportedCapabilityError(VoiceControlError):
    """No recognizer or microphone is available on this host."""


class DeviceError(VoiceControlError):
    """Microphone permission denied or device failure."""


class RecognitionError(VoiceControlError):
    """The speech recognizer faulted."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code


class ParseMiss(VoiceControlError):
    """A final transcript matched no command rule."""

    def __init__(self, text: str):
        super().__init__("Command not recognized")
        self.text = text


class ExecutionFailure(VoiceControlError):
    """A command is missing a required parameter or its target was not found."""
