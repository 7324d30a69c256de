from __future__ import annotations


class TranscriptionError(RuntimeError):
    """Provider rejected the request or answered with an unusable payload."""


class TranslationError(RuntimeError):
    pass


class TranscriptionCancelled(Exception):
    """Session or caller cancellation. Not a failure; never reported as one."""


class SessionUnavailableError(RuntimeError):
    """The realtime session was disposed or already completed."""


class MicError(RuntimeError):
    pass
