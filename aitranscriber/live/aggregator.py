from __future__ import annotations

import threading

from aitranscriber.contracts import TranscriptionResult


def _append_with_space(parts: list[str], value: str) -> None:
    if parts and not parts[-1][-1:].isspace():
        parts.append(" ")
    parts.append(value.strip())


class ResultAggregator:
    """Append-only running transcript and translation for one session."""

    def __init__(self) -> None:
        self._transcript: list[str] = []
        self._translation: list[str] = []
        self._lock = threading.Lock()

    def append_segment(self, segment_text: str, segment_translation: str) -> tuple[str, str]:
        with self._lock:
            if (segment_text or "").strip():
                _append_with_space(self._transcript, segment_text)
            if (segment_translation or "").strip():
                _append_with_space(self._translation, segment_translation)
            return "".join(self._transcript), "".join(self._translation)

    def snapshot(self) -> TranscriptionResult:
        with self._lock:
            return TranscriptionResult(
                text="".join(self._transcript).strip(),
                translation="".join(self._translation).strip(),
            )
