from __future__ import annotations

import io
import threading
import wave
from pathlib import Path

from aitranscriber.contracts import AudioFormat


def _configure(wf: wave.Wave_write, fmt: AudioFormat) -> None:
    wf.setnchannels(fmt.channels)
    wf.setsampwidth(fmt.sample_width)
    wf.setframerate(fmt.sample_rate)


def encode_wav(pcm: bytes, fmt: AudioFormat) -> bytes:
    """Wrap raw PCM in a complete RIFF/WAVE container."""
    if not pcm:
        raise ValueError("pcm must not be empty")
    out = io.BytesIO()
    with wave.open(out, "wb") as wf:
        _configure(wf, fmt)
        wf.writeframes(pcm)
    return out.getvalue()


def write_wav_file(path: str | Path, pcm: bytes, fmt: AudioFormat) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(p), "wb") as wf:
        _configure(wf, fmt)
        wf.writeframes(pcm)
    return p


class WavFileRecorder:
    """Keeps an on-disk WAV copy of a live recording, written incrementally."""

    def __init__(self, path: str | Path, fmt: AudioFormat) -> None:
        self.path = Path(path)
        self.fmt = fmt
        self.bytes_written = 0
        self._lock = threading.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._wf: wave.Wave_write | None = wave.open(str(self.path), "wb")
        _configure(self._wf, fmt)

    def write(self, pcm: bytes) -> None:
        with self._lock:
            if self._wf is None or not pcm:
                return
            # writeframes patches the header sizes, so the file stays readable
            self._wf.writeframes(pcm)
            self.bytes_written += len(pcm)

    def close(self) -> None:
        with self._lock:
            if self._wf is None:
                return
            self._wf.close()
            self._wf = None

    def __enter__(self) -> "WavFileRecorder":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
