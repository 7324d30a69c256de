from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from aitranscriber.audio.wav import WavFileRecorder
from aitranscriber.contracts import AudioFormat
from aitranscriber.errors import MicError

AudioSink = Callable[[bytes], None]

_DTYPES = {8: "uint8", 16: "int16", 24: "int24", 32: "int32"}


def recording_path(recordings_dir: str | Path, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return Path(recordings_dir) / f"recording_{stamp}.wav"


class SoundDeviceRecorder:
    """
    Live microphone capture using the `sounddevice` package (PortAudio).

    Raw PCM blocks are delivered on the PortAudio callback thread to every
    sink, and optionally copied into a WAV file for the whole session.
    """

    def __init__(
        self,
        *,
        fmt: AudioFormat | None = None,
        device: Optional[int] = None,
        blocksize: int = 0,
    ) -> None:
        self.fmt = fmt or AudioFormat()
        if self.fmt.bits_per_sample not in _DTYPES:
            raise ValueError(f"unsupported bits_per_sample: {self.fmt.bits_per_sample}")
        self.device = device
        self.blocksize = int(blocksize)
        self._sinks: list[AudioSink] = []
        self._stream = None
        self._wav: WavFileRecorder | None = None
        self._lock = threading.Lock()

    @staticmethod
    def list_devices() -> str:
        try:
            import sounddevice as sd
        except ImportError as e:
            raise MicError(
                "sounddevice is not installed. Install with: python -m pip install sounddevice"
            ) from e
        return str(sd.query_devices())

    @property
    def recording(self) -> bool:
        return self._stream is not None

    @property
    def wav_path(self) -> Path | None:
        return None if self._wav is None else self._wav.path

    def add_sink(self, sink: AudioSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def _callback(self, indata, frames, time_info, status) -> None:
        data = bytes(indata)
        if self._wav is not None:
            self._wav.write(data)
        for sink in list(self._sinks):
            sink(data)

    def start(self, wav_path: str | Path | None = None) -> None:
        with self._lock:
            if self._stream is not None:
                return
            try:
                import sounddevice as sd
            except ImportError as e:
                raise MicError(
                    "sounddevice is not installed. Install with: python -m pip install sounddevice"
                ) from e

            if wav_path is not None:
                self._wav = WavFileRecorder(wav_path, self.fmt)
            try:
                stream = sd.RawInputStream(
                    samplerate=self.fmt.sample_rate,
                    channels=self.fmt.channels,
                    dtype=_DTYPES[self.fmt.bits_per_sample],
                    device=self.device,
                    blocksize=self.blocksize,  # 0 lets PortAudio choose
                    callback=self._callback,
                )
                stream.start()
            except Exception as e:
                self._close_wav()
                raise MicError(
                    "Failed to open microphone stream. "
                    "Try --list-devices and select a device id with --device."
                ) from e
            self._stream = stream

    def stop(self) -> Path | None:
        """Stop capture; returns the WAV copy path if one was written."""
        with self._lock:
            stream, self._stream = self._stream, None
            if stream is not None:
                try:
                    stream.stop()
                finally:
                    stream.close()
            path = self.wav_path
            self._close_wav()
            return path

    def _close_wav(self) -> None:
        if self._wav is not None:
            self._wav.close()
            self._wav = None
