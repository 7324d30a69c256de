from __future__ import annotations

import sys
import types
import wave
from datetime import datetime
from pathlib import Path

import pytest

from aitranscriber.audio.mic import SoundDeviceRecorder, recording_path
from aitranscriber.contracts import AudioFormat
from aitranscriber.errors import MicError


class _FakeStream:
    instances: list["_FakeStream"] = []

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.started = False
        self.closed = False
        _FakeStream.instances.append(self)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.started = False

    def close(self) -> None:
        self.closed = True


def _fake_sounddevice(stream_cls=_FakeStream) -> types.ModuleType:
    mod = types.ModuleType("sounddevice")
    mod.RawInputStream = stream_cls  # type: ignore[attr-defined]
    mod.query_devices = lambda: "0 Fake Mic, 1 in, 0 out"  # type: ignore[attr-defined]
    return mod


def test_recording_path_uses_timestamp(tmp_path: Path) -> None:
    path = recording_path(tmp_path, now=datetime(2026, 3, 4, 5, 6, 7))
    assert path == tmp_path / "recording_20260304_050607.wav"


def test_recorder_streams_to_sinks_and_wav(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "sounddevice", _fake_sounddevice())
    _FakeStream.instances.clear()
    recorder = SoundDeviceRecorder(fmt=AudioFormat(sample_rate=8000), device=3)
    received: list[bytes] = []
    recorder.add_sink(received.append)
    recorder.add_sink(received.append)

    target = tmp_path / "rec" / "session.wav"
    recorder.start(target)
    assert recorder.recording
    stream = _FakeStream.instances[-1]
    assert stream.started
    assert stream.kwargs["samplerate"] == 8000
    assert stream.kwargs["dtype"] == "int16"
    assert stream.kwargs["device"] == 3

    stream.kwargs["callback"](b"\x01\x00" * 80, 80, None, None)
    stream.kwargs["callback"](b"\x02\x00" * 40, 40, None, 1)

    assert recorder.stop() == target
    assert not recorder.recording
    assert stream.closed
    assert received == [b"\x01\x00" * 80, b"\x02\x00" * 40]
    with wave.open(str(target), "rb") as wf:
        assert wf.getframerate() == 8000
        assert wf.getnframes() == 120
    assert recorder.stop() is None


def test_recorder_wraps_stream_failures(tmp_path: Path, monkeypatch) -> None:
    class _BrokenStream(_FakeStream):
        def start(self) -> None:
            raise OSError("device unavailable")

    monkeypatch.setitem(sys.modules, "sounddevice", _fake_sounddevice(_BrokenStream))
    recorder = SoundDeviceRecorder()
    with pytest.raises(MicError, match="Failed to open microphone stream"):
        recorder.start(tmp_path / "x.wav")
    assert not recorder.recording
    assert recorder.wav_path is None


def test_list_devices(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "sounddevice", _fake_sounddevice())
    assert "Fake Mic" in SoundDeviceRecorder.list_devices()
