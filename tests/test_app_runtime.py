from __future__ import annotations

import argparse
import threading
from array import array
from pathlib import Path
from typing import Callable, Optional

import pytest

from aitranscriber.app.runtime import RecordingController
from aitranscriber.app.services import AppServices
from aitranscriber.asr.base import Transcriber
from aitranscriber.contracts import RealtimeUpdate, TranscriptionResult
from aitranscriber.live.realtime import RealtimeState, RealtimeTranscriptionManager
from aitranscriber.nlp.translator.factory import EndpointStatus
from aitranscriber.ui.bridge import UiEvent, UpdateBus, drain_bus

# 0.01s of 16 kHz mono int16
CHUNK_BYTES = 320


class _FakeRecorder:
    def __init__(self) -> None:
        self.sinks: list[Callable[[bytes], None]] = []
        self.path: Path | None = None
        self.recording = False

    def add_sink(self, sink: Callable[[bytes], None]) -> None:
        if sink not in self.sinks:
            self.sinks.append(sink)

    def start(self, wav_path: Path) -> None:
        self.path = Path(wav_path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(b"RIFF" + b"\x00" * 400)
        self.recording = True

    def feed(self, data: bytes) -> None:
        for sink in self.sinks:
            sink(data)

    def stop(self) -> Path | None:
        self.recording = False
        return self.path


class _FakeTranscriber(Transcriber):
    def __init__(self) -> None:
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake"

    def transcribe(
        self,
        audio: bytes,
        file_name: str,
        api_key: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranscriptionResult:
        self.calls += 1
        return TranscriptionResult(text=f"part{self.calls}", translation=f"fa{self.calls}")


def _args(tmp_path: Path, **overrides) -> argparse.Namespace:
    values = {
        "api_key": "sk-test",
        "translator": "endpoint",
        "translation_endpoint": "",
        "realtime": True,
        "chunk_sec": 0.01,
        "sr": 16000,
        "channels": 1,
        "bits_per_sample": 16,
        "recordings_dir": str(tmp_path / "rec"),
        "transcripts_dir": str(tmp_path / "out"),
        "print_console": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def _controller(tmp_path: Path, **overrides) -> tuple[RecordingController, _FakeRecorder, _FakeTranscriber, UpdateBus]:
    recorder = _FakeRecorder()
    transcriber = _FakeTranscriber()
    services = AppServices(
        recorder=recorder,  # type: ignore[arg-type]
        transcriber=transcriber,  # type: ignore[arg-type]
        translator=None,
        translation_status=EndpointStatus.DISABLED,
    )
    bus = UpdateBus(maxsize=50)
    return RecordingController(_args(tmp_path, **overrides), services, bus), recorder, transcriber, bus


def _events(controller: RecordingController, bus: UpdateBus) -> list[UiEvent]:
    assert controller._worker is not None
    controller._worker.join(5.0)
    events: list[UiEvent] = []
    drain_bus(bus, events.append, max_items=100)
    return events


def test_realtime_recording_streams_updates_and_saves(tmp_path: Path) -> None:
    controller, recorder, transcriber, bus = _controller(tmp_path)
    wav_path = controller.start_recording()
    assert wav_path.parent == tmp_path / "rec"
    assert wav_path.name.startswith("recording_")
    assert controller.recording

    tone = array("h", [3000] * (CHUNK_BYTES // 2)).tobytes()
    recorder.feed(tone)
    recorder.feed(tone + tone[:100])
    assert controller.level > 0

    with pytest.raises(RuntimeError):
        controller.start_recording()

    controller.stop_recording()
    events = _events(controller, bus)

    updates = [ev.payload for ev in events if ev.kind == "update"]
    assert all(isinstance(u, RealtimeUpdate) for u in updates)
    assert [u.full_transcript for u in updates] == ["part1", "part1 part2", "part1 part2 part3"]
    assert updates[-1].is_final_segment

    done = events[-1]
    assert done.kind == "done"
    assert done.payload.status == "Completed."
    assert done.payload.result.translation == "fa1 fa2 fa3"
    assert (tmp_path / "out" / f"{wav_path.stem}.txt").exists()
    assert controller.level == 0
    assert controller._manager is None


def test_realtime_recording_without_key_only_saves_audio(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    controller, recorder, transcriber, bus = _controller(tmp_path, api_key="")
    controller.start_recording()
    recorder.feed(b"\x00" * CHUNK_BYTES * 2)
    controller.stop_recording()

    events = _events(controller, bus)
    assert [ev.kind for ev in events] == ["done"]
    assert events[0].payload.status == "Recording saved. Provide an API key to transcribe."
    assert transcriber.calls == 0


def test_file_mode_transcribes_whole_recording(tmp_path: Path) -> None:
    controller, recorder, transcriber, bus = _controller(tmp_path, realtime=False)
    controller.start_recording()
    recorder.feed(b"\x00" * CHUNK_BYTES * 3)
    controller.stop_recording()

    events = _events(controller, bus)
    assert [ev.kind for ev in events] == ["done"]
    outcome = events[0].payload
    assert outcome.status == "Completed."
    assert outcome.result.text == "part1"
    assert transcriber.calls == 1


def test_transcribe_file_reports_missing_file(tmp_path: Path) -> None:
    controller, _, _, bus = _controller(tmp_path)
    controller.transcribe_file(tmp_path / "missing.wav")
    events = _events(controller, bus)
    assert events[0].payload.status == "No audio file found."


def test_failure_events_carry_a_summary(tmp_path: Path) -> None:
    controller, _, _, bus = _controller(tmp_path)

    class _Failure:
        error = RuntimeError("OpenAI transcription failed (500 Internal Server Error).")
        chunk_index = 2

    controller._on_failure(_Failure())  # type: ignore[arg-type]
    event = bus.pop()
    assert event == UiEvent("failure", "OpenAI transcription failed (500 Internal Server Error).")


def test_finish_realtime_uses_the_manager_it_was_given(tmp_path: Path) -> None:
    controller, _, transcriber, bus = _controller(tmp_path)
    manager = RealtimeTranscriptionManager(transcriber, controller.api_key, chunk_seconds=0.01)
    manager.add_audio(b"\x00" * CHUNK_BYTES)
    assert controller._manager is None

    controller._finish_realtime(manager, tmp_path / "rec" / "recording_x.wav")

    event = bus.pop()
    assert event is not None and event.kind == "done"
    assert event.payload.status == "Completed."
    assert event.payload.result.text == "part1"
    assert manager.state == RealtimeState.COMPLETED
