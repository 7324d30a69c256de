from __future__ import annotations

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from aitranscriber.app.config import audio_format_from, effective_api_key, output_dirs
from aitranscriber.app.diagnostics import summarize_exception
from aitranscriber.app.services import AppServices, build_translation
from aitranscriber.app.session import FileJobOutcome, finalize_realtime_session, process_audio_file
from aitranscriber.audio.level import level_percent
from aitranscriber.audio.mic import recording_path
from aitranscriber.contracts import RealtimeUpdate, TranscriptionFailure
from aitranscriber.errors import TranscriptionCancelled
from aitranscriber.live.realtime import RealtimeTranscriptionManager
from aitranscriber.ui.bridge import UiEvent, UpdateBus


def _log_event(logger: logging.Logger | None, level: int, event: str, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, event, extra=fields)


class RecordingController:
    """
    Glue between the capture device, the realtime manager and the UI.

    Worker threads never touch widgets; everything the UI shows goes through
    the UpdateBus as UiEvent items ("update", "failure", "done").
    """

    def __init__(
        self,
        args: Any,
        services: AppServices,
        bus: UpdateBus,
        logger: logging.Logger | None = None,
    ) -> None:
        self.args = args
        self.services = services
        self.bus = bus
        self.logger = logger
        self.level = 0
        self._manager: RealtimeTranscriptionManager | None = None
        self._cancel_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def recording(self) -> bool:
        return self.services.recorder.recording

    @property
    def busy(self) -> bool:
        return self.recording or (self._worker is not None and self._worker.is_alive())

    def api_key(self) -> str:
        return effective_api_key(self.args)

    def reload_translation(self) -> None:
        status, translator = build_translation(self.args)
        self.services = replace(self.services, translator=translator, translation_status=status)

    def _on_audio(self, data: bytes) -> None:
        if self.args.bits_per_sample == 16:
            self.level = level_percent(data)
        manager = self._manager
        if manager is not None:
            manager.add_audio(data)

    def _on_update(self, update: RealtimeUpdate) -> None:
        if self.args.print_console:
            print(f"[realtime] {update.segment_text}")
        self.bus.push(UiEvent("update", update))

    def _on_failure(self, failure: TranscriptionFailure) -> None:
        self.bus.push(UiEvent("failure", summarize_exception(str(failure.error))))

    def start_recording(self) -> Path:
        with self._lock:
            if self.busy:
                raise RuntimeError("a recording or transcription is already running")
            recordings_dir, _ = output_dirs(self.args)
            wav_path = recording_path(recordings_dir)
            self._cancel_event = threading.Event()
            if self.args.realtime:
                manager = RealtimeTranscriptionManager(
                    self.services.transcriber,
                    self.api_key,
                    audio_format_from(self.args),
                    chunk_seconds=float(self.args.chunk_sec),
                    logger=self.logger,
                )
                manager.add_update_listener(self._on_update)
                manager.add_failure_listener(self._on_failure)
                self._manager = manager
            recorder = self.services.recorder
            recorder.add_sink(self._on_audio)
            try:
                recorder.start(wav_path)
            except Exception:
                self._dispose_manager()
                raise
            _log_event(
                self.logger,
                logging.INFO,
                "recording_started",
                path=str(wav_path),
                realtime=bool(self.args.realtime),
            )
            return wav_path

    def stop_recording(self) -> None:
        """Stop capture and finish the session on a worker thread."""
        with self._lock:
            wav_path = self.services.recorder.stop()
            self.level = 0
            _log_event(self.logger, logging.INFO, "recording_stopped", path=str(wav_path))
            if wav_path is None:
                self._dispose_manager()
                return
            manager = self._manager
            if manager is not None:
                target, args = self._finish_realtime, (manager, wav_path)
            else:
                target, args = self._finish_file, (wav_path,)
            self._worker = threading.Thread(
                target=target,
                args=args,
                name="aitranscriber-finalize-worker",
                daemon=True,
            )
            self._worker.start()

    def transcribe_file(self, path: str | Path) -> None:
        with self._lock:
            if self.busy:
                raise RuntimeError("a recording or transcription is already running")
            self._cancel_event = threading.Event()
            self._worker = threading.Thread(
                target=self._finish_file,
                args=(Path(path),),
                name="aitranscriber-file-worker",
                daemon=True,
            )
            self._worker.start()

    def cancel(self) -> None:
        self._cancel_event.set()

    def shutdown(self) -> None:
        self.cancel()
        if self.recording:
            self.services.recorder.stop()
        self._dispose_manager()

    def _dispose_manager(self) -> None:
        manager, self._manager = self._manager, None
        if manager is not None:
            manager.dispose()

    def _finish_file(self, path: Path) -> None:
        _, transcripts_dir = output_dirs(self.args)
        try:
            outcome = process_audio_file(
                path,
                api_key=self.api_key(),
                transcriber=self.services.transcriber,
                translator=self.services.translator,
                translation_status=self.services.translation_status,
                transcripts_dir=transcripts_dir,
                cancel_event=self._cancel_event,
                logger=self.logger,
            )
        finally:
            self._dispose_manager()
        self.bus.push(UiEvent("done", outcome))

    def _finish_realtime(self, manager: RealtimeTranscriptionManager, path: Path) -> None:
        _, transcripts_dir = output_dirs(self.args)
        try:
            result = manager.complete(cancel_event=self._cancel_event)
            if not result.text.strip() and not self.api_key():
                outcome = FileJobOutcome(status="Recording saved. Provide an API key to transcribe.")
            else:
                outcome = finalize_realtime_session(
                    path,
                    result,
                    translator=self.services.translator,
                    translation_status=self.services.translation_status,
                    transcripts_dir=transcripts_dir,
                    logger=self.logger,
                )
        except TranscriptionCancelled:
            outcome = FileJobOutcome(status="Operation cancelled.")
        except Exception as e:
            if self.logger is not None:
                self.logger.exception("realtime_finalize_failed", extra={"path": str(path)})
            outcome = FileJobOutcome(status="Failed.", warning=f"Processing failed: {e}")
        finally:
            self._dispose_manager()
        self.bus.push(UiEvent("done", outcome))
