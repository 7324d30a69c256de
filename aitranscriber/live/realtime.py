from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from aitranscriber.asr.base import Transcriber
from aitranscriber.audio.chunk_buffer import DEFAULT_CHUNK_SECONDS, AudioChunkBuffer, chunk_size_for
from aitranscriber.audio.wav import encode_wav
from aitranscriber.contracts import (
    AudioChunk,
    AudioFormat,
    RealtimeUpdate,
    TranscriptionFailure,
    TranscriptionResult,
)
from aitranscriber.errors import SessionUnavailableError, TranscriptionCancelled
from aitranscriber.live.aggregator import ResultAggregator
from aitranscriber.live.pipeline import SequentialChunkPipeline

REALTIME_FILE_NAME = "realtime.wav"

UpdateListener = Callable[[RealtimeUpdate], None]
FailureListener = Callable[[TranscriptionFailure], None]


class RealtimeState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    DISPOSED = "disposed"


class RealtimeTranscriptionManager:
    """
    Incremental transcription of a live capture.

    The capture thread feeds raw PCM through ``add_audio``. Every full chunk
    is wrapped as WAV and transcribed on a single worker, strictly in capture
    order, and listeners get a ``RealtimeUpdate`` per processed chunk.
    ``complete`` flushes the remainder and returns the whole session result.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        api_key_provider: Callable[[], str],
        fmt: AudioFormat | None = None,
        *,
        chunk_seconds: float = DEFAULT_CHUNK_SECONDS,
        logger: logging.Logger | None = None,
    ) -> None:
        if transcriber is None:
            raise ValueError("transcriber is required")
        if api_key_provider is None:
            raise ValueError("api_key_provider is required")

        self.transcriber = transcriber
        self.api_key_provider = api_key_provider
        self.fmt = fmt or AudioFormat()
        self.chunk_size = chunk_size_for(self.fmt, chunk_seconds)
        self.logger = logger

        self._cancel_event = threading.Event()
        self._buffer = AudioChunkBuffer(self.chunk_size, cancel_event=self._cancel_event)
        self._aggregator = ResultAggregator()
        self._pipeline = SequentialChunkPipeline(
            self._process_chunk,
            self._cancel_event,
            logger=logger,
        )
        # guards state changes together with drain+enqueue, so chunk order
        # matches capture order and nothing is queued after the final flush
        self._lock = threading.Lock()
        self._state = RealtimeState.IDLE
        self._next_index = 0
        self._bytes_queued = 0
        self._transcribed = 0
        self._update_listeners: list[UpdateListener] = []
        self._failure_listeners: list[FailureListener] = []

    @property
    def state(self) -> RealtimeState:
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def transcribed(self) -> int:
        """Chunks whose transcript reached the aggregator."""
        return self._transcribed

    def add_update_listener(self, listener: UpdateListener) -> None:
        self._update_listeners.append(listener)

    def remove_update_listener(self, listener: UpdateListener) -> None:
        if listener in self._update_listeners:
            self._update_listeners.remove(listener)

    def add_failure_listener(self, listener: FailureListener) -> None:
        self._failure_listeners.append(listener)

    def remove_failure_listener(self, listener: FailureListener) -> None:
        if listener in self._failure_listeners:
            self._failure_listeners.remove(listener)

    def add_audio(self, data: bytes) -> None:
        with self._lock:
            if self._state == RealtimeState.DISPOSED:
                raise SessionUnavailableError("realtime session is no longer available")
            if self._state not in (RealtimeState.IDLE, RealtimeState.ACTIVE):
                return
            if not data or self._cancel_event.is_set():
                return
            self._state = RealtimeState.ACTIVE
            self._buffer.append(data)
            self._queue_available(force=False)

    def complete(
        self,
        timeout: float | None = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranscriptionResult:
        """
        Flush the buffered remainder as the final chunk and wait for the
        whole chain. Valid once; a second call raises SessionUnavailableError.

        Raises TranscriptionCancelled when ``cancel_event`` fires, the session
        is disposed, or ``timeout`` elapses first. The session is cancelled
        in every case.
        """
        with self._lock:
            if self._state not in (RealtimeState.IDLE, RealtimeState.ACTIVE):
                raise SessionUnavailableError(f"realtime session is {self._state.value}")
            self._state = RealtimeState.FINALIZING
            self._queue_available(force=True)
            self._pipeline.close()

        t0 = time.perf_counter()
        try:
            self._pipeline.wait(timeout=timeout, cancel_event=cancel_event)
        except TranscriptionCancelled:
            self._cancel_event.set()
            if self.logger is not None:
                self.logger.info("realtime_complete_cancelled", extra={"chunks": self._next_index})
            raise
        finally:
            with self._lock:
                if self._state == RealtimeState.FINALIZING:
                    self._state = RealtimeState.COMPLETED

        result = self._aggregator.snapshot()
        if self.logger is not None:
            self.logger.info(
                "realtime_complete",
                extra={
                    "chunks": self._next_index,
                    "transcribed": self.transcribed,
                    "bytes": self._bytes_queued,
                    "chars": len(result.text),
                    "ms": round((time.perf_counter() - t0) * 1000.0, 2),
                },
            )
        return result

    def dispose(self) -> None:
        with self._lock:
            if self._state == RealtimeState.DISPOSED:
                return
            self._state = RealtimeState.DISPOSED
            self._cancel_event.set()
            self._buffer.clear()
            self._pipeline.close()
        if self.logger is not None:
            self.logger.debug("realtime_disposed")

    def __enter__(self) -> "RealtimeTranscriptionManager":
        return self

    def __exit__(self, *exc) -> None:
        self.dispose()

    def _queue_available(self, force: bool) -> None:
        # caller holds self._lock
        for pcm, is_final in self._buffer.drain(force_flush_remainder=force):
            chunk = AudioChunk(
                pcm=pcm,
                fmt=self.fmt,
                index=self._next_index,
                start_time=self.fmt.duration_of(self._bytes_queued),
                is_final=is_final,
            )
            if not self._pipeline.enqueue(chunk):
                return
            self._next_index += 1
            self._bytes_queued += len(pcm)

    def _process_chunk(self, chunk: AudioChunk) -> None:
        if not chunk.pcm:
            return
        if self._cancel_event.is_set():
            raise TranscriptionCancelled("session cancelled")

        api_key = (self.api_key_provider() or "").strip()
        if not api_key:
            if self.logger is not None:
                self.logger.debug("realtime_chunk_skipped_no_key", extra={"chunk_index": chunk.index})
            return

        t0 = time.perf_counter()
        try:
            wav = encode_wav(chunk.pcm, chunk.fmt)
            result = self.transcriber.transcribe(wav, REALTIME_FILE_NAME, api_key, self._cancel_event)
            if self._cancel_event.is_set():
                raise TranscriptionCancelled("session cancelled during transcription")
            segment_text = result.text or ""
            segment_translation = result.translation or ""
            full_transcript, full_translation = self._aggregator.append_segment(
                segment_text,
                segment_translation,
            )
            self._transcribed += 1
            if self.logger is not None:
                self.logger.info(
                    "realtime_chunk_done",
                    extra={
                        "chunk_index": chunk.index,
                        "is_final": chunk.is_final,
                        "seconds": round(chunk.duration, 2),
                        "chars": len(segment_text),
                        "ms": round((time.perf_counter() - t0) * 1000.0, 2),
                    },
                )
            self._notify_update(
                RealtimeUpdate(
                    segment_text=segment_text,
                    segment_translation=segment_translation,
                    full_transcript=full_transcript,
                    full_translation=full_translation,
                    is_final_segment=chunk.is_final,
                )
            )
        except TranscriptionCancelled:
            raise
        except Exception as e:
            if self.logger is not None:
                self.logger.warning(
                    "realtime_chunk_failed",
                    extra={"chunk_index": chunk.index, "error": str(e)},
                )
            self._notify_failure(TranscriptionFailure(error=e, chunk_index=chunk.index))

    def _notify_update(self, update: RealtimeUpdate) -> None:
        for listener in list(self._update_listeners):
            listener(update)

    def _notify_failure(self, failure: TranscriptionFailure) -> None:
        for listener in list(self._failure_listeners):
            listener(failure)
