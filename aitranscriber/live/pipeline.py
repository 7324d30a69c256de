from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Callable, Optional

from aitranscriber.contracts import AudioChunk
from aitranscriber.errors import TranscriptionCancelled

_WAIT_POLL_SEC = 0.05


class SequentialChunkPipeline:
    """
    Single-consumer FIFO work queue. One worker thread calls ``process`` for
    each chunk in submission order; the next chunk starts only after the
    previous call has returned or raised.
    """

    def __init__(
        self,
        process: Callable[[AudioChunk], None],
        cancel_event: threading.Event,
        *,
        logger: logging.Logger | None = None,
        name: str = "aitranscriber-realtime-worker",
    ) -> None:
        self._process = process
        self._cancel_event = cancel_event
        self._logger = logger
        self._name = name
        self._jobs: "queue.Queue[Optional[AudioChunk]]" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()
        self._drained = False
        self.processed = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_started(self) -> None:
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def enqueue(self, chunk: AudioChunk) -> bool:
        with self._lock:
            if self._closed or self._cancel_event.is_set():
                return False
            self._ensure_started()
            self._jobs.put_nowait(chunk)
        return True

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._ensure_started()
            self._jobs.put_nowait(None)

    def wait(
        self,
        timeout: float | None = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Block until every queued chunk is processed. Call after close()."""
        deadline = None if timeout is None else time.monotonic() + float(timeout)
        while not self._finished.wait(_WAIT_POLL_SEC):
            if cancel_event is not None and cancel_event.is_set():
                raise TranscriptionCancelled("finalization cancelled by caller")
            if self._cancel_event.is_set():
                raise TranscriptionCancelled("session cancelled")
            if deadline is not None and time.monotonic() >= deadline:
                raise TranscriptionCancelled(f"finalization timed out after {timeout}s")
        if not self._drained:
            raise TranscriptionCancelled("session cancelled")

    def _run(self) -> None:
        try:
            while True:
                chunk = self._jobs.get()
                if chunk is None:
                    self._drained = True
                    return
                if self._cancel_event.is_set():
                    if self._logger is not None:
                        self._logger.info("pipeline_cancelled", extra={"pending": self._jobs.qsize()})
                    return
                try:
                    self._process(chunk)
                except TranscriptionCancelled:
                    if self._logger is not None:
                        self._logger.info("pipeline_cancelled", extra={"chunk_index": chunk.index})
                    return
                except Exception:
                    if self._logger is not None:
                        self._logger.exception("pipeline_chunk_error", extra={"chunk_index": chunk.index})
                else:
                    self.processed += 1
        finally:
            self._finished.set()
