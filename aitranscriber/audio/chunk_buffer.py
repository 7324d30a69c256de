from __future__ import annotations

import threading
from typing import Iterator, Optional

from aitranscriber.contracts import AudioFormat

DEFAULT_CHUNK_SECONDS = 5.0


def chunk_size_for(fmt: AudioFormat, chunk_seconds: float = DEFAULT_CHUNK_SECONDS) -> int:
    """Bytes per chunk, rounded down to whole frames and never below one frame."""
    if chunk_seconds <= 0:
        raise ValueError("chunk_seconds must be > 0")
    frames = int(fmt.sample_rate * float(chunk_seconds))
    return max(frames * fmt.block_align, fmt.block_align)


class AudioChunkBuffer:
    """
    Append-only PCM byte store shared between the capture thread and the
    chunk-draining logic. Draining always removes an exact-length prefix.
    """

    def __init__(self, chunk_size: int, cancel_event: Optional[threading.Event] = None) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.chunk_size = int(chunk_size)
        self._cancel_event = cancel_event
        self._buf = bytearray()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buf)

    def append(self, data: bytes) -> int:
        if not data:
            return 0
        if self._cancel_event is not None and self._cancel_event.is_set():
            return 0
        with self._lock:
            self._buf.extend(data)
        return len(data)

    def try_take_chunk(self, force_flush_remainder: bool = False) -> tuple[bytes, bool] | None:
        """
        Return (pcm, is_final) or None.

        A full chunk is final only when the flush is forced and it empties
        the buffer; a forced flush returns the short remainder as final.
        """
        with self._lock:
            size = len(self._buf)
            if size >= self.chunk_size:
                chunk = bytes(self._buf[: self.chunk_size])
                del self._buf[: self.chunk_size]
                return chunk, bool(force_flush_remainder and not self._buf)
            if force_flush_remainder and size > 0:
                chunk = bytes(self._buf)
                self._buf.clear()
                return chunk, True
            return None

    def drain(self, force_flush_remainder: bool = False) -> Iterator[tuple[bytes, bool]]:
        while True:
            taken = self.try_take_chunk(force_flush_remainder)
            if taken is None:
                return
            yield taken

    def clear(self) -> None:
        with self._lock:
            self._buf.clear()
