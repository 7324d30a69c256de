from __future__ import annotations
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from aitranscriber.contracts import TranscriptionResult

class Transcriber(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def transcribe(
        self,
        audio: bytes,
        file_name: str,
        api_key: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranscriptionResult:
        """One round trip: audio file bytes in, transcript (and maybe translation) out."""
        raise NotImplementedError

    def transcribe_file(
        self,
        path: str | Path,
        api_key: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranscriptionResult:
        p = Path(path)
        if not str(path).strip():
            raise ValueError("Audio path is required.")
        return self.transcribe(p.read_bytes(), p.name, api_key, cancel_event)
