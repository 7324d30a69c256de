from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RuntimeState(str, Enum):
    STOPPED = "stopped"
    RECORDING = "recording"
    PROCESSING = "processing"
    ERROR = "error"


@dataclass
class RuntimeStateTracker:
    state: RuntimeState = RuntimeState.STOPPED
    last_error: str | None = None

    @property
    def busy(self) -> bool:
        return self.state in (RuntimeState.RECORDING, RuntimeState.PROCESSING)

    def set_recording(self) -> None:
        self.state = RuntimeState.RECORDING
        self.last_error = None

    def set_processing(self) -> None:
        self.state = RuntimeState.PROCESSING
        self.last_error = None

    def set_stopped(self) -> None:
        self.state = RuntimeState.STOPPED

    def set_error(self, detail: str) -> None:
        self.state = RuntimeState.ERROR
        self.last_error = detail
