from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class UiEvent:
    kind: str  # "update" | "failure" | "done"
    payload: Any = None


class UpdateBus:
    """
    Thread-safe handoff from worker threads -> UI thread.
    Workers push UiEvent. UI polls (non-blocking).
    """
    def __init__(self, maxsize: int = 100):
        self.q: "queue.Queue[UiEvent]" = queue.Queue(maxsize=maxsize)

    def push(self, event: UiEvent) -> None:
        try:
            self.q.put_nowait(event)
        except queue.Full:
            # drop oldest to keep UI responsive
            try:
                _ = self.q.get_nowait()
            except queue.Empty:
                return
            try:
                self.q.put_nowait(event)
            except queue.Full:
                return

    def pop(self) -> Optional[UiEvent]:
        try:
            return self.q.get_nowait()
        except queue.Empty:
            return None


def drain_bus(bus: UpdateBus, handle: Callable[[UiEvent], None], max_items: int) -> int:
    drained = 0
    while drained < max_items:
        event = bus.pop()
        if event is None:
            break
        handle(event)
        drained += 1
    return drained
