from __future__ import annotations

from aitranscriber.app.state import RuntimeState, RuntimeStateTracker


def test_state_tracker_happy_path() -> None:
    tracker = RuntimeStateTracker()
    assert tracker.state == RuntimeState.STOPPED
    assert tracker.last_error is None
    assert not tracker.busy

    tracker.set_recording()
    assert tracker.state == RuntimeState.RECORDING
    assert tracker.busy

    tracker.set_processing()
    assert tracker.state == RuntimeState.PROCESSING
    assert tracker.busy

    tracker.set_stopped()
    assert tracker.state == RuntimeState.STOPPED


def test_state_tracker_error_clears_on_restart() -> None:
    tracker = RuntimeStateTracker()
    tracker.set_error("boom")
    assert tracker.state == RuntimeState.ERROR
    assert tracker.last_error == "boom"
    assert not tracker.busy

    tracker.set_recording()
    assert tracker.state == RuntimeState.RECORDING
    assert tracker.last_error is None
