from __future__ import annotations

from aitranscriber.contracts import TranscriptionResult
from aitranscriber.live.aggregator import ResultAggregator


def test_segments_are_joined_with_single_space() -> None:
    agg = ResultAggregator()
    assert agg.append_segment("Hello", "سلام") == ("Hello", "سلام")
    assert agg.append_segment("  world  ", "") == ("Hello world", "سلام")
    assert agg.append_segment("again", "دنیا") == ("Hello world again", "سلام دنیا")


def test_blank_segments_leave_text_unchanged() -> None:
    agg = ResultAggregator()
    agg.append_segment("one", "")
    assert agg.append_segment("   ", "\n") == ("one", "")
    assert agg.append_segment("", "") == ("one", "")


def test_snapshot_is_trimmed() -> None:
    agg = ResultAggregator()
    assert agg.snapshot() == TranscriptionResult(text="", translation="")
    agg.append_segment(" a ", " b ")
    agg.append_segment("c", "d")
    assert agg.snapshot() == TranscriptionResult(text="a c", translation="b d")


def test_first_text_after_blank_segment_has_no_leading_space() -> None:
    agg = ResultAggregator()
    assert agg.append_segment("", "") == ("", "")
    assert agg.append_segment("world", "دنیا") == ("world", "دنیا")
