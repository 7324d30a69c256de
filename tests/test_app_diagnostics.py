from __future__ import annotations

from aitranscriber.app.diagnostics import hint_for_exception, summarize_exception, translation_error_message
from aitranscriber.errors import TranslationError


def test_summarize_exception_uses_last_meaningful_line() -> None:
    detail = """Traceback (most recent call last):
  File "x.py", line 1, in <module>
    boom()
ModuleNotFoundError: No module named 'sounddevice'
"""
    summary = summarize_exception(detail)
    assert summary == "ModuleNotFoundError: No module named 'sounddevice'"


def test_summarize_exception_truncates() -> None:
    assert summarize_exception("") == "Unknown runtime error."
    summary = summarize_exception("x" * 300, max_len=20)
    assert len(summary) == 20
    assert summary.endswith("...")


def test_hint_for_exception_matches_known_errors() -> None:
    assert "API key" in hint_for_exception("OpenAI transcription failed (401 Unauthorized): Incorrect API key")
    assert "rate limit" in hint_for_exception("OpenAI transcription failed (429 Too Many Requests).")
    assert "missing" in hint_for_exception("No module named 'PyQt6'")
    assert "Microphone" in hint_for_exception("MicError: Failed to open microphone stream.")
    assert hint_for_exception("something else") == "Check logs for full traceback."


def test_translation_error_message_includes_cause_and_hint() -> None:
    try:
        try:
            raise ConnectionError("connection refused")
        except ConnectionError as inner:
            raise TranslationError("Translation request failed.") from inner
    except TranslationError as e:
        message = translation_error_message(e, realtime=True)

    assert message.startswith("Real-time translation unavailable. Translation request failed. (connection refused)")
    assert message.endswith("disable translation in Settings if the issue persists.")


def test_translation_error_message_without_exception() -> None:
    message = translation_error_message(None, realtime=False)
    assert message.startswith("Translation unavailable. An unexpected error occurred.")
    assert message.count("Verify the translation service URL") == 1
