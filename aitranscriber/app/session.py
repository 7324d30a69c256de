from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from aitranscriber.app.diagnostics import translation_error_message
from aitranscriber.app.output import save_transcript
from aitranscriber.asr.base import Transcriber
from aitranscriber.contracts import TranscriptionResult, TranslationRequest
from aitranscriber.errors import TranscriptionCancelled
from aitranscriber.nlp.translator.base import Translator
from aitranscriber.nlp.translator.factory import EndpointStatus

TRANSLATION_DISABLED_MESSAGE = (
    "Translation disabled. Provide a translation service URL in Settings to enable it."
)
TRANSLATION_INVALID_MESSAGE = "Translation disabled until a valid service URL is saved."
NO_TRANSLATION_RETURNED = "[No translation returned]"

FILE_READY_MAX_ATTEMPTS = 10
FILE_READY_RETRY_SEC = 0.2
MIN_AUDIO_BYTES = 100

@dataclass(frozen=True)
class FileJobOutcome:
    status: str
    result: TranscriptionResult | None = None
    # text for the translation pane when there is no translation to show
    translation_note: str = ""
    saved: tuple[Path, Path] | None = None
    warning: str | None = None

def disabled_translation_note(status: EndpointStatus) -> str:
    if status == EndpointStatus.INVALID:
        return TRANSLATION_INVALID_MESSAGE
    return TRANSLATION_DISABLED_MESSAGE

def wait_for_file_ready(
    path: str | Path,
    cancel_event: Optional[threading.Event] = None,
    *,
    attempts: int = FILE_READY_MAX_ATTEMPTS,
    delay_sec: float = FILE_READY_RETRY_SEC,
) -> bool:
    """Retry opening the file until the writer (or a virus scanner) lets go."""
    for _ in range(attempts):
        if cancel_event is not None and cancel_event.is_set():
            raise TranscriptionCancelled("cancelled while waiting for audio file")
        try:
            with Path(path).open("rb"):
                return True
        except OSError:
            pass
        if cancel_event is not None:
            if cancel_event.wait(delay_sec):
                raise TranscriptionCancelled("cancelled while waiting for audio file")
        else:
            time.sleep(delay_sec)
    return False

def apply_translation(
    result: TranscriptionResult,
    translator: Translator | None,
    status: EndpointStatus,
    *,
    realtime: bool,
    logger: logging.Logger | None = None,
) -> tuple[TranscriptionResult, str, str, str | None]:
    """
    Returns (result, translation_note, status_text, warning).

    With a translator configured the transcript is translated through it.
    Without one, a translation already returned by the provider is kept.
    """
    if translator is None:
        if result.translation.strip():
            return result, "", "Completed.", None
        suffix = "invalid translation URL" if status == EndpointStatus.INVALID else None
        status_text = (
            f"Completed (translation disabled: {suffix})." if suffix else "Completed (translation disabled)."
        )
        return result, disabled_translation_note(status), status_text, None

    if realtime and result.translation.strip():
        return result, "", "Completed.", None

    try:
        res = translator.translate(TranslationRequest(text=result.text))
    except Exception as e:
        if logger is not None:
            logger.warning("translation_failed", extra={"provider": translator.name, "error": str(e)})
        return (
            replace(result, translation=""),
            "Translation failed.",
            "Completed (translation unavailable).",
            translation_error_message(e, realtime=realtime),
        )

    translated = (res.translated_text or "").strip()
    if not translated:
        return replace(result, translation=""), NO_TRANSLATION_RETURNED, "Completed (translation unavailable).", None
    return replace(result, translation=translated), "", "Completed.", None

def process_audio_file(
    audio_path: str | Path,
    *,
    api_key: str,
    transcriber: Transcriber,
    translator: Translator | None,
    translation_status: EndpointStatus,
    transcripts_dir: str | Path,
    cancel_event: Optional[threading.Event] = None,
    logger: logging.Logger | None = None,
) -> FileJobOutcome:
    """Whole-file mode: transcribe, translate, and save one audio file."""
    path = Path(audio_path) if str(audio_path or "").strip() else None
    if path is None or not path.exists():
        return FileJobOutcome(status="No audio file found.")

    if not (api_key or "").strip():
        return FileJobOutcome(
            status="Recording saved. Provide an API key to transcribe.",
            warning=(
                "Recording saved successfully. Enter your OpenAI API key and click "
                '"Transcribe Audio File..." to process the recording.'
            ),
        )

    t0 = time.perf_counter()
    try:
        if not wait_for_file_ready(path, cancel_event):
            return FileJobOutcome(
                status="Audio file unavailable.",
                warning="The recorded audio file is not accessible yet. Please try recording again.",
            )
        if path.stat().st_size < MIN_AUDIO_BYTES:
            return FileJobOutcome(
                status="Audio file is empty.",
                warning=(
                    "The recorded audio appears to be empty. "
                    "Please ensure your microphone is working and try again."
                ),
            )

        result = transcriber.transcribe_file(path, api_key, cancel_event)
        if logger is not None:
            logger.info(
                "file_transcribed",
                extra={
                    "path": str(path),
                    "chars": len(result.text),
                    "ms": round((time.perf_counter() - t0) * 1000.0, 2),
                },
            )
        result, note, status_text, warning = apply_translation(
            result,
            translator,
            translation_status,
            realtime=False,
            logger=logger,
        )
        saved = save_transcript(path, result, transcripts_dir)
    except TranscriptionCancelled:
        if logger is not None:
            logger.info("file_job_cancelled", extra={"path": str(path)})
        return FileJobOutcome(status="Operation cancelled.")
    except Exception as e:
        if logger is not None:
            logger.exception("file_job_failed", extra={"path": str(path)})
        return FileJobOutcome(status="Failed.", warning=f"Processing failed: {e}")

    return FileJobOutcome(
        status=status_text,
        result=result,
        translation_note=note,
        saved=saved,
        warning=warning,
    )

def finalize_realtime_session(
    audio_path: str | Path,
    result: TranscriptionResult,
    *,
    translator: Translator | None,
    translation_status: EndpointStatus,
    transcripts_dir: str | Path,
    logger: logging.Logger | None = None,
) -> FileJobOutcome:
    """Realtime mode ending: fill in a missing translation and save outputs."""
    result, note, status_text, warning = apply_translation(
        result,
        translator,
        translation_status,
        realtime=True,
        logger=logger,
    )
    try:
        saved = save_transcript(audio_path, result, transcripts_dir)
    except OSError as e:
        if logger is not None:
            logger.exception("save_transcript_failed", extra={"path": str(audio_path)})
        return FileJobOutcome(
            status=status_text,
            result=result,
            translation_note=note,
            warning=f"Unable to save transcript: {e}",
        )
    return FileJobOutcome(status=status_text, result=result, translation_note=note, saved=saved, warning=warning)
