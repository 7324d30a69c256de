from __future__ import annotations

_VERIFY_HINT = (
    "Verify the translation service URL or disable translation in Settings if the issue persists."
)


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    text = str(detail or "").strip()
    if not text:
        return "Unknown runtime error."
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    for ln in reversed(lines):
        if ln.startswith(("File ", "^", "Traceback ")):
            continue
        out = ln
        break
    else:
        out = lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "401" in s or "incorrect api key" in s or "invalid_api_key" in s:
        return "OpenAI rejected the API key. Check the key in Settings."
    if "429" in s or "rate limit" in s:
        return "OpenAI rate limit reached. Wait a moment and try again."
    if "no module named" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "microphone" in s or ("sounddevice" in s and "failed" in s):
        return "Microphone init failed. Check input device selection and app mic permissions."
    return "Check logs for full traceback."


def _exception_detail(exc: BaseException | None) -> str:
    if exc is None:
        return "An unexpected error occurred."
    message = str(exc).strip()
    cause = exc.__cause__ or exc.__context__
    inner = str(cause).strip() if cause is not None else ""
    if inner and inner != message:
        message = f"{message} ({inner})" if message else inner
    return message or "An unexpected error occurred."


def translation_error_message(exc: BaseException | None, *, realtime: bool) -> str:
    prefix = "Real-time translation unavailable." if realtime else "Translation unavailable."
    detail = _exception_detail(exc)
    message = f"{prefix} {detail}" if detail else prefix
    if "verify the translation service url" not in detail.lower():
        message += " " + _VERIFY_HINT
    return message.strip()
