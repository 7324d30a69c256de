from __future__ import annotations

import base64
import json
import threading
from pathlib import PurePath
from typing import Any, Optional

import httpx

from aitranscriber.contracts import TranscriptionResult
from aitranscriber.errors import TranscriptionCancelled, TranscriptionError

from .base import Transcriber

DEFAULT_MODEL = "gpt-4o-mini-transcribe"
RESPONSES_URL = "https://api.openai.com/v1/responses"
INSTRUCTION_TEXT = (
    "Transcribe the provided audio in English and provide a natural Persian translation. "
    "Return a JSON object that contains the fields 'transcript' and 'translation'."
)
AUDIO_FORMATS = {".wav": "wav", ".mp3": "mp3", ".m4a": "m4a", ".aac": "aac"}
_PREVIEW_CHARS = 500


def audio_format_for(file_name: str) -> str:
    return AUDIO_FORMATS.get(PurePath(file_name).suffix.lower(), "wav")


def build_request_payload(audio_b64: str, audio_format: str, model: str = DEFAULT_MODEL) -> dict[str, Any]:
    if not audio_b64.strip():
        raise ValueError("A valid audio payload is required.")
    if not audio_format.strip():
        raise ValueError("A valid audio format is required.")

    schema = {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "transcript": {
                "type": "string",
                "description": "English transcription of the supplied audio.",
            },
            "translation": {
                "type": "string",
                "description": "Persian translation of the audio content.",
            },
        },
        "required": ["transcript", "translation"],
    }
    return {
        "model": model,
        "input": [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": INSTRUCTION_TEXT},
                    {
                        "type": "input_audio",
                        "audio": {"format": audio_format, "data": audio_b64},
                    },
                ],
            }
        ],
        "temperature": 0,
        "text": {
            "format": {
                "type": "json_schema",
                "json_schema": {"name": "transcription_translation", "schema": schema},
            }
        },
    }


def extract_error_message(body: str) -> str:
    if not body.strip():
        return ""
    try:
        data = json.loads(body)
    except ValueError:
        return body[:_PREVIEW_CHARS]
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            for key in ("message", "code"):
                if error.get(key) is not None:
                    return str(error[key])
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def _is_output_text(item: Any) -> bool:
    return isinstance(item, dict) and str(item.get("type", "")).lower() == "output_text"


def extract_output_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""

    first = next(
        (
            item
            for output in data.get("output") or []
            if isinstance(output, dict)
            for item in output.get("content") or []
            if _is_output_text(item)
        ),
        None,
    )
    text = str(first.get("text") or "") if first is not None else ""
    if text.strip():
        return text

    text = str(data.get("output_text") or "")
    if text.strip():
        return text

    for item in data.get("content") or []:
        if _is_output_text(item) and str(item.get("text") or "").strip():
            return str(item["text"])
    return ""


def parse_response(body: str) -> TranscriptionResult:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise TranscriptionError("OpenAI response was not valid JSON.") from e

    payload = extract_output_text(data)
    if not payload.strip():
        raise TranscriptionError("OpenAI response did not include textual output.")

    try:
        parsed = json.loads(payload)
    except ValueError as e:
        raise TranscriptionError(
            f"OpenAI response returned malformed JSON payload: {payload[:_PREVIEW_CHARS]}"
        ) from e
    if not isinstance(parsed, dict):
        raise TranscriptionError(
            f"OpenAI response returned malformed JSON payload: {payload[:_PREVIEW_CHARS]}"
        )
    return TranscriptionResult(
        text=str(parsed.get("transcript") or ""),
        translation=str(parsed.get("translation") or ""),
    )


class OpenAIResponsesTranscriber(Transcriber):
    """
    Sends a whole audio file to the OpenAI Responses API and asks for a
    structured {transcript, translation} answer.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        url: str = RESPONSES_URL,
        timeout: float = 300.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.model = model
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    @property
    def name(self) -> str:
        return "openai"

    def transcribe(
        self,
        audio: bytes,
        file_name: str,
        api_key: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranscriptionResult:
        if audio is None:
            raise ValueError("Audio data is required.")
        if not (file_name or "").strip():
            raise ValueError("File name is required.")
        if not (api_key or "").strip():
            raise ValueError("OpenAI API key is required.")
        if cancel_event is not None and cancel_event.is_set():
            raise TranscriptionCancelled("transcription cancelled before upload")

        payload = build_request_payload(
            base64.b64encode(audio).decode("ascii"),
            audio_format_for(file_name),
            model=self.model,
        )
        resp = self._client.post(
            self.url,
            json=payload,
            headers={"Authorization": f"Bearer {api_key.strip()}"},
        )
        if cancel_event is not None and cancel_event.is_set():
            raise TranscriptionCancelled("transcription cancelled while waiting for response")

        body = resp.text
        if not resp.is_success:
            detail = extract_error_message(body)
            prefix = f"OpenAI transcription failed ({resp.status_code} {resp.reason_phrase})"
            raise TranscriptionError(f"{prefix}: {detail}" if detail else f"{prefix}.")
        return parse_response(body)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "OpenAIResponsesTranscriber":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
