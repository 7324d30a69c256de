from __future__ import annotations

from typing import Optional

import httpx

from aitranscriber.contracts import TranslationRequest, TranslationResult
from aitranscriber.errors import TranslationError

from .base import Translator

DEFAULT_ENDPOINT = "https://translate.argosopentech.com/translate"


class EndpointTranslator(Translator):
    """Client for a LibreTranslate-compatible ``/translate`` endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        timeout: float = 100.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def name(self) -> str:
        return "endpoint"

    def translate(self, req: TranslationRequest) -> TranslationResult:
        if not (req.text or "").strip():
            return TranslationResult(source_text=req.text, translated_text="", provider=self.name)

        payload = {
            "q": req.text,
            "source": req.source_lang,
            "target": req.target_lang,
            "format": "text",
        }
        try:
            resp = self._client.post(self.endpoint, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise TranslationError(
                f"Translation service returned {e.response.status_code} {e.response.reason_phrase}."
            ) from e
        except httpx.HTTPError as e:
            raise TranslationError(f"Translation request failed: {e}") from e
        except ValueError as e:
            raise TranslationError("Translation service returned malformed JSON.") from e

        translated = data.get("translatedText") if isinstance(data, dict) else None
        return TranslationResult(
            source_text=req.text,
            translated_text=str(translated or ""),
            provider=self.name,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
