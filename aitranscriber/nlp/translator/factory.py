from __future__ import annotations

import os
from enum import Enum
from urllib.parse import urlparse

from .argos import ArgosTranslator
from .base import Translator
from .endpoint import EndpointTranslator


class EndpointStatus(str, Enum):
    DISABLED = "disabled"
    INVALID = "invalid"
    CONFIGURED = "configured"


def resolve_translation_endpoint(endpoint: str | None) -> tuple[EndpointStatus, str | None]:
    text = (endpoint or "").strip()
    if not text:
        return EndpointStatus.DISABLED, None
    parsed = urlparse(text)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return EndpointStatus.INVALID, None
    return EndpointStatus.CONFIGURED, text


def get_translator(
    provider: str | None = None,
    endpoint: str | None = None,
) -> tuple[EndpointStatus, Translator | None]:
    provider = (provider or os.getenv("AITRANSCRIBER_TRANSLATOR", "endpoint")).lower().strip()

    if provider == "argos":
        return EndpointStatus.CONFIGURED, ArgosTranslator()
    if provider == "endpoint":
        status, url = resolve_translation_endpoint(endpoint)
        if url is None:
            return status, None
        return status, EndpointTranslator(url)

    raise ValueError(f"Unknown translator provider: {provider}")
