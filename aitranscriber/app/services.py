from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aitranscriber.asr.openai_responses import OpenAIResponsesTranscriber
from aitranscriber.audio.mic import SoundDeviceRecorder
from aitranscriber.nlp.translator.base import Translator
from aitranscriber.nlp.translator.factory import EndpointStatus, get_translator

from aitranscriber.app.config import audio_format_from


@dataclass(frozen=True)
class AppServices:
    recorder: SoundDeviceRecorder
    transcriber: OpenAIResponsesTranscriber
    translator: Translator | None
    translation_status: EndpointStatus


def build_translation(args: Any) -> tuple[EndpointStatus, Translator | None]:
    return get_translator(str(args.translator), str(args.translation_endpoint or ""))


def build_app_services(args: Any) -> AppServices:
    recorder = SoundDeviceRecorder(fmt=audio_format_from(args), device=args.device)
    transcriber = OpenAIResponsesTranscriber(
        model=str(args.model),
        timeout=float(args.request_timeout_sec),
    )
    status, translator = build_translation(args)
    return AppServices(
        recorder=recorder,
        transcriber=transcriber,
        translator=translator,
        translation_status=status,
    )
