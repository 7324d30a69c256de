from __future__ import annotations

import argparse
import os

from aitranscriber.app.session import process_audio_file
from aitranscriber.asr.openai_responses import OpenAIResponsesTranscriber
from aitranscriber.nlp.translator.factory import get_translator


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("audio_path", help="Path to .wav/.mp3/.m4a/.aac file")
    ap.add_argument("--api-key", default=os.getenv("OPENAI_API_KEY", ""), help="OpenAI API key")
    ap.add_argument("--translator", default="endpoint", help="endpoint|argos")
    ap.add_argument("--translation-endpoint", default="", help="LibreTranslate-compatible URL")
    ap.add_argument("--out", default="transcripts", help="output folder for .txt/.md")
    args = ap.parse_args()

    status, translator = get_translator(args.translator, args.translation_endpoint)
    with OpenAIResponsesTranscriber() as transcriber:
        outcome = process_audio_file(
            args.audio_path,
            api_key=args.api_key,
            transcriber=transcriber,
            translator=translator,
            translation_status=status,
            transcripts_dir=args.out,
        )

    print(f"Status: {outcome.status}")
    if outcome.warning:
        print(f"Warning: {outcome.warning}")
    if outcome.result is None:
        return 1
    print("---- EN ----")
    print(outcome.result.text)
    print("---- FA ----")
    print(outcome.translation_note or outcome.result.translation)
    if outcome.saved:
        print(f"Saved: {outcome.saved[0]} and {outcome.saved[1]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
