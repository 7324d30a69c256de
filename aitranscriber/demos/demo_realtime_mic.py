from __future__ import annotations

import argparse
import os
import time

from aitranscriber.asr.openai_responses import OpenAIResponsesTranscriber
from aitranscriber.audio.mic import SoundDeviceRecorder
from aitranscriber.contracts import AudioFormat, RealtimeUpdate, TranscriptionFailure
from aitranscriber.live.realtime import RealtimeTranscriptionManager


def main() -> int:
    p = argparse.ArgumentParser()
    p.add_argument("--device", type=int, default=None, help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=16000, help="sample rate (Hz)")
    p.add_argument("--chunk-sec", type=float, default=5.0, help="realtime chunk length (s)")
    p.add_argument("--seconds", type=float, default=30.0, help="recording duration")
    p.add_argument("--api-key", default=os.getenv("OPENAI_API_KEY", ""), help="OpenAI API key")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    args = p.parse_args()

    if args.list_devices:
        print(SoundDeviceRecorder.list_devices())
        return 0

    fmt = AudioFormat(sample_rate=args.sr, channels=1)
    recorder = SoundDeviceRecorder(fmt=fmt, device=args.device)

    def on_update(update: RealtimeUpdate) -> None:
        tag = "final" if update.is_final_segment else "partial"
        print(f"[{tag}] EN: {update.segment_text}")
        if update.segment_translation:
            print(f"[{tag}] FA: {update.segment_translation}")

    def on_failure(failure: TranscriptionFailure) -> None:
        print(f"[chunk {failure.chunk_index}] failed: {failure.error}")

    with OpenAIResponsesTranscriber() as transcriber, RealtimeTranscriptionManager(
        transcriber,
        lambda: args.api_key,
        fmt,
        chunk_seconds=args.chunk_sec,
    ) as manager:
        manager.add_update_listener(on_update)
        manager.add_failure_listener(on_failure)
        recorder.add_sink(manager.add_audio)

        print(f"Recording {args.seconds:.1f}s (Ctrl+C to stop early)...")
        recorder.start()
        try:
            time.sleep(args.seconds)
        except KeyboardInterrupt:
            pass
        finally:
            recorder.stop()

        result = manager.complete(timeout=120.0)

    print("---- EN (full) ----")
    print(result.text)
    print("---- FA (full) ----")
    print(result.translation)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
