from __future__ import annotations

import argparse
import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from aitranscriber.contracts import AudioFormat

APP_NAME = "AITranscriber"

DEFAULTS: dict[str, Any] = {
    "list_devices": False,
    "api_key": "",
    "translation_endpoint": "",
    "translator": "endpoint",
    "model": "gpt-4o-mini-transcribe",
    "request_timeout_sec": 300.0,
    "device": None,
    "sr": 16000,
    "channels": 1,
    "bits_per_sample": 16,
    "realtime": True,
    "chunk_sec": 5.0,
    "recordings_dir": "",
    "transcripts_dir": "",
    "poll_ms": 60,
    "queue_maxsize": 100,
    "max_updates_per_tick": 20,
    "print_console": False,
    "debug": False,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path
    recordings_dir: Path
    transcripts_dir: Path
    log_dir: Path


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir(APP_NAME, APP_NAME))
    return AppPaths(
        config_dir=config_dir,
        config_path=config_dir / "config.json",
        recordings_dir=config_dir / "Recordings",
        transcripts_dir=config_dir / "Transcripts",
        log_dir=config_dir / "logs",
    )


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: payload[key] for key in CONFIG_KEYS if key in payload}


def load_default_config() -> dict[str, Any]:
    return copy.deepcopy(DEFAULTS)


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or load_default_config())
    return paths.config_path


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    defaults = load_default_config()
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists(defaults)
    merged = dict(defaults)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def save_user_config(values: dict[str, Any], config_path: str | None = None) -> Path:
    path = Path(config_path) if config_path else ensure_user_config_exists()
    existing = _known_only(_load_json_dict(path)) if path.exists() else {}
    merged = load_default_config()
    merged.update(existing)
    merged.update(_known_only(values))
    _write_json_dict(path, merged)
    return path


def resolve_defaults(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    return load_user_config(config_path=config_path)


def effective_api_key(args: Any) -> str:
    key = str(getattr(args, "api_key", "") or "").strip()
    return key or os.getenv("OPENAI_API_KEY", "").strip()


def audio_format_from(args: Any) -> AudioFormat:
    return AudioFormat(
        sample_rate=int(args.sr),
        channels=int(args.channels),
        bits_per_sample=int(args.bits_per_sample),
    )


def output_dirs(args: Any) -> tuple[Path, Path]:
    paths = app_paths()
    recordings = Path(args.recordings_dir) if args.recordings_dir else paths.recordings_dir
    transcripts = Path(args.transcripts_dir) if args.transcripts_dir else paths.transcripts_dir
    return recordings, transcripts


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="aitranscriber")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--api-key", default=defaults["api_key"], help="OpenAI API key (or OPENAI_API_KEY)")
    p.add_argument(
        "--translation-endpoint",
        default=defaults["translation_endpoint"],
        help="LibreTranslate-compatible URL; empty disables translation",
    )
    p.add_argument(
        "--translator",
        default=defaults["translator"],
        choices=["endpoint", "argos"],
        help="translation provider: HTTP endpoint or offline Argos models",
    )
    p.add_argument("--model", default=defaults["model"], help="OpenAI transcription model")
    p.add_argument(
        "--request-timeout-sec",
        type=float,
        default=defaults["request_timeout_sec"],
        help="HTTP timeout for transcription requests",
    )
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=defaults["sr"], help="sample rate (Hz)")
    p.add_argument("--channels", type=int, default=defaults["channels"], help="input channels")
    p.add_argument(
        "--bits-per-sample",
        type=int,
        default=defaults["bits_per_sample"],
        choices=[8, 16, 24, 32],
        help="PCM bit depth",
    )
    p.add_argument(
        "--realtime",
        action=argparse.BooleanOptionalAction,
        default=defaults["realtime"],
        help="transcribe incrementally while recording",
    )
    p.add_argument("--chunk-sec", type=float, default=defaults["chunk_sec"], help="realtime chunk length (s)")
    p.add_argument("--recordings-dir", default=defaults["recordings_dir"], help="where recordings are saved")
    p.add_argument("--transcripts-dir", default=defaults["transcripts_dir"], help="where transcripts are saved")
    p.add_argument("--poll-ms", type=int, default=defaults["poll_ms"], help="UI queue poll interval (ms)")
    p.add_argument(
        "--queue-maxsize",
        type=int,
        default=defaults["queue_maxsize"],
        help="max update queue size between worker and UI",
    )
    p.add_argument(
        "--max-updates-per-tick",
        type=int,
        default=defaults["max_updates_per_tick"],
        help="max updates to apply per UI timer tick",
    )
    p.add_argument(
        "--print-console",
        action=argparse.BooleanOptionalAction,
        default=defaults["print_console"],
        help="print realtime updates to console",
    )
    p.add_argument("--debug", action="store_true", help="log per-chunk debug events")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = resolve_defaults(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if defaults.get("list_devices"):
        args.list_devices = True
    if defaults.get("debug"):
        args.debug = True
    return args
