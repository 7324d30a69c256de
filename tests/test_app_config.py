from __future__ import annotations

import json
from pathlib import Path

import pytest

from aitranscriber.app import config as app_config
from aitranscriber.contracts import AudioFormat


def test_load_default_config_contains_expected_keys() -> None:
    cfg = app_config.load_default_config()
    assert cfg["translator"] in {"endpoint", "argos"}
    assert cfg["chunk_sec"] == 5.0
    assert cfg["realtime"] is True
    assert "poll_ms" in cfg


def test_resolve_defaults_uses_explicit_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "explicit.json"
    cfg_path.write_text(json.dumps({"sr": 44100, "model": "gpt-4o-transcribe"}), encoding="utf-8")
    defaults, used = app_config.resolve_defaults(str(cfg_path))
    assert used == cfg_path
    assert defaults["sr"] == 44100
    assert defaults["model"] == "gpt-4o-transcribe"


def test_load_user_config_accepts_bom(tmp_path: Path) -> None:
    cfg_path = tmp_path / "bom.json"
    cfg_path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"chunk_sec": 2.5}).encode("utf-8"))
    loaded, _ = app_config.load_user_config(str(cfg_path))
    assert loaded["chunk_sec"] == 2.5


def test_load_user_config_missing_explicit_file_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="Config file not found"):
        app_config.load_user_config(str(tmp_path / "missing.json"))


def test_ensure_user_config_exists_creates_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    created = app_config.ensure_user_config_exists({"translator": "argos", "sr": 16000})
    assert created == tmp_path / "config.json"
    loaded = json.loads(created.read_text(encoding="utf-8"))
    assert loaded["translator"] == "argos"
    assert loaded["sr"] == 16000


def test_load_user_config_ignores_unknown_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"sr": 48000, "translator": "argos", "unexpected": 1}),
        encoding="utf-8",
    )
    loaded, used = app_config.load_user_config(str(cfg_path))
    assert used == cfg_path
    assert loaded["sr"] == 48000
    assert loaded["translator"] == "argos"
    assert "unexpected" not in loaded


def test_save_user_config_merges_and_filters_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"sr": 16000, "api_key": "old", "debug": False}),
        encoding="utf-8",
    )
    saved = app_config.save_user_config(
        {"api_key": "sk-new", "translation_endpoint": "https://t.example/translate", "junk": "x"},
        config_path=str(cfg_path),
    )
    assert saved == cfg_path
    loaded = json.loads(cfg_path.read_text(encoding="utf-8"))
    assert loaded["sr"] == 16000
    assert loaded["api_key"] == "sk-new"
    assert loaded["translation_endpoint"] == "https://t.example/translate"
    assert "junk" not in loaded


def test_resolve_args_cli_overrides_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(json.dumps({"chunk_sec": 3.0, "realtime": True, "debug": True}), encoding="utf-8")
    args = app_config.resolve_args(["--config", str(cfg_path), "--chunk-sec", "2", "--no-realtime"])
    assert args.chunk_sec == 2.0
    assert args.realtime is False
    assert args.debug is True
    assert args.config == str(cfg_path)


def test_effective_api_key_falls_back_to_env(tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text("{}", encoding="utf-8")
    args = app_config.resolve_args(["--config", str(cfg_path)])
    monkeypatch.setenv("OPENAI_API_KEY", " sk-env ")
    assert app_config.effective_api_key(args) == "sk-env"
    args.api_key = "sk-cli"
    assert app_config.effective_api_key(args) == "sk-cli"


def test_audio_format_and_output_dirs(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(json.dumps({"sr": 22050, "channels": 2}), encoding="utf-8")
    args = app_config.resolve_args(["--config", str(cfg_path)])
    assert app_config.audio_format_from(args) == AudioFormat(sample_rate=22050, channels=2, bits_per_sample=16)

    recordings, transcripts = app_config.output_dirs(args)
    assert recordings == tmp_path / "Recordings"
    assert transcripts == tmp_path / "Transcripts"

    args.transcripts_dir = str(tmp_path / "out")
    assert app_config.output_dirs(args)[1] == tmp_path / "out"
