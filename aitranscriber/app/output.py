from __future__ import annotations

import os
import subprocess
import sys
import webbrowser
from datetime import datetime
from pathlib import Path

from aitranscriber.contracts import TranscriptionResult

NO_TRANSLATION = "[No translation available]"


def render_text(audio_path: str | Path, result: TranscriptionResult, generated: datetime) -> str:
    translation = result.translation if result.translation.strip() else NO_TRANSLATION
    lines = [
        f"Recorded File: {audio_path}",
        f"Generated On: {generated:%Y-%m-%d %H:%M:%S}",
        "-" * 60,
        "English Transcript:",
        result.text,
        "",
        "Persian Translation:",
        translation,
    ]
    return "\n".join(lines) + "\n"


def render_markdown(stem: str, result: TranscriptionResult) -> str:
    translation = result.translation if result.translation.strip() else NO_TRANSLATION
    lines = [
        f"# Session {stem}",
        "",
        "## English Transcript",
        "",
        result.text,
        "",
        "## Persian Translation",
        "",
        translation,
    ]
    return "\n".join(lines) + "\n"


def save_transcript(
    audio_path: str | Path,
    result: TranscriptionResult,
    transcripts_dir: str | Path,
    *,
    now: datetime | None = None,
) -> tuple[Path, Path]:
    """Write <stem>.txt and <stem>.md next to each other; returns both paths."""
    out_dir = Path(transcripts_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(audio_path).stem
    txt_path = out_dir / f"{stem}.txt"
    md_path = out_dir / f"{stem}.md"
    txt_path.write_text(render_text(audio_path, result, now or datetime.now()), encoding="utf-8")
    md_path.write_text(render_markdown(stem, result), encoding="utf-8")
    return txt_path, md_path


def open_folder(path: str | Path) -> bool:
    folder = Path(path)
    folder.mkdir(parents=True, exist_ok=True)
    if hasattr(os, "startfile"):
        os.startfile(str(folder))  # type: ignore[attr-defined]
        return True
    if sys.platform == "darwin":
        subprocess.Popen(["open", str(folder)])
        return True
    return webbrowser.open(folder.as_uri())
