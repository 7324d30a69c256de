from __future__ import annotations

import json
import logging
from pathlib import Path

from aitranscriber.app import config as app_config
from aitranscriber.app.logging_setup import setup_app_logger


def test_setup_app_logger_writes_json_line(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    logger, log_dir, log_path = setup_app_logger("aitranscriber.test")

    logger.info("realtime_chunk_done", extra={"chunk_index": 3, "path": Path("a.wav")})
    logger.debug("hidden")
    for h in logger.handlers:
        h.flush()

    assert log_dir == tmp_path / "logs"
    assert log_path.exists()
    lines = [ln for ln in log_path.read_text(encoding="utf-8").splitlines() if ln.strip()]
    assert len(lines) == 1
    payload = json.loads(lines[-1])
    assert payload["message"] == "realtime_chunk_done"
    assert payload["chunk_index"] == 3
    assert payload["path"] == "a.wav"
    assert payload["level"] == "INFO"
    assert payload["thread"]

    for h in logger.handlers:
        h.close()
    logging.getLogger("aitranscriber.test").handlers.clear()


def test_setup_app_logger_debug_level(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    logger, _, log_path = setup_app_logger("aitranscriber.test.debug", debug=True)
    try:
        raise ValueError("bad chunk")
    except ValueError:
        logger.exception("pipeline_chunk_error", extra={"chunk_index": 1})
    logger.debug("realtime_chunk_skipped_no_key")
    for h in logger.handlers:
        h.flush()

    lines = [json.loads(ln) for ln in log_path.read_text(encoding="utf-8").splitlines() if ln.strip()]
    assert [ln["message"] for ln in lines] == ["pipeline_chunk_error", "realtime_chunk_skipped_no_key"]
    assert "ValueError: bad chunk" in lines[0]["exc_info"]

    for h in logger.handlers:
        h.close()
    logging.getLogger("aitranscriber.test.debug").handlers.clear()
