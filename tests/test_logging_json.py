from __future__ import annotations

import json
import logging

import pytest

from styleguard.check_context import current_file_var
from styleguard.logging import _JsonFormatter, _parse_evt_fields, get_logger, init_logging, log_event


def _rec(msg: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="styleguard",
        level=logging.INFO,
        pathname="t",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_event_fields() -> None:
    token = current_file_var.set("src/Main.purs")
    try:
        out = _JsonFormatter().format(_rec("EVT event=file_checked violations=3 rule=no-tabs"))
    finally:
        current_file_var.reset(token)
    data = json.loads(out)
    assert data["message"] == "file_checked"
    assert data["violations"] == 3
    assert data["rule"] == "no-tabs"
    assert data["file"] == "src/Main.purs"
    assert data["level"] == "INFO"


def test_json_formatter_plain_message_has_no_file() -> None:
    data = json.loads(_JsonFormatter().format(_rec("plain text")))
    assert data["message"] == "plain text"
    assert "file" not in data


def test_parse_evt_fields() -> None:
    assert _parse_evt_fields("not an event") == {}
    fields = _parse_evt_fields("EVT event=x files=12 elapsed_ms=abc =skip loose")
    assert fields == {"event": "x", "files": 12, "elapsed_ms": "abc"}


def test_log_event_writes_to_stderr(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("STYLEGUARD_LOG_PRETTY", raising=False)
    monkeypatch.delenv("STYLEGUARD_LOG_PROPAGATE", raising=False)
    logger = get_logger()
    old_level = logger.level
    try:
        init_logging(style="json", level=logging.INFO)
        log_event(
            "file_checked",
            {"file": "a b.purs", "violations": 1, "advisories": 0, "flag": True, "elapsed_ms": False},
        )
        captured = capsys.readouterr()
    finally:
        logger.setLevel(old_level)
        for h in list(logger.handlers):
            logger.removeHandler(h)
    assert captured.out == ""
    data = json.loads(captured.err.strip().splitlines()[-1])
    assert data["message"] == "file_checked"
    assert data["file"] == "a_b.purs"
    assert data["violations"] == 1 and data["advisories"] == 0
    assert "flag" not in data and "elapsed_ms" not in data


def test_init_logging_does_not_stack_handlers() -> None:
    logger = get_logger()
    old_level = logger.level
    try:
        init_logging(style="json", level=logging.WARNING)
        init_logging(style="pretty", level=logging.WARNING)
        streams = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(streams) == 1
    finally:
        logger.setLevel(old_level)
        for h in list(logger.handlers):
            logger.removeHandler(h)
