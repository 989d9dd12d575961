from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from styleguard.config import RuleConfig, RunConfig, Settings
from styleguard.engine import (
    FileResult,
    _make_pool,
    check_file,
    check_paths,
    check_text,
    discover_files,
    evaluate,
    exit_status,
    rule_reports,
)
from styleguard.errors import ErrorCode
from styleguard.logging import get_logger, init_logging
from styleguard.rules.table import RULE_IDS
from styleguard.source import load_source
from styleguard.types import Category, Diagnostic, Severity

_MESSY = """module App.Strings
  ( parse_it
  , Alpha
  ) where

import Data.Maybe (Maybe(Just))
import Prelude

parse_it x = case x of
    Just y -> y
    Nothing -> 0\t
"""


def test_category_order_does_not_change_result() -> None:
    source = load_source(Path("App/Strings.purs"), _MESSY)
    cfg = RuleConfig()
    forward = evaluate(source, cfg)
    backward = evaluate(source, cfg, list(reversed(list(Category))))
    shuffled = evaluate(
        source,
        cfg,
        [Category.imports, Category.case_statements, Category.formatting, Category.exports, Category.naming],
    )
    assert forward == backward == shuffled
    assert len(forward) > 5


def test_evaluation_is_repeatable() -> None:
    first = check_text(Path("A.purs"), _MESSY, RuleConfig())
    second = check_text(Path("A.purs"), _MESSY, RuleConfig())
    assert first == second


def test_violations_sorted_by_line_then_rule() -> None:
    res = check_text(Path("A.purs"), _MESSY, RuleConfig())
    keys = [v.sort_key() for v in res.violations]
    assert keys == sorted(keys)


def test_enabled_categories_and_disabled_rules() -> None:
    cfg = RuleConfig(enabled_categories=frozenset({Category.naming}))
    res = check_text(Path("A.purs"), _MESSY, cfg)
    assert res.violations
    assert {v.category for v in res.violations} == {Category.naming}

    cfg = RuleConfig(disabled_rules=frozenset({"no-tabs", "trailing-whitespace"}))
    ids = {v.rule_id for v in check_text(Path("A.purs"), _MESSY, cfg).violations}
    assert "no-tabs" not in ids and "trailing-whitespace" not in ids
    assert "value-name-case" in ids


def test_parse_failure_becomes_diagnostic() -> None:
    res = check_text(Path("Bad.purs"), 'x = "oops\n', RuleConfig())
    assert res.violations == ()
    assert res.diagnostic is not None
    assert res.diagnostic.code is ErrorCode.parse_failed
    assert res.diagnostic.line == 0


def test_unreadable_files_become_diagnostics(tmp_path: Path) -> None:
    missing = check_file(tmp_path / "Missing.purs", RuleConfig())
    assert missing.diagnostic is not None
    assert missing.diagnostic.code is ErrorCode.io_error

    binary = tmp_path / "Binary.purs"
    binary.write_bytes(b"x = \xff\xfe\n")
    res = check_file(binary, RuleConfig())
    assert res.diagnostic is not None
    assert res.diagnostic.code is ErrorCode.io_error


def test_discover_files(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "output").mkdir()
    for rel in ("B.purs", "sub/A.purs", "node_modules/C.purs", "output/D.purs", "notes.txt"):
        (tmp_path / rel).write_text("x = 1\n", encoding="utf-8")
    found = discover_files([tmp_path], (".purs",))
    assert found == [tmp_path / "B.purs", tmp_path / "sub" / "A.purs"]
    explicit = discover_files([tmp_path / "notes.txt", tmp_path / "sub"], (".purs",))
    assert explicit == [tmp_path / "notes.txt", tmp_path / "sub" / "A.purs"]


@pytest.mark.parametrize("workers", [0, 1, 3])
def test_check_paths_results_in_path_order(tmp_path: Path, workers: int) -> None:
    for name in ("C.purs", "A.purs", "B.purs"):
        (tmp_path / name).write_text("x = 1 \n", encoding="utf-8")
    settings = Settings(rules=RuleConfig(), run=RunConfig(workers=workers))
    results = check_paths([tmp_path], settings)
    assert [r.path.name for r in results] == ["A.purs", "B.purs", "C.purs"]
    assert all([v.rule_id for v in r.violations] == ["trailing-whitespace"] for r in results)


def test_make_pool_sizes() -> None:
    with _make_pool(2) as pool:
        assert pool._max_workers == 2
    with _make_pool(0) as pool:
        assert 1 <= pool._max_workers <= 8


def test_exit_status() -> None:
    clean = check_text(Path("A.purs"), "x = 1\n", RuleConfig())
    advisory_only = check_text(Path("Data/Strings.purs"), "module Data.Strings where\n", RuleConfig())
    failing = check_text(Path("B.purs"), "x = 1 \n", RuleConfig())
    broken = FileResult(
        path=Path("C.purs"),
        diagnostic=Diagnostic(file=Path("C.purs"), code=ErrorCode.io_error, message="gone"),
    )
    assert all(v.severity is Severity.advisory for v in advisory_only.violations)
    assert exit_status([]) == 0
    assert exit_status([clean, advisory_only]) == 0
    assert exit_status([clean, failing]) == 1
    assert exit_status([broken]) == 1


def test_rule_reports_cover_every_rule() -> None:
    failing = check_text(Path("B.purs"), "x = 1 \ny = 2 \n", RuleConfig())
    reports = {r.name: r.violations for r in rule_reports([failing])}
    assert set(reports) == RULE_IDS
    assert reports["trailing-whitespace"] == 2
    assert reports["no-tabs"] == 0


def test_check_file_logs_typed_event(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "A.purs"
    p.write_text("x = 1 \n", encoding="utf-8")
    logger = get_logger()
    old_level = logger.level
    try:
        init_logging(style="json", level=logging.INFO)
        check_file(p, RuleConfig())
        err = capsys.readouterr().err
    finally:
        logger.setLevel(old_level)
        for h in list(logger.handlers):
            logger.removeHandler(h)
    event = json.loads(err.strip().splitlines()[-1])
    assert event["message"] == "file_checked"
    assert event["file"] == p.as_posix()
    assert event["violations"] == 1 and event["advisories"] == 0
    assert isinstance(event["elapsed_ms"], int)
