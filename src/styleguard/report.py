from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from pathlib import Path

from .engine import FileResult
from .rules import Rule
from .types import Diagnostic, Severity, Violation


def _location(file: Path, line: int | None) -> str:
    # Zero-based internally, one-based for people and editors
    return file.as_posix() if line is None else f"{file.as_posix()}:{line + 1}"


def format_violation(v: Violation) -> str:
    return f"{_location(v.file, v.line)}: {v.severity.value} [{v.rule_id}] {v.message}"


def format_diagnostic(d: Diagnostic) -> str:
    return f"{_location(d.file, d.line)}: error [{d.code.value}] {d.message}"


def _visible(result: FileResult, show_advisory: bool) -> list[Violation]:
    if show_advisory:
        return list(result.violations)
    return [v for v in result.violations if v.severity is Severity.error]


def render_text(results: Sequence[FileResult], show_advisory: bool = True) -> str:
    lines: list[str] = []
    errors = advisories = 0
    for res in results:
        if res.diagnostic is not None:
            lines.append(format_diagnostic(res.diagnostic))
            errors += 1
        for v in _visible(res, show_advisory):
            lines.append(format_violation(v))
            if v.severity is Severity.error:
                errors += 1
            else:
                advisories += 1
    lines.append(f"{errors} error(s), {advisories} advisory finding(s) in {len(results)} file(s)")
    return "\n".join(lines) + "\n"


def render_json(results: Sequence[FileResult], show_advisory: bool = True) -> str:
    files: list[dict[str, object]] = []
    for res in results:
        entry: dict[str, object] = {
            "path": res.path.as_posix(),
            "violations": [
                {
                    "rule": v.rule_id,
                    "category": v.category.value,
                    "severity": v.severity.value,
                    "line": None if v.line is None else v.line + 1,
                    "message": v.message,
                }
                for v in _visible(res, show_advisory)
            ],
        }
        if res.diagnostic is not None:
            d = res.diagnostic
            entry["diagnostic"] = {
                "code": d.code.value,
                "line": None if d.line is None else d.line + 1,
                "message": d.message,
            }
        files.append(entry)
    return json.dumps({"files": files}, ensure_ascii=False, indent=2) + "\n"


def render_rules(rules: Iterable[Rule]) -> str:
    rows = [(r.id, r.category.value, r.severity.value, r.message) for r in rules]
    w0 = max(len(r[0]) for r in rows)
    w1 = max(len(r[1]) for r in rows)
    w2 = max(len(r[2]) for r in rows)
    return "".join(f"{a:<{w0}}  {b:<{w1}}  {c:<{w2}}  {d}\n" for a, b, c, d in rows)
