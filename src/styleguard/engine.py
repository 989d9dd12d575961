from __future__ import annotations

import os
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .check_context import current_file_var
from .config import RuleConfig, Settings
from .errors import EXIT_OK, EXIT_VIOLATIONS, ErrorCode, ParseError
from .logging import LogEvent, get_logger, log_event
from .rules import RuleReport
from .rules.table import RULES, select_rules
from .source import ResolverFactory, load_source
from .types import Category, Diagnostic, Severity, SourceFile, Violation

IGNORED_PARTS: Final[frozenset[str]] = frozenset(
    {".git", ".spago", ".psci_modules", "bower_components", "node_modules", "output"}
)


@dataclass(frozen=True)
class FileResult:
    path: Path
    violations: tuple[Violation, ...] = ()
    diagnostic: Diagnostic | None = None


def evaluate(
    source: SourceFile, cfg: RuleConfig, categories: Sequence[Category] | None = None
) -> tuple[Violation, ...]:
    """Run every enabled rule against ``source``.

    ``categories`` only changes the evaluation order; the result is the
    same sorted violation list for any order.
    """
    order = list(categories) if categories is not None else list(Category)
    enabled = [c for c in order if c in cfg.enabled_categories]
    found: set[Violation] = set()
    for rule in select_rules(enabled, cfg.disabled_rules):
        found |= rule.evaluate(source, cfg)
    return tuple(sorted(found, key=Violation.sort_key))


def check_text(
    path: Path,
    text: str,
    cfg: RuleConfig,
    resolver_factory: ResolverFactory | None = None,
) -> FileResult:
    try:
        source = load_source(path, text, resolver_factory)
    except ParseError as exc:
        get_logger().info("parse_failed line=%s error=%s", exc.line + 1, exc.message.replace(" ", "_"))
        return FileResult(
            path=path,
            diagnostic=Diagnostic(file=path, code=exc.code, message=exc.message, line=exc.line),
        )
    return FileResult(path=path, violations=evaluate(source, cfg))


def check_file(
    path: Path, cfg: RuleConfig, resolver_factory: ResolverFactory | None = None
) -> FileResult:
    token = current_file_var.set(path.as_posix())
    started = time.perf_counter()
    try:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            get_logger().warning("read_failed error=%s", type(exc).__name__)
            return FileResult(
                path=path,
                diagnostic=Diagnostic(file=path, code=ErrorCode.io_error, message=str(exc)),
            )
        result = check_text(path, text, cfg, resolver_factory)
        errors = sum(1 for v in result.violations if v.severity is Severity.error)
        fields: LogEvent = {
            "file": path.as_posix(),
            "violations": errors,
            "advisories": len(result.violations) - errors,
            "elapsed_ms": int((time.perf_counter() - started) * 1000),
        }
        log_event("file_checked", fields)
        return result
    finally:
        current_file_var.reset(token)


def discover_files(paths: Iterable[Path], extensions: Sequence[str]) -> list[Path]:
    """Expand directories into source files; explicit file paths are kept as given."""
    out: set[Path] = set()
    for root in paths:
        if not root.is_dir():
            out.add(root)
            continue
        for p in root.rglob("*"):
            if p.suffix not in extensions or not p.is_file():
                continue
            if any(part in IGNORED_PARTS for part in p.relative_to(root).parts):
                continue
            out.add(p)
    return sorted(out, key=lambda p: p.as_posix())


def _make_pool(workers: int) -> ThreadPoolExecutor:
    if workers == 0:
        cpu_count = os.cpu_count() or 1
        size = min(8, cpu_count)
    else:
        size = workers
    return ThreadPoolExecutor(max_workers=size, thread_name_prefix="styleguard")


def check_paths(
    paths: Iterable[Path],
    settings: Settings,
    resolver_factory: ResolverFactory | None = None,
) -> list[FileResult]:
    files = discover_files(paths, settings.run.source_extensions)
    fields: LogEvent = {"files": len(files)}
    log_event("check_started", fields)
    with _make_pool(settings.run.workers) as pool:
        results = list(pool.map(lambda p: check_file(p, settings.rules, resolver_factory), files))
    return results


def exit_status(results: Iterable[FileResult]) -> int:
    for r in results:
        if r.diagnostic is not None:
            return EXIT_VIOLATIONS
        if any(v.severity is Severity.error for v in r.violations):
            return EXIT_VIOLATIONS
    return EXIT_OK


def rule_reports(results: Iterable[FileResult]) -> list[RuleReport]:
    counts = dict.fromkeys((r.id for r in RULES), 0)
    for res in results:
        for v in res.violations:
            counts[v.rule_id] = counts.get(v.rule_id, 0) + 1
    return [RuleReport(name=name, violations=n) for name, n in counts.items()]
