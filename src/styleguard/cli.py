from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

from .config import Settings
from .engine import check_paths, exit_status, rule_reports
from .errors import ConfigError, exit_status_for
from .logging import get_logger, init_logging
from .report import render_json, render_rules, render_text
from .rules.table import RULES
from .types import Category
from .version import get_version


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="styleguard", description="Style guide checks")
    ap.add_argument("paths", nargs="*", type=Path, help="Files or directories to check")
    ap.add_argument("--config", type=Path, default=None, help="TOML config file")
    ap.add_argument("--format", choices=("text", "json"), default="text")
    ap.add_argument(
        "--category",
        action="append",
        choices=[c.value for c in Category],
        help="Only run these rule categories (repeatable)",
    )
    ap.add_argument("--no-advisory", action="store_true", help="Hide advisory findings")
    ap.add_argument("--workers", type=int, default=None, help="Worker threads (0 = auto)")
    ap.add_argument("--list-rules", action="store_true", help="Print the rule table and exit")
    ap.add_argument("--version", action="store_true", help="Print the version and exit")
    ap.add_argument("--verbose", "-v", action="store_true", help="Show per-rule summary")
    return ap


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    out = settings
    if args.category:
        cats = frozenset(Category(c) for c in args.category)
        out = replace(out, rules=replace(out.rules, enabled_categories=cats))
    if args.workers is not None:
        if args.workers < 0:
            raise ConfigError("--workers", f"must be >= 0, got {args.workers}")
        out = replace(out, run=replace(out.run, workers=args.workers))
    return out


def main(argv: Iterable[str] | None = None) -> int:
    args = _parser().parse_args(list(argv) if argv is not None else None)
    init_logging(level=logging.INFO if args.verbose else None)
    log = get_logger()

    if args.version:
        info = get_version()
        sys.stdout.write(f"{info.name} {info.version}\n")
        return 0
    if args.list_rules:
        sys.stdout.write(render_rules(RULES))
        return 0

    try:
        settings = _apply_overrides(Settings.load(args.config), args)
    except ConfigError as exc:
        log.error("config_invalid key=%s", exc.key)
        sys.stderr.write(f"styleguard: configuration error: {exc.message}\n")
        return exit_status_for(exc.code)

    paths = args.paths or [Path(".")]
    results = check_paths(paths, settings)
    show_advisory = not args.no_advisory
    if args.format == "json":
        sys.stdout.write(render_json(results, show_advisory))
    else:
        sys.stdout.write(render_text(results, show_advisory))

    if args.verbose:
        log.info("Style rule summary:")
        for rep in rule_reports(results):
            log.info("style_rule name=%s violations=%d", rep.name, rep.violations)
    return exit_status(results)
