"""Rule-table style checker for layout-sensitive functional sources."""

from __future__ import annotations

from .config import RuleConfig, RunConfig, Settings
from .engine import FileResult, check_paths, check_text, evaluate, exit_status
from .types import Category, Diagnostic, Severity, SourceFile, SourceLine, Violation

__all__ = [
    "Category",
    "Diagnostic",
    "FileResult",
    "RuleConfig",
    "RunConfig",
    "Settings",
    "Severity",
    "SourceFile",
    "SourceLine",
    "Violation",
    "check_paths",
    "check_text",
    "evaluate",
    "exit_status",
]
