from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import ErrorCode
from .parse.facts import ParsedModule
from .parse.resolver import NameResolver


class Category(str, Enum):
    formatting = "formatting"
    naming = "naming"
    imports = "imports"
    exports = "exports"
    case_statements = "case-statements"


class Severity(str, Enum):
    error = "error"
    # Suggestions; never affect the exit status
    advisory = "advisory"


class Scope(str, Enum):
    line = "line"
    file = "file"


@dataclass(frozen=True)
class SourceLine:
    number: int  # zero-based
    text: str  # raw, without terminator
    code: str  # same length as text, literals and comments blanked

    @property
    def visible_length(self) -> int:
        return len(self.text.rstrip())

    @property
    def leading_whitespace(self) -> str:
        return self.text[: len(self.text) - len(self.text.lstrip(" \t"))]

    @property
    def leading_chars(self) -> frozenset[str]:
        return frozenset(self.leading_whitespace)

    @property
    def has_trailing_whitespace(self) -> bool:
        return self.text.endswith((" ", "\t"))

    @property
    def has_code(self) -> bool:
        return bool(self.code.strip())

    @property
    def indent(self) -> int:
        """Column of the first code character (tabs count as one column)."""
        return len(self.code) - len(self.code.lstrip())


@dataclass(frozen=True)
class SourceFile:
    path: Path
    lines: tuple[SourceLine, ...]
    module: ParsedModule
    # Classifies list entries; None falls back to SyntacticResolver
    resolver: NameResolver | None = None


@dataclass(frozen=True)
class Violation:
    file: Path
    rule_id: str
    category: Category
    severity: Severity
    message: str
    line: int | None = None  # zero-based; None for file-scoped findings

    def sort_key(self) -> tuple[str, int, str, str]:
        return (
            self.file.as_posix(),
            -1 if self.line is None else self.line,
            self.rule_id,
            self.message,
        )


@dataclass(frozen=True)
class Diagnostic:
    """File-level report that is not a style finding (unreadable or unparsable)."""

    file: Path
    code: ErrorCode
    message: str
    line: int | None = None
