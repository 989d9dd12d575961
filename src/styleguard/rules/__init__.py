from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..config import RuleConfig
from ..types import Category, Scope, Severity, SourceFile, SourceLine, Violation


@dataclass(frozen=True)
class Finding:
    line: int | None
    message: str


LineCheck = Callable[[SourceLine, RuleConfig], Iterable[Finding]]
FileCheck = Callable[[SourceFile, RuleConfig], Iterable[Finding]]


@dataclass(frozen=True)
class Rule:
    """One row of the rule table; ``scope`` selects which check field is set."""

    id: str
    category: Category
    scope: Scope
    severity: Severity
    message: str
    line_check: LineCheck | None = None
    file_check: FileCheck | None = None

    def evaluate(self, source: SourceFile, cfg: RuleConfig) -> frozenset[Violation]:
        findings: list[Finding] = []
        if self.scope is Scope.line and self.line_check is not None:
            for line in source.lines:
                findings.extend(self.line_check(line, cfg))
        elif self.scope is Scope.file and self.file_check is not None:
            findings.extend(self.file_check(source, cfg))
        return frozenset(
            Violation(
                file=source.path,
                rule_id=self.id,
                category=self.category,
                severity=self.severity,
                message=f.message,
                line=f.line,
            )
            for f in findings
        )


@dataclass(frozen=True)
class RuleReport:
    name: str
    violations: int


__all__ = ["FileCheck", "Finding", "LineCheck", "Rule", "RuleReport"]
