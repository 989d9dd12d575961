from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from ..types import Category, Scope, Severity
from . import Rule
from .case_layout import check_arrow_alignment, check_branch_indent, check_matcher_body_length
from .indentation import check_indent_step, check_nested_literal
from .lines import check_line_length, check_tabs, check_trailing_whitespace
from .naming import check_acronyms, check_module_plurals, check_type_names, check_value_names
from .ordering import (
    check_export_constructors,
    check_export_order,
    check_import_constructors,
    check_import_group_order,
    check_import_groups,
    check_import_order,
    check_unverified_constructors,
)

_F = Category.formatting
_N = Category.naming
_I = Category.imports
_E = Category.exports
_C = Category.case_statements

RULES: Final[tuple[Rule, ...]] = (
    Rule("max-line-length", _F, Scope.line, Severity.error, "Lines stay within the length limit", line_check=check_line_length),
    Rule("no-tabs", _F, Scope.line, Severity.error, "No tab characters in indentation or code", line_check=check_tabs),
    Rule("trailing-whitespace", _F, Scope.line, Severity.error, "No whitespace before the line end", line_check=check_trailing_whitespace),
    Rule("indent-step", _F, Scope.file, Severity.error, "Indentation grows in multiples of the indent size", file_check=check_indent_step),
    Rule("nested-literal-indent", _F, Scope.file, Severity.error, "Nested literal bodies use the nested indent size", file_check=check_nested_literal),
    Rule("value-name-case", _N, Scope.file, Severity.error, "Functions and values are lowerCamelCase", file_check=check_value_names),
    Rule("type-name-case", _N, Scope.file, Severity.error, "Types, classes and constructors are UpperCamelCase", file_check=check_type_names),
    Rule("acronym-case", _N, Scope.file, Severity.advisory, "Only short acronyms in type names are fully capitalized", file_check=check_acronyms),
    Rule("singular-module-name", _N, Scope.file, Severity.advisory, "Module path segments are singular nouns", file_check=check_module_plurals),
    Rule("import-order", _I, Scope.file, Severity.error, "Import lists are ordered by kind, then alphabetically", file_check=check_import_order),
    Rule("import-constructors", _I, Scope.file, Severity.error, "Imports list all constructors of a type or none", file_check=check_import_constructors),
    Rule("unverified-constructors", _I, Scope.file, Severity.advisory, "Explicit constructor imports that cannot be verified", file_check=check_unverified_constructors),
    Rule("import-groups", _I, Scope.file, Severity.error, "Prelude, third-party and local imports form separate groups", file_check=check_import_groups),
    Rule("import-group-order", _I, Scope.file, Severity.error, "Each import group is sorted by module name", file_check=check_import_group_order),
    Rule("export-order", _E, Scope.file, Severity.error, "Export lists are ordered by kind, then alphabetically", file_check=check_export_order),
    Rule("export-constructors", _E, Scope.file, Severity.error, "Exports list all constructors of a type or none", file_check=check_export_constructors),
    Rule("case-branch-indent", _C, Scope.file, Severity.error, "Case alternatives sit one indent step past the case line", file_check=check_branch_indent),
    Rule("case-arrow-alignment", _C, Scope.file, Severity.advisory, "Align case arrows only when the padding stays small", file_check=check_arrow_alignment),
    Rule("matcher-body-length", _C, Scope.file, Severity.advisory, "Long case alternatives belong in a named local helper", file_check=check_matcher_body_length),
)  # fmt: skip

RULE_IDS: Final[frozenset[str]] = frozenset(r.id for r in RULES)


def select_rules(
    categories: Iterable[Category],
    disabled: Iterable[str] = (),
    rules: Iterable[Rule] = RULES,
) -> tuple[Rule, ...]:
    """Rules of the given categories, in the order the categories are given."""
    skip = frozenset(disabled)
    out: list[Rule] = []
    for cat in dict.fromkeys(categories):
        out.extend(r for r in rules if r.category is cat and r.id not in skip)
    return tuple(out)
