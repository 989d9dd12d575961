from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Final

from ..config import RuleConfig
from ..parse.facts import BindingKind
from ..types import SourceFile
from . import Finding

_LOWER_CAMEL: Final[re.Pattern[str]] = re.compile(r"^_?[a-z][a-zA-Z0-9]*'*$")
_UPPER_CAMEL: Final[re.Pattern[str]] = re.compile(r"^[A-Z][a-zA-Z0-9]*'*$")
_CAPITAL_RUN: Final[re.Pattern[str]] = re.compile(r"[A-Z]{2,}")
_SINGULAR_ENDINGS: Final[tuple[str, ...]] = ("ss", "us", "is")
_TYPE_KINDS: Final[frozenset[BindingKind]] = frozenset(
    {BindingKind.type, BindingKind.constructor, BindingKind.class_}
)


def acronyms(name: str) -> list[str]:
    """Fully capitalized runs of two or more letters.

    In ``HTTPServer`` the final capital starts the next word, so the
    acronym is ``HTTP``.
    """
    out: list[str] = []
    for m in _CAPITAL_RUN.finditer(name):
        run = m.group(0)
        if m.end() < len(name) and name[m.end()].islower():
            run = run[:-1]
        if len(run) >= 2:
            out.append(run)
    return out


def is_plural_candidate(segment: str) -> bool:
    if len(segment) < 3 or not segment.endswith("s") or segment.isupper():
        return False
    return not segment.endswith(_SINGULAR_ENDINGS)


def check_value_names(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for b in source.module.bindings:
        if b.kind is BindingKind.value and not _LOWER_CAMEL.match(b.name):
            yield Finding(b.line, f"'{b.name}' should be lowerCamelCase")


def check_type_names(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for b in source.module.bindings:
        if b.kind in _TYPE_KINDS and not _UPPER_CAMEL.match(b.name):
            yield Finding(b.line, f"{b.kind.value} '{b.name}' should be UpperCamelCase")


def check_acronyms(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for b in source.module.bindings:
        for acronym in acronyms(b.name):
            if b.kind is BindingKind.value:
                yield Finding(
                    b.line,
                    f"acronym '{acronym}' in '{b.name}' should not be fully capitalized "
                    "in a function name",
                )
            elif len(acronym) > 3:
                yield Finding(
                    b.line,
                    f"acronym '{acronym}' in '{b.name}' is longer than 3 letters; "
                    "capitalize only its first letter",
                )


def check_module_plurals(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    name = source.module.module_name
    if name is None:
        return
    for segment in name.split("."):
        if is_plural_candidate(segment):
            yield Finding(
                source.module.module_line,
                f"module segment '{segment}' looks plural; prefer a singular noun",
            )
