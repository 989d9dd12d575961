from __future__ import annotations

from collections.abc import Iterator, Sequence
from itertools import pairwise
from typing import Final

from ..config import RuleConfig
from ..parse.facts import ENTRY_RANK, EntryKind, EntryList, ImportDecl, ListEntry
from ..parse.resolver import NameResolver, SyntacticResolver
from ..types import SourceFile
from . import Finding

_PRELUDE: Final[str] = "Prelude"
_GROUP_NAMES: Final[tuple[str, ...]] = ("prelude", "third-party", "local")


def _resolver(source: SourceFile) -> NameResolver:
    return source.resolver if source.resolver is not None else SyntacticResolver(source.module)


def _alpha(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def _order_finding(listing: EntryList, resolver: NameResolver, what: str) -> Finding | None:
    keyed: list[tuple[tuple[int, str, str], EntryKind, ListEntry]] = []
    for e in listing.entries:
        kind = resolver.classify(e)
        keyed.append(((ENTRY_RANK[kind], *_alpha(e.name)), kind, e))
    for (k1, kind1, e1), (k2, kind2, e2) in pairwise(keyed):
        if k1 <= k2:
            continue
        if kind1 is kind2:
            reason = f"{kind2.value} entries are sorted alphabetically"
        else:
            reason = f"{kind2.value} entries go before {kind1.value} entries"
        return Finding(e2.line, f"{what} list out of order at ({e1.text}, {e2.text}): {reason}")
    return None


def _constructor_findings(
    listing: EntryList, resolver: NameResolver, module: str | None
) -> Iterator[tuple[bool, Finding]]:
    """Yields ``(verified, finding)`` for every explicit constructor sub-list that is not complete."""
    for e in listing.entries:
        if resolver.classify(e) is not EntryKind.type or not e.constructors:
            continue
        known = resolver.constructors_of(module, e.name)
        if known is None:
            yield False, Finding(
                e.line,
                f"cannot verify that {e.text} lists every constructor; use {e.name}(..) or {e.name}",
            )
        elif set(e.constructors) != set(known):
            missing = ", ".join(c for c in known if c not in e.constructors)
            yield True, Finding(
                e.line,
                f"{e.text} lists only some constructors (missing {missing}); "
                f"use {e.name}(..) or {e.name}",
            )


def check_import_order(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    resolver = _resolver(source)
    for decl in source.module.imports:
        if decl.listing is None:
            continue
        found = _order_finding(decl.listing, resolver, "import")
        if found is not None:
            yield found


def check_export_order(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    exports = source.module.exports
    if exports is None:
        return
    found = _order_finding(exports, _resolver(source), "export")
    if found is not None:
        yield found


def check_import_constructors(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    resolver = _resolver(source)
    for decl in source.module.imports:
        if decl.listing is None or decl.listing.hiding:
            continue
        for verified, finding in _constructor_findings(decl.listing, resolver, decl.module):
            if verified:
                yield finding


def check_unverified_constructors(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    resolver = _resolver(source)
    for decl in source.module.imports:
        if decl.listing is None or decl.listing.hiding:
            continue
        for verified, finding in _constructor_findings(decl.listing, resolver, decl.module):
            if not verified:
                yield finding


def check_export_constructors(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    exports = source.module.exports
    if exports is None:
        return
    for verified, finding in _constructor_findings(exports, _resolver(source), None):
        # Re-exported types declared elsewhere cannot be checked
        if verified:
            yield finding


def _local_prefixes(source: SourceFile, cfg: RuleConfig) -> tuple[str, ...]:
    if cfg.local_module_prefixes:
        return cfg.local_module_prefixes
    name = source.module.module_name
    return (name.split(".")[0],) if name else ()


def import_group(decl: ImportDecl, local_prefixes: Sequence[str]) -> int:
    if decl.module == _PRELUDE:
        return 0
    for prefix in local_prefixes:
        if decl.module == prefix or decl.module.startswith(prefix + "."):
            return 2
    return 1


def _blank_lines_between(source: SourceFile, first: ImportDecl, second: ImportDecl) -> int:
    between = source.lines[first.end_line + 1 : second.line]
    return sum(1 for line in between if not line.text.strip())


def check_import_groups(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    prefixes = _local_prefixes(source, cfg)
    for first, second in pairwise(source.module.imports):
        g1 = import_group(first, prefixes)
        g2 = import_group(second, prefixes)
        blanks = _blank_lines_between(source, first, second)
        if g2 < g1:
            yield Finding(
                second.line,
                f"{_GROUP_NAMES[g2]} import {second.module} comes after "
                f"{_GROUP_NAMES[g1]} import {first.module}",
            )
        elif g2 == g1 and blanks:
            yield Finding(second.line, f"blank line inside the {_GROUP_NAMES[g2]} import group")
        elif g2 > g1 and blanks != 1:
            yield Finding(
                second.line,
                f"separate the {_GROUP_NAMES[g1]} and {_GROUP_NAMES[g2]} import groups "
                f"with exactly one blank line (found {blanks})",
            )


def check_import_group_order(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    prefixes = _local_prefixes(source, cfg)
    sublists: dict[tuple[int, bool], list[ImportDecl]] = {}
    for decl in source.module.imports:
        sublists.setdefault((import_group(decl, prefixes), decl.qualified), []).append(decl)
    for (group, qualified), decls in sorted(sublists.items()):
        for first, second in pairwise(decls):
            if _alpha(first.module) > _alpha(second.module):
                kind = "qualified" if qualified else "unqualified"
                yield Finding(
                    second.line,
                    f"{kind} {_GROUP_NAMES[group]} imports out of order at "
                    f"({first.module}, {second.module})",
                )
                break
