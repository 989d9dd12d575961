from __future__ import annotations

from typing import Protocol

from .facts import EntryKind, ListEntry, ParsedModule

_KEYWORD_KINDS: dict[str, EntryKind] = {
    "kind": EntryKind.kind,
    "class": EntryKind.class_,
    "effect": EntryKind.effect,
    "type": EntryKind.type,
    "module": EntryKind.module,
}


class NameResolver(Protocol):
    def classify(self, entry: ListEntry) -> EntryKind: ...

    def constructors_of(self, module: str | None, type_name: str) -> tuple[str, ...] | None:
        """Full constructor set of ``type_name``; ``module`` is None for the file's own types."""
        ...


class SyntacticResolver:
    """Classifies list entries from their written form alone.

    Only types declared in the checked file have a known constructor set;
    anything imported is reported as unknown.
    """

    def __init__(self, module: ParsedModule) -> None:
        self._module = module

    def classify(self, entry: ListEntry) -> EntryKind:
        if entry.keyword is not None:
            return _KEYWORD_KINDS[entry.keyword]
        if entry.is_operator:
            return EntryKind.operator
        if entry.name[:1].isupper():
            return EntryKind.type
        return EntryKind.function

    def constructors_of(self, module: str | None, type_name: str) -> tuple[str, ...] | None:
        if module is not None:
            return None
        return self._module.constructors_of(type_name)
