from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class EntryKind(str, Enum):
    kind = "kind"
    class_ = "class"
    effect = "effect"
    type = "type"
    operator = "operator"
    function = "function"
    module = "module"


# Position of each kind inside an import or export list
ENTRY_RANK: Final[dict[EntryKind, int]] = {
    EntryKind.kind: 0,
    EntryKind.class_: 1,
    EntryKind.effect: 2,
    EntryKind.type: 3,
    EntryKind.operator: 4,
    EntryKind.function: 5,
    EntryKind.module: 6,
}


class BindingKind(str, Enum):
    value = "value"
    type = "type"
    constructor = "constructor"
    class_ = "class"


@dataclass(frozen=True)
class ListEntry:
    text: str  # whitespace-normalized, as written
    name: str  # identifier, or operator symbol without parens
    line: int
    keyword: str | None = None  # explicit namespace: kind, class, effect, type, module
    is_operator: bool = False
    constructors: tuple[str, ...] | None = None  # None when no list is written
    all_constructors: bool = False  # written as (..)


@dataclass(frozen=True)
class EntryList:
    line: int
    end_line: int
    entries: tuple[ListEntry, ...]
    hiding: bool = False


@dataclass(frozen=True)
class ImportDecl:
    module: str
    line: int
    end_line: int
    alias: str | None = None
    qualified: bool = False
    listing: EntryList | None = None


@dataclass(frozen=True)
class Binding:
    name: str
    kind: BindingKind
    line: int


@dataclass(frozen=True)
class DataType:
    name: str
    line: int
    constructors: tuple[str, ...]


@dataclass(frozen=True)
class Block:
    """Layout block: ``opened_by`` is "root", "indent" or the layout keyword."""

    start_line: int
    start_column: int
    end_line: int
    opened_by: str
    children: tuple[Block, ...] = ()


@dataclass(frozen=True)
class RecordKey:
    line: int
    column: int  # indentation of the key's line
    body_line: int
    body_column: int


@dataclass(frozen=True)
class Alternative:
    line: int
    end_line: int
    column: int
    pattern_width: int | None  # None when the arrow is not on the first line
    arrow_column: int | None


@dataclass(frozen=True)
class CaseBlock:
    line: int
    indent: int  # indentation of the line holding ``case``
    alt_column: int
    alternatives: tuple[Alternative, ...]


@dataclass(frozen=True)
class ParsedModule:
    module_name: str | None
    module_line: int | None
    exports: EntryList | None
    imports: tuple[ImportDecl, ...]
    bindings: tuple[Binding, ...]
    data_types: tuple[DataType, ...]
    blocks: Block
    record_keys: tuple[RecordKey, ...]
    case_blocks: tuple[CaseBlock, ...]

    def constructors_of(self, type_name: str) -> tuple[str, ...] | None:
        for dt in self.data_types:
            if dt.name == type_name:
                return dt.constructors
        return None
