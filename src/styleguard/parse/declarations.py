from __future__ import annotations

import bisect
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .facts import Binding, BindingKind, DataType, EntryList, ImportDecl, ListEntry

_MODULE_NAME: Final[str] = r"[A-Z][\w']*(?:\.[A-Z][\w']*)*"
_MODULE_HEAD: Final[re.Pattern[str]] = re.compile(rf"module\s+({_MODULE_NAME})")
_IMPORT_HEAD: Final[re.Pattern[str]] = re.compile(rf"import\s+(qualified\s+)?({_MODULE_NAME})")
_ALIAS: Final[re.Pattern[str]] = re.compile(rf"(?<![\w'])as\s+({_MODULE_NAME})")
_HIDING: Final[re.Pattern[str]] = re.compile(r"(?<![\w'])hiding(?![\w'])")
_POST_QUALIFIED: Final[re.Pattern[str]] = re.compile(r"(?<![\w'])qualified(?![\w'])")
_ENTRY: Final[re.Pattern[str]] = re.compile(
    r"^(?:(kind|class|effect|type|module)\s+)?(\([^()]*\)|[\w'.]+)\s*(?:\((.*)\))?$",
    re.DOTALL,
)
_WHERE: Final[re.Pattern[str]] = re.compile(r"(?<![\w'])where(?![\w'])")
_KIND_SIGNATURE: Final[re.Pattern[str]] = re.compile(r"(?:data|newtype)\s+[A-Z][\w']*\s*::")
_UPPER_IDENT: Final[re.Pattern[str]] = re.compile(r"[A-Z][\w']*")
_LOWER_IDENT: Final[re.Pattern[str]] = re.compile(r"[a-z_][\w']*")
_SKIPPED_HEADS: Final[frozenset[str]] = frozenset(
    {"infix", "infixl", "infixr", "import", "module", "where", "else", "then", "in"}
)


@dataclass(frozen=True)
class _Span:
    """A top-level statement: its first line plus deeper-indented continuation lines."""

    text: str
    starts: tuple[int, ...]  # offset of each line in ``text``
    numbers: tuple[int, ...]  # source line number of each line

    def line_at(self, offset: int) -> int:
        return self.numbers[bisect.bisect_right(self.starts, offset) - 1]

    @property
    def first_line(self) -> int:
        return self.numbers[0]

    @property
    def last_line(self) -> int:
        return self.numbers[-1]


def top_level_spans(codes: Sequence[str]) -> list[_Span]:
    spans: list[_Span] = []
    current: list[int] = []

    def flush() -> None:
        if not current:
            return
        starts: list[int] = []
        offset = 0
        for idx in current:
            starts.append(offset)
            offset += len(codes[idx]) + 1
        spans.append(
            _Span(
                text="\n".join(codes[idx] for idx in current),
                starts=tuple(starts),
                numbers=tuple(current),
            )
        )
        current.clear()

    for idx, code in enumerate(codes):
        if not code.strip():
            continue
        if not code[0].isspace():
            flush()
        current.append(idx)
    flush()
    return spans


def _split_top_level(text: str, start: int, end: int, sep: str) -> list[tuple[int, int]]:
    """Split ``text[start:end]`` on ``sep`` outside brackets; returns (start, end) pairs."""
    parts: list[tuple[int, int]] = []
    depth = 0
    begin = start
    for i in range(start, end):
        ch = text[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == sep and depth == 0 and _standalone(text, i, 1):
            parts.append((begin, i))
            begin = i + 1
    parts.append((begin, end))
    return parts


def _standalone(text: str, i: int, width: int) -> bool:
    symbols = "!#$%&*+./<=>?@\\^|-~:"
    before = text[i - 1] if i > 0 else " "
    after = text[i + width] if i + width < len(text) else " "
    return before not in symbols and after not in symbols


def _matching_paren(text: str, open_idx: int) -> int:
    depth = 0
    for i in range(open_idx, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return len(text)


def parse_entry(text: str, line: int) -> ListEntry:
    normalized = " ".join(text.split())
    m = _ENTRY.match(normalized)
    if m is None:
        return ListEntry(text=normalized, name=normalized, line=line)
    keyword, raw_name, ctors = m.group(1), m.group(2), m.group(3)
    is_operator = raw_name.startswith("(")
    name = raw_name[1:-1].strip() if is_operator else raw_name
    constructors: tuple[str, ...] | None = None
    all_constructors = False
    if ctors is not None:
        listed = ctors.strip()
        if listed == "..":
            all_constructors = True
        else:
            constructors = tuple(c.strip() for c in listed.split(",") if c.strip())
    return ListEntry(
        text=normalized,
        name=name,
        line=line,
        keyword=keyword,
        is_operator=is_operator,
        constructors=constructors,
        all_constructors=all_constructors,
    )


def _entry_list(span: _Span, open_idx: int, hiding: bool = False) -> EntryList:
    text = span.text
    close_idx = _matching_paren(text, open_idx)
    entries: list[ListEntry] = []
    for begin, end in _split_top_level(text, open_idx + 1, close_idx, ","):
        chunk = text[begin:end]
        if not chunk.strip():
            continue
        lead = len(chunk) - len(chunk.lstrip())
        entries.append(parse_entry(chunk, span.line_at(begin + lead)))
    return EntryList(
        line=span.line_at(open_idx),
        end_line=span.line_at(min(close_idx, len(text) - 1)),
        entries=tuple(entries),
        hiding=hiding,
    )


def parse_module_header(span: _Span) -> tuple[str, EntryList | None] | None:
    m = _MODULE_HEAD.match(span.text)
    if m is None:
        return None
    rest = span.text[m.end() :]
    stripped = rest.lstrip()
    if not stripped.startswith("("):
        return m.group(1), None
    open_idx = m.end() + (len(rest) - len(stripped))
    return m.group(1), _entry_list(span, open_idx)


def parse_import(span: _Span) -> ImportDecl | None:
    text = span.text
    m = _IMPORT_HEAD.match(text)
    if m is None:
        return None
    qualified = m.group(1) is not None
    rest_start = m.end()
    rest = text[rest_start:]

    listing: EntryList | None = None
    paren = rest.find("(")
    outside = rest if paren < 0 else rest[:paren] + rest[_matching_paren(rest, paren) + 1 :]
    if paren >= 0:
        hiding = _HIDING.search(rest[:paren]) is not None
        listing = _entry_list(span, rest_start + paren, hiding=hiding)

    alias_match = _ALIAS.search(outside)
    if _POST_QUALIFIED.search(outside):
        qualified = True
    alias = alias_match.group(1) if alias_match else None
    return ImportDecl(
        module=m.group(2),
        line=span.first_line,
        end_line=span.last_line,
        alias=alias,
        qualified=qualified or alias is not None,
        listing=listing,
    )


def _data_constructors(span: _Span, body_start: int) -> list[tuple[str, int]]:
    text = span.text
    eq = -1
    depth = 0
    for i in range(body_start, len(text)):
        ch = text[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "=" and depth == 0 and _standalone(text, i, 1):
            eq = i
            break
    if eq < 0:
        return []
    out: list[tuple[str, int]] = []
    for begin, end in _split_top_level(text, eq + 1, len(text), "|"):
        chunk = text[begin:end]
        lead = len(chunk) - len(chunk.lstrip())
        m = _UPPER_IDENT.match(chunk, lead)
        if m is not None:
            out.append((m.group(0), span.line_at(begin + lead)))
    return out


def _upper_after(text: str, pos: int) -> str | None:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    m = _UPPER_IDENT.match(text, pos)
    return m.group(0) if m else None


def _class_name(text: str) -> str | None:
    where = _WHERE.search(text)
    head = text[: where.start()] if where else text
    start = len("class")
    for marker in ("<=", "=>"):
        idx = head.find(marker)
        if idx >= 0:
            start = idx + len(marker)
            break
    return _upper_after(head, start)


def _declaration(span: _Span) -> tuple[list[Binding], DataType | None]:
    text = span.text
    words = text.split()
    head = words[0]
    line = span.first_line

    if head in {"data", "newtype"}:
        if _KIND_SIGNATURE.match(text):
            return [], None
        name = _upper_after(text, len(head))
        if name is None:
            return [], None
        ctors = _data_constructors(span, len(head))
        bindings = [Binding(name, BindingKind.type, line)]
        bindings.extend(Binding(c, BindingKind.constructor, ln) for c, ln in ctors)
        return bindings, DataType(name=name, line=line, constructors=tuple(c for c, _ in ctors))
    if head in {"type", "kind"}:
        if len(words) > 1 and words[1] == "role":
            return [], None
        name = _upper_after(text, len(head))
        return ([Binding(name, BindingKind.type, line)] if name else []), None
    if head == "class":
        name = _class_name(text)
        return ([Binding(name, BindingKind.class_, line)] if name else []), None
    if head in {"instance", "derive"}:
        m = re.search(r"instance\s+([a-z_][\w']*)\s*::", text)
        return ([Binding(m.group(1), BindingKind.value, line)] if m else []), None
    if head == "foreign":
        m = re.match(r"foreign\s+import\s+(data\s+)?([\w']+)", text)
        if m is None:
            return [], None
        kind = BindingKind.type if m.group(1) else BindingKind.value
        return [Binding(m.group(2), kind, line)], None
    if head in _SKIPPED_HEADS:
        return [], None
    m = _LOWER_IDENT.match(text)
    if m is not None:
        return [Binding(m.group(0), BindingKind.value, line)], None
    return [], None


@dataclass(frozen=True)
class Declarations:
    module_name: str | None
    module_line: int | None
    exports: EntryList | None
    imports: tuple[ImportDecl, ...]
    bindings: tuple[Binding, ...]
    data_types: tuple[DataType, ...]


def scan_declarations(codes: Sequence[str]) -> Declarations:
    module_name: str | None = None
    module_line: int | None = None
    exports: EntryList | None = None
    imports: list[ImportDecl] = []
    bindings: list[Binding] = []
    data_types: list[DataType] = []
    seen: set[tuple[str, BindingKind]] = set()

    for span in top_level_spans(codes):
        head = span.text.split()[0]
        if head == "module" and module_name is None:
            header = parse_module_header(span)
            if header is not None:
                module_name, exports = header
                module_line = span.first_line
            continue
        if head == "import":
            decl = parse_import(span)
            if decl is not None:
                imports.append(decl)
            continue
        found, data_type = _declaration(span)
        if data_type is not None:
            data_types.append(data_type)
        for b in found:
            # Signature and equations name the same binding
            if (b.name, b.kind) in seen:
                continue
            seen.add((b.name, b.kind))
            bindings.append(b)

    return Declarations(
        module_name=module_name,
        module_line=module_line,
        exports=exports,
        imports=tuple(imports),
        bindings=tuple(bindings),
        data_types=tuple(data_types),
    )
