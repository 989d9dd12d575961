from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from .facts import Alternative, Block, CaseBlock, RecordKey

_LAYOUT_KEYWORD: Final[re.Pattern[str]] = re.compile(r"(?<![\w'.])(where|let|do|ado|of)(?![\w'])")
_CASE_KEYWORD: Final[re.Pattern[str]] = re.compile(r"(?<![\w'.])case(?![\w'])")
_OF_KEYWORD: Final[re.Pattern[str]] = re.compile(r"(?<![\w'.])of(?![\w'])")
_WHERE_LINE: Final[re.Pattern[str]] = re.compile(r"^\s*where(?![\w'])")
_RECORD_KEY: Final[re.Pattern[str]] = re.compile(r"(?:^|[{,(\[]\s*)(?:[a-z_][\w']*|\"[^\"]*\")\s*:$")
_SYMBOL_CHARS: Final[str] = "!#$%&*+./<=>?@\\^|-~:"


def _indent(code: str) -> int:
    return len(code) - len(code.lstrip())


def _code_lines(codes: Sequence[str]) -> list[int]:
    return [i for i, c in enumerate(codes) if c.strip()]


class _OpenBlock:
    __slots__ = ("line", "column", "opened_by", "end_line", "children")

    def __init__(self, line: int, column: int, opened_by: str) -> None:
        self.line = line
        self.column = column
        self.opened_by = opened_by
        self.end_line = line
        self.children: list[Block] = []

    def freeze(self) -> Block:
        return Block(
            start_line=self.line,
            start_column=self.column,
            end_line=self.end_line,
            opened_by=self.opened_by,
            children=tuple(self.children),
        )


def _layout_openings(code: str) -> list[tuple[str, int]]:
    """Layout keywords on this line that are followed by a token on the same line."""
    out: list[tuple[str, int]] = []
    for m in _LAYOUT_KEYWORD.finditer(code):
        rest = code[m.end() :]
        stripped = rest.lstrip()
        if stripped:
            out.append((m.group(1), m.end() + (len(rest) - len(stripped))))
    return out


def build_blocks(codes: Sequence[str]) -> Block:
    """Build the layout block tree of a masked source.

    A block opens when a line is indented past its enclosing block, or at
    the column of the first token after a layout keyword on the same line.
    Blocks close at the first code line indented left of their column.
    """
    root = _OpenBlock(0, 0, "root")
    stack = [root]
    last = 0

    def close() -> None:
        done = stack.pop()
        done.end_line = last
        stack[-1].children.append(done.freeze())

    for idx in _code_lines(codes):
        code = codes[idx]
        col = _indent(code)
        while len(stack) > 1 and stack[-1].column > col:
            close()
        if col > stack[-1].column:
            stack.append(_OpenBlock(idx, col, "indent"))
        for keyword, tok_col in _layout_openings(code):
            stack.append(_OpenBlock(idx, tok_col, keyword))
        last = idx
    while len(stack) > 1:
        close()
    root.end_line = last
    return root.freeze()


def find_record_keys(codes: Sequence[str]) -> tuple[RecordKey, ...]:
    """Record keys whose value is a literal opened on the following line."""
    lines = _code_lines(codes)
    out: list[RecordKey] = []
    for pos, idx in enumerate(lines[:-1]):
        stripped = codes[idx].strip()
        if stripped.endswith("::") or not _RECORD_KEY.search(stripped):
            continue
        body_idx = lines[pos + 1]
        body = codes[body_idx].lstrip()
        if not body.startswith(("{", "[")):
            continue
        out.append(
            RecordKey(
                line=idx,
                column=_indent(codes[idx]),
                body_line=body_idx,
                body_column=_indent(codes[body_idx]),
            )
        )
    return tuple(out)


def _find_arrow(code: str, start: int) -> int | None:
    depth = 0
    i = start
    n = len(code)
    while i < n:
        ch = code[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif depth == 0 and code.startswith("->", i):
            before = code[i - 1] if i > 0 else " "
            after = code[i + 2] if i + 2 < n else " "
            if before not in _SYMBOL_CHARS and after not in _SYMBOL_CHARS:
                return i
        i += 1
    return None


def _alternative(codes: Sequence[str], line: int, end_line: int, column: int) -> Alternative:
    code = codes[line]
    arrow = _find_arrow(code, column)
    width = None if arrow is None else len(code[column:arrow].rstrip())
    return Alternative(
        line=line,
        end_line=end_line,
        column=column,
        pattern_width=width,
        arrow_column=arrow,
    )


def _locate_of(codes: Sequence[str], lines: list[int], pos: int, start: int) -> tuple[int, int] | None:
    case_line = lines[pos]
    m = _OF_KEYWORD.search(codes[case_line], start)
    if m is not None:
        return case_line, m.end()
    # A scrutinee may continue on deeper-indented lines
    for idx in lines[pos + 1 :]:
        if _indent(codes[idx]) <= _indent(codes[case_line]):
            return None
        m = _OF_KEYWORD.search(codes[idx])
        if m is not None:
            return idx, m.end()
    return None


def find_case_blocks(codes: Sequence[str]) -> tuple[CaseBlock, ...]:
    lines = _code_lines(codes)
    out: list[CaseBlock] = []
    for pos, idx in enumerate(lines):
        for m in _CASE_KEYWORD.finditer(codes[idx]):
            block = _case_block(codes, lines, pos, m.end())
            if block is not None:
                out.append(block)
    return tuple(out)


def _case_block(codes: Sequence[str], lines: list[int], pos: int, start: int) -> CaseBlock | None:
    case_line = lines[pos]
    found = _locate_of(codes, lines, pos, start)
    if found is None:
        return None
    of_line, of_end = found
    rest = codes[of_line][of_end:]
    if rest.strip():
        first_line = of_line
        alt_column = of_end + (len(rest) - len(rest.lstrip()))
    else:
        following = [i for i in lines if i > of_line]
        if not following:
            return None
        first_line = following[0]
        alt_column = _indent(codes[first_line])

    starts: list[int] = [first_line]
    ends: list[int] = [first_line]
    for idx in lines:
        if idx <= first_line:
            continue
        col = _indent(codes[idx])
        if col < alt_column or (col == alt_column and _WHERE_LINE.match(codes[idx])):
            break
        if col == alt_column:
            starts.append(idx)
            ends.append(idx)
        else:
            ends[-1] = idx

    alternatives = tuple(
        _alternative(codes, begin, end, alt_column) for begin, end in zip(starts, ends, strict=True)
    )
    return CaseBlock(
        line=case_line,
        indent=_indent(codes[case_line]),
        alt_column=alt_column,
        alternatives=alternatives,
    )
