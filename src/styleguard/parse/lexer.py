"""Literal-masking scanner.

Splits source text into lines and blanks out the contents of string and
character literals and of comments, so later passes can look at code
without tripping over quoted text. Quote characters stay in place; every
masked line has the same length as its raw line.

Raises :class:`ParseError` for text that cannot be tokenized: unterminated
literals or block comments and unbalanced brackets.
"""

from __future__ import annotations

import re
from typing import Final

from ..errors import ParseError

_SYMBOL_CHARS: Final[frozenset[str]] = frozenset("!#$%&*+./<=>?@\\^|-~:")
_OPENERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: Final[dict[str, str]] = {")": "(", "]": "[", "}": "{"}
_CHAR_LITERAL: Final[re.Pattern[str]] = re.compile(r"'(?:\\(?:[^\n]|[^'\n]+)|[^'\\\n])'")


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only; form feeds and other separators stay inside the line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def mask_source(text: str) -> tuple[str, ...]:
    lines = split_lines(text)
    masked = _Scanner("\n".join(lines)).run()
    if not lines:
        return ()
    return tuple(masked.split("\n"))


class _Scanner:
    def __init__(self, src: str) -> None:
        self._src = src
        self._out = list(src)
        self._i = 0
        self._line = 0
        self._brackets: list[tuple[str, int]] = []

    def run(self) -> str:
        src = self._src
        n = len(src)
        while self._i < n:
            ch = src[self._i]
            if ch == "\n":
                self._line += 1
                self._i += 1
            elif src.startswith("{-", self._i):
                self._block_comment()
            elif ch == "-" and self._at_line_comment():
                self._line_comment()
            elif src.startswith('"""', self._i):
                self._raw_string()
            elif ch == '"':
                self._string()
            elif ch == "'" and not self._at_prime():
                self._char()
            else:
                self._bracket(ch)
                self._i += 1
        if self._brackets:
            opener, line = self._brackets[-1]
            raise ParseError(line, f"unclosed '{opener}'")
        return "".join(self._out)

    def _bracket(self, ch: str) -> None:
        if ch in _OPENERS:
            self._brackets.append((ch, self._line))
        elif ch in _CLOSERS:
            if not self._brackets or self._brackets[-1][0] != _CLOSERS[ch]:
                raise ParseError(self._line, f"unexpected '{ch}'")
            self._brackets.pop()

    def _blank(self, start: int, end: int) -> None:
        for j in range(start, end):
            if self._out[j] != "\n":
                self._out[j] = " "
        self._line += self._src.count("\n", start, end)

    def _at_line_comment(self) -> bool:
        src = self._src
        i = self._i
        if not src.startswith("--", i):
            return False
        if i > 0 and src[i - 1] in _SYMBOL_CHARS:
            return False
        j = i
        while j < len(src) and src[j] == "-":
            j += 1
        # "-->" and friends are operators
        return j == len(src) or src[j] not in _SYMBOL_CHARS

    def _at_prime(self) -> bool:
        if self._i == 0:
            return False
        prev = self._src[self._i - 1]
        return prev.isalnum() or prev in "_'"

    def _line_comment(self) -> None:
        end = self._src.find("\n", self._i)
        if end < 0:
            end = len(self._src)
        self._blank(self._i, end)
        self._i = end

    def _block_comment(self) -> None:
        src = self._src
        start_line = self._line
        depth = 0
        j = self._i
        while j < len(src):
            if src.startswith("{-", j):
                depth += 1
                j += 2
            elif src.startswith("-}", j):
                depth -= 1
                j += 2
                if depth == 0:
                    break
            else:
                j += 1
        if depth > 0:
            raise ParseError(start_line, "unterminated block comment")
        self._blank(self._i, j)
        self._i = j

    def _raw_string(self) -> None:
        end = self._src.find('"""', self._i + 3)
        if end < 0:
            raise ParseError(self._line, "unterminated string literal")
        self._blank(self._i + 3, end)
        self._i = end + 3

    def _string(self) -> None:
        src = self._src
        n = len(src)
        j = self._i + 1
        while j < n:
            c = src[j]
            if c == "\\":
                if j + 1 < n and src[j + 1] in " \t\n":
                    j = self._string_gap_end(j + 1)
                    continue
                j += 2
                continue
            if c == '"':
                self._blank(self._i + 1, j)
                self._i = j + 1
                return
            if c == "\n":
                break
            j += 1
        raise ParseError(self._line, "unterminated string literal")

    def _string_gap_end(self, j: int) -> int:
        src = self._src
        while j < len(src) and src[j] in " \t\n":
            j += 1
        if j >= len(src) or src[j] != "\\":
            raise ParseError(self._line, "unterminated string gap")
        return j + 1

    def _char(self) -> None:
        m = _CHAR_LITERAL.match(self._src, self._i)
        if m is None:
            raise ParseError(self._line, "malformed character literal")
        self._blank(self._i + 1, m.end() - 1)
        self._i = m.end()
