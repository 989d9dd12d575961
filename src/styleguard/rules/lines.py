from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Final

from ..config import RuleConfig
from ..types import SourceLine
from . import Finding

# Whole trimmed line is a URL, optionally behind a line-comment marker
_URL_ONLY: Final[re.Pattern[str]] = re.compile(
    r"^(?:--\s*)?(?:[A-Za-z][A-Za-z0-9+.\-]*://|www\.)[^\s\"'<>]+$"
)


def is_url_only(text: str) -> bool:
    return _URL_ONLY.match(text.strip()) is not None


def check_line_length(line: SourceLine, cfg: RuleConfig) -> Iterable[Finding]:
    length = line.visible_length
    if length <= cfg.max_line_length or is_url_only(line.text):
        return ()
    return (Finding(line.number, f"line is {length} characters long (limit {cfg.max_line_length})"),)


def check_tabs(line: SourceLine, cfg: RuleConfig) -> Iterable[Finding]:
    if "\t" in line.leading_chars:
        return (Finding(line.number, "tab character in indentation"),)
    if "\t" in line.code:
        return (Finding(line.number, "tab character in code"),)
    return ()


def check_trailing_whitespace(line: SourceLine, cfg: RuleConfig) -> Iterable[Finding]:
    if not line.has_trailing_whitespace:
        return ()
    return (Finding(line.number, "trailing whitespace"),)
