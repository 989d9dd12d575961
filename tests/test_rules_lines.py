from __future__ import annotations

from pathlib import Path

from styleguard.config import RuleConfig
from styleguard.engine import check_text
from styleguard.rules.lines import check_line_length, check_tabs, check_trailing_whitespace, is_url_only
from styleguard.types import SourceLine


def _line(text: str, code: str | None = None) -> SourceLine:
    return SourceLine(number=0, text=text, code=text if code is None else code)


def _hits(text: str, rule_id: str, cfg: RuleConfig | None = None) -> list[int | None]:
    res = check_text(Path("T.purs"), text, cfg or RuleConfig())
    return [v.line for v in res.violations if v.rule_id == rule_id]


def test_line_length_boundary() -> None:
    cfg = RuleConfig()
    assert list(check_line_length(_line("x" * 80), cfg)) == []
    (finding,) = check_line_length(_line("x" * 81), cfg)
    assert finding.message == "line is 81 characters long (limit 80)"


def test_line_of_81_characters_fires_once() -> None:
    text = "x = 1\n" + "y = " + "1" * 77 + "\n"
    assert _hits(text, "max-line-length") == [1]


def test_trailing_whitespace_does_not_count_toward_length() -> None:
    assert list(check_line_length(_line("x" * 80 + "   "), RuleConfig())) == []


def test_url_only_lines_are_exempt() -> None:
    url = "https://example.com/" + "a" * 100
    assert is_url_only(url)
    assert is_url_only("  -- " + url)
    assert not is_url_only("see " + url)
    assert list(check_line_length(_line("  -- " + url), RuleConfig())) == []


def test_configured_limit() -> None:
    assert _hits("abcdef = 1\n", "max-line-length", RuleConfig(max_line_length=5)) == [0]


def test_tabs_reported_once_per_line() -> None:
    assert _hits("f x =\n\tx\t+ 1\n", "no-tabs") == [1]
    (finding,) = check_tabs(_line("\tx"), RuleConfig())
    assert finding.message == "tab character in indentation"
    (finding,) = check_tabs(_line("x =\t1"), RuleConfig())
    assert finding.message == "tab character in code"


def test_tab_inside_string_or_comment_is_ignored() -> None:
    assert list(check_tabs(_line('x = "\t"', code='x = " "'), RuleConfig())) == []
    assert _hits("x = 1 -- a\tb\n", "no-tabs") == []


def test_trailing_whitespace() -> None:
    assert _hits("x = 1 \ny = 2\t\nz = 3\n", "trailing-whitespace") == [0, 1]
    assert list(check_trailing_whitespace(_line("ok"), RuleConfig())) == []
