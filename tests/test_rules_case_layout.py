from __future__ import annotations

from pathlib import Path

from styleguard.config import RuleConfig
from styleguard.engine import check_text


def _hits(text: str, rule_id: str, cfg: RuleConfig | None = None) -> list[tuple[int | None, str]]:
    res = check_text(Path("T.purs"), text, cfg or RuleConfig())
    return [(v.line, v.message) for v in res.violations if v.rule_id == rule_id]


def test_branch_indent() -> None:
    ok = "f x =\n  case x of\n    Just y -> y\n    Nothing -> 0\n"
    assert _hits(ok, "case-branch-indent") == []
    bad = "f x = case x of\n    Just y -> y\n    Nothing -> 0\n"
    assert _hits(bad, "case-branch-indent") == [
        (1, "case alternatives are indented 4 columns past the 'case' line, expected 2")
    ]


def test_branch_indent_alternative_on_of_line() -> None:
    text = "g x = case x of Just y -> y\n                Nothing -> 0\n"
    ((line, message),) = _hits(text, "case-branch-indent")
    assert line == 0
    assert "indented 16 columns" in message


def test_small_padding_should_be_aligned() -> None:
    aligned = "f x = case x of\n  Just y  -> y\n  Nothing -> 0\n"
    assert _hits(aligned, "case-arrow-alignment") == []
    ragged = "f x = case x of\n  Just y -> y\n  Nothing -> 0\n"
    assert _hits(ragged, "case-arrow-alignment") == [
        (1, "align the arrows of this case block (needs at most 1 spaces of padding)")
    ]


def test_large_padding_should_not_be_aligned() -> None:
    long_pattern = "VeryLongConstructorName b c d"
    aligned = (
        "f x = case x of\n"
        + "  A" + " " * 29 + "-> 1\n"
        + "  " + long_pattern + " -> 2\n"
    )
    ((line, message),) = _hits(aligned, "case-arrow-alignment")
    assert line == 1
    assert message == (
        "aligning these arrows takes 28 spaces of padding (more than 10); leave them unaligned"
    )
    ragged = "f x = case x of\n  A -> 1\n  " + long_pattern + " -> 2\n"
    assert _hits(ragged, "case-arrow-alignment") == []
    # Within a raised threshold the ragged block should be aligned instead
    assert len(_hits(ragged, "case-arrow-alignment", RuleConfig(max_arrow_indent_threshold=30))) == 1


_LONG_BODY = """f x = case x of
  Just y ->
    let z = y
    in
      z
  Nothing -> 0
"""


def test_matcher_body_length() -> None:
    assert _hits(_LONG_BODY, "matcher-body-length") == [
        (
            1,
            "case alternative spans 4 lines (limit 3); "
            "consider extracting it into a named local helper",
        )
    ]
    assert _hits(_LONG_BODY, "matcher-body-length", RuleConfig(max_matcher_body_lines=4)) == []
    assert _hits(_LONG_BODY, "case-branch-indent") == []


def test_where_clause_is_not_a_long_alternative() -> None:
    text = "f x = case x of\n  A -> g\n  B -> h\n  where\n  g = 1\n  h = 2\n"
    assert _hits(text, "matcher-body-length") == []
    assert _hits(text, "case-arrow-alignment") == []
