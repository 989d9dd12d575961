from __future__ import annotations

from styleguard.parse.facts import Alternative, Block, RecordKey
from styleguard.parse.layout import build_blocks, find_case_blocks, find_record_keys


def test_let_block_opens_at_first_binding_column() -> None:
    codes = ["f x =", "  let a = 1", "      b = 2", "  in a + b"]
    root = build_blocks(codes)
    assert root == Block(
        start_line=0,
        start_column=0,
        end_line=3,
        opened_by="root",
        children=(
            Block(
                start_line=1,
                start_column=2,
                end_line=3,
                opened_by="indent",
                children=(Block(start_line=1, start_column=6, end_line=2, opened_by="let"),),
            ),
        ),
    )


def test_blank_and_comment_lines_do_not_close_blocks() -> None:
    codes = ["f =", "  a", "", "     ", "  b"]
    root = build_blocks(codes)
    assert len(root.children) == 1
    assert root.children[0].end_line == 4


def test_case_block_alternatives() -> None:
    codes = ["f x = case x of", "  Just y -> y", "  Nothing -> 0"]
    (cb,) = find_case_blocks(codes)
    assert cb.line == 0 and cb.indent == 0 and cb.alt_column == 2
    assert cb.alternatives == (
        Alternative(line=1, end_line=1, column=2, pattern_width=6, arrow_column=9),
        Alternative(line=2, end_line=2, column=2, pattern_width=7, arrow_column=10),
    )


def test_case_alternative_on_the_of_line() -> None:
    codes = ["g x = case x of Just y -> y", "                Nothing -> 0"]
    (cb,) = find_case_blocks(codes)
    assert cb.alt_column == 16
    assert [a.line for a in cb.alternatives] == [0, 1]


def test_case_alternative_continuation_lines() -> None:
    codes = [
        "f x = case x of",
        "  Just y ->",
        "    y",
        "  Nothing -> 0",
        "g = 1",
    ]
    (cb,) = find_case_blocks(codes)
    assert [(a.line, a.end_line) for a in cb.alternatives] == [(1, 2), (3, 3)]


def test_record_key_with_literal_body() -> None:
    codes = ["config =", "  { server:", "      { port: 8080", "      }", "  }"]
    assert find_record_keys(codes) == (RecordKey(line=1, column=2, body_line=2, body_column=6),)


def test_type_signature_is_not_a_record_key() -> None:
    codes = ["foo ::", "  { a :: Int }"]
    assert find_record_keys(codes) == ()


def test_where_clause_ends_case_alternatives() -> None:
    codes = [
        "f x = case x of",
        "  A -> g",
        "  B -> h",
        "  where",
        "  g = 1",
        "  h = 2",
    ]
    (cb,) = find_case_blocks(codes)
    assert [(a.line, a.end_line) for a in cb.alternatives] == [(1, 1), (2, 2)]


def test_nested_where_stays_inside_alternative() -> None:
    codes = [
        "f x = case x of",
        "  A ->",
        "    g",
        "    where",
        "    g = 1",
        "  B -> 2",
    ]
    (cb,) = find_case_blocks(codes)
    assert [(a.line, a.end_line) for a in cb.alternatives] == [(1, 4), (5, 5)]
