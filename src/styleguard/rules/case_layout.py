from __future__ import annotations

from collections.abc import Iterator

from ..config import RuleConfig
from ..parse.facts import CaseBlock
from ..types import SourceFile
from . import Finding


def check_branch_indent(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for cb in source.module.case_blocks:
        step = cb.alt_column - cb.indent
        if step != cfg.indent_size:
            yield Finding(
                cb.alternatives[0].line,
                f"case alternatives are indented {step} columns past the 'case' line, "
                f"expected {cfg.indent_size}",
            )


def _arrow_advice(cb: CaseBlock, threshold: int) -> str | None:
    heads = [
        (a.pattern_width, a.arrow_column, a.column)
        for a in cb.alternatives
        if a.pattern_width is not None and a.arrow_column is not None
    ]
    if len(heads) < 2:
        return None
    widths = [w for w, _, _ in heads]
    padding = max(widths) - min(widths)
    aligned = len({arrow for _, arrow, _ in heads}) == 1
    padded = any(arrow - (col + w) > 1 for w, arrow, col in heads)
    if padding > threshold:
        if aligned and padded:
            return (
                f"aligning these arrows takes {padding} spaces of padding "
                f"(more than {threshold}); leave them unaligned"
            )
        return None
    if not aligned:
        return f"align the arrows of this case block (needs at most {padding} spaces of padding)"
    return None


def check_arrow_alignment(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for cb in source.module.case_blocks:
        advice = _arrow_advice(cb, cfg.max_arrow_indent_threshold)
        if advice is not None:
            yield Finding(cb.alternatives[0].line, advice)


def check_matcher_body_length(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for cb in source.module.case_blocks:
        for alt in cb.alternatives:
            span = alt.end_line - alt.line + 1
            if span > cfg.max_matcher_body_lines:
                yield Finding(
                    alt.line,
                    f"case alternative spans {span} lines (limit {cfg.max_matcher_body_lines}); "
                    "consider extracting it into a named local helper",
                )
