from __future__ import annotations

from collections.abc import Iterator

from ..config import RuleConfig
from ..parse.facts import Block
from ..types import SourceFile
from . import Finding


def _indent_blocks(block: Block) -> Iterator[tuple[Block, Block]]:
    for child in block.children:
        if child.opened_by == "indent":
            yield block, child
        yield from _indent_blocks(child)


def check_indent_step(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    # Nested literal bodies have their own rule
    literal_bodies = {key.body_line for key in source.module.record_keys}
    for parent, child in _indent_blocks(source.module.blocks):
        if child.start_line in literal_bodies:
            continue
        step = child.start_column - parent.start_column
        if step % cfg.indent_size:
            yield Finding(
                child.start_line,
                f"indented {step} columns past the enclosing block at column "
                f"{parent.start_column}; use multiples of {cfg.indent_size}",
            )


def check_nested_literal(source: SourceFile, cfg: RuleConfig) -> Iterator[Finding]:
    for key in source.module.record_keys:
        step = key.body_column - key.column
        if step != cfg.nested_indent_size:
            yield Finding(
                key.body_line,
                f"nested literal indented {step} columns past its key, "
                f"expected {cfg.nested_indent_size}",
            )
