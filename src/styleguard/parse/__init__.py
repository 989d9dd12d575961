"""Best-effort structural scanners for layout-sensitive sources.

These stand in for a full parser: they only recover the facts the style
rules need (layout blocks, declarations, import/export lists, case blocks)
from literal-masked source lines.
"""

from __future__ import annotations

from collections.abc import Sequence

from .declarations import scan_declarations
from .facts import ParsedModule
from .layout import build_blocks, find_case_blocks, find_record_keys


def build_module(codes: Sequence[str]) -> ParsedModule:
    decls = scan_declarations(codes)
    return ParsedModule(
        module_name=decls.module_name,
        module_line=decls.module_line,
        exports=decls.exports,
        imports=decls.imports,
        bindings=decls.bindings,
        data_types=decls.data_types,
        blocks=build_blocks(codes),
        record_keys=find_record_keys(codes),
        case_blocks=find_case_blocks(codes),
    )


__all__ = ["ParsedModule", "build_module"]
