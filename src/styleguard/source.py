from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from .parse import build_module
from .parse.facts import ParsedModule
from .parse.lexer import mask_source, split_lines
from .parse.resolver import NameResolver
from .types import SourceFile, SourceLine

ResolverFactory = Callable[[ParsedModule], NameResolver]


def load_source(path: Path, text: str, resolver_factory: ResolverFactory | None = None) -> SourceFile:
    """Scan ``text`` into a SourceFile; raises ParseError when it cannot be tokenized."""
    codes = mask_source(text)
    lines = tuple(
        SourceLine(number=i, text=raw, code=code)
        for i, (raw, code) in enumerate(zip(split_lines(text), codes, strict=True))
    )
    module = build_module(codes)
    resolver = resolver_factory(module) if resolver_factory is not None else None
    return SourceFile(path=path, lines=lines, module=module, resolver=resolver)
