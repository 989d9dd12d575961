from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Final

from .errors import ConfigError
from .types import Category

_DEFAULT_CONFIG_PATH: Final[Path] = Path("styleguard.toml")
_TABLE: Final[str] = "styleguard"
_ENV_PREFIX: Final[str] = "STYLEGUARD__"
_ENV_INT: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class RuleConfig:
    max_line_length: int = 80
    indent_size: int = 2
    nested_indent_size: int = 4
    max_arrow_indent_threshold: int = 10
    max_matcher_body_lines: int = 3
    enabled_categories: frozenset[Category] = field(default_factory=lambda: frozenset(Category))
    disabled_rules: frozenset[str] = frozenset()
    # Empty: the root segment of each checked file's own module name
    local_module_prefixes: tuple[str, ...] = ()


@dataclass(frozen=True)
class RunConfig:
    source_extensions: tuple[str, ...] = (".purs",)
    workers: int = 0


# option key -> (section, attribute, minimum)
_INT_OPTIONS: Final[dict[str, tuple[str, str, int]]] = {
    "maxLineLength": ("rules", "max_line_length", 1),
    "indentSize": ("rules", "indent_size", 1),
    "nestedIndentSize": ("rules", "nested_indent_size", 1),
    "maxArrowIndentThreshold": ("rules", "max_arrow_indent_threshold", 0),
    "maxMatcherBodyLines": ("rules", "max_matcher_body_lines", 1),
    "workers": ("run", "workers", 0),
}
_LIST_OPTIONS: Final[frozenset[str]] = frozenset(
    {"enabledRuleCategories", "disabledRules", "localModulePrefixes", "sourceExtensions"}
)


def env_name(key: str) -> str:
    """``maxLineLength`` -> ``STYLEGUARD__MAX_LINE_LENGTH``."""
    out = "".join(f"_{c}" if c.isupper() else c.upper() for c in key)
    return _ENV_PREFIX + out


_ENV_KEYS: Final[dict[str, str]] = {env_name(k): k for k in (*_INT_OPTIONS, *_LIST_OPTIONS)}


@dataclass(frozen=True)
class Settings:
    rules: RuleConfig
    run: RunConfig

    @staticmethod
    def _toml_path(explicit: Path | None) -> tuple[Path, bool]:
        if explicit is not None:
            return explicit, True
        env_val = os.getenv("STYLEGUARD_CONFIG")
        if env_val:
            return Path(env_val), True
        return _DEFAULT_CONFIG_PATH, False

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Defaults, then ``STYLEGUARD__*`` environment, then the TOML file.

        Every problem raises :class:`ConfigError` naming the offending key.
        """
        base = _apply_all(cls(rules=RuleConfig(), run=RunConfig()), _env_options(), source="env")
        cfg_path, required = cls._toml_path(path)
        if not cfg_path.exists():
            if required:
                raise ConfigError(str(cfg_path), "config file not found")
            return base
        try:
            raw: object = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(str(cfg_path), f"failed to read config: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(str(cfg_path), f"invalid TOML: {exc}") from exc
        return _apply_all(base, _toml_table(raw), source="toml")


def _env_options() -> dict[str, object]:
    out: dict[str, object] = {}
    for name, val in os.environ.items():
        if not name.startswith(_ENV_PREFIX):
            continue
        key = _ENV_KEYS.get(name)
        if key is None:
            raise ConfigError(name, "unknown option")
        if key in _LIST_OPTIONS:
            out[key] = [part.strip() for part in val.split(",") if part.strip()]
        else:
            stripped = val.strip()
            if not _ENV_INT.fullmatch(stripped):
                raise ConfigError(name, f"expected an integer, got {val!r}")
            out[key] = int(stripped)
    return out


def _toml_table(raw: object) -> dict[str, object]:
    if not isinstance(raw, dict):
        return {}
    for key in raw:
        if key != _TABLE:
            raise ConfigError(str(key), "unknown table")
    tab: object = raw.get(_TABLE, {})
    if not isinstance(tab, dict):
        raise ConfigError(_TABLE, "expected a table")
    return {str(k): v for k, v in tab.items()}


def _apply_all(settings: Settings, options: Mapping[str, object], source: str) -> Settings:
    out = settings
    for key in sorted(options):
        out = _apply(out, key, options[key], source)
    return out


def _apply(settings: Settings, key: str, value: object, source: str) -> Settings:
    label = env_name(key) if source == "env" else key
    if key in _INT_OPTIONS:
        section, attr, minimum = _INT_OPTIONS[key]
        num = _coerce_int(label, value, minimum)
        if section == "rules":
            return replace(settings, rules=replace(settings.rules, **{attr: num}))
        return replace(settings, run=replace(settings.run, **{attr: num}))
    if key == "enabledRuleCategories":
        cats = _coerce_categories(label, value)
        return replace(settings, rules=replace(settings.rules, enabled_categories=cats))
    if key == "disabledRules":
        ids = _coerce_rule_ids(label, value)
        return replace(settings, rules=replace(settings.rules, disabled_rules=ids))
    if key == "localModulePrefixes":
        prefixes = tuple(_coerce_str_list(label, value))
        return replace(settings, rules=replace(settings.rules, local_module_prefixes=prefixes))
    if key == "sourceExtensions":
        exts = tuple(e if e.startswith(".") else f".{e}" for e in _coerce_str_list(label, value))
        if not exts:
            raise ConfigError(label, "at least one extension is required")
        return replace(settings, run=replace(settings.run, source_extensions=exts))
    raise ConfigError(label, "unknown option")


def _coerce_int(label: str, value: object, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(label, f"expected an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(label, f"must be >= {minimum}, got {value}")
    return value


def _coerce_str_list(label: str, value: object) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError(label, "expected a list of strings")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(label, f"expected a string, got {item!r}")
        out.append(item)
    return out


def _coerce_categories(label: str, value: object) -> frozenset[Category]:
    known = {c.value: c for c in Category}
    cats: set[Category] = set()
    for item in _coerce_str_list(label, value):
        cat = known.get(item)
        if cat is None:
            raise ConfigError(label, f"unknown category {item!r}")
        cats.add(cat)
    return frozenset(cats)


def _coerce_rule_ids(label: str, value: object) -> frozenset[str]:
    from .rules.table import RULE_IDS

    ids = _coerce_str_list(label, value)
    for rule_id in ids:
        if rule_id not in RULE_IDS:
            raise ConfigError(label, f"unknown rule {rule_id!r}")
    return frozenset(ids)
