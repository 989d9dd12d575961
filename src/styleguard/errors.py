from __future__ import annotations

from enum import Enum
from typing import Final


class ErrorCode(str, Enum):
    parse_failed = "parse_failed"
    io_error = "io_error"
    config_invalid = "config_invalid"


_DEFAULT_MESSAGE: Final[dict[ErrorCode, str]] = {
    ErrorCode.parse_failed: "Source could not be parsed.",
    ErrorCode.io_error: "Source file could not be read.",
    ErrorCode.config_invalid: "Invalid configuration.",
}

EXIT_OK: Final[int] = 0
EXIT_VIOLATIONS: Final[int] = 1
EXIT_CONFIG: Final[int] = 2


class StyleguardError(Exception):
    def __init__(self, code: ErrorCode, message: str | None = None) -> None:
        msg = message if message is not None else _DEFAULT_MESSAGE.get(code, "")
        super().__init__(msg)
        self.code = code
        self.message = msg


class ConfigError(StyleguardError):
    """Raised before any file is analyzed; ``key`` names the offending option."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(ErrorCode.config_invalid, f"{key}: {message}")
        self.key = key


class ParseError(StyleguardError):
    def __init__(self, line: int, message: str) -> None:
        super().__init__(ErrorCode.parse_failed, message)
        # Zero-based, like SourceLine.number
        self.line = line


def exit_status_for(code: ErrorCode) -> int:
    if code is ErrorCode.config_invalid:
        return EXIT_CONFIG
    return EXIT_VIOLATIONS
