from __future__ import annotations

from styleguard.errors import (
    EXIT_CONFIG,
    EXIT_VIOLATIONS,
    ConfigError,
    ErrorCode,
    ParseError,
    StyleguardError,
    exit_status_for,
)


def test_default_message() -> None:
    err = StyleguardError(ErrorCode.io_error)
    assert err.message == "Source file could not be read."
    assert str(err) == err.message


def test_config_error_names_key() -> None:
    err = ConfigError("maxLineLength", "must be >= 1, got 0")
    assert err.code is ErrorCode.config_invalid
    assert err.key == "maxLineLength"
    assert err.message == "maxLineLength: must be >= 1, got 0"


def test_parse_error_carries_line() -> None:
    err = ParseError(4, "unterminated string literal")
    assert err.code is ErrorCode.parse_failed
    assert err.line == 4


def test_exit_status_for() -> None:
    assert exit_status_for(ErrorCode.config_invalid) == EXIT_CONFIG
    assert exit_status_for(ErrorCode.parse_failed) == EXIT_VIOLATIONS
    assert exit_status_for(ErrorCode.io_error) == EXIT_VIOLATIONS
