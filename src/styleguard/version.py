from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VersionInfo:
    name: str
    version: str


def get_version() -> VersionInfo:
    return VersionInfo(name="styleguard", version=_pkg_version())


def _pkg_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("styleguard")
    except PackageNotFoundError as exc:
        from .logging import get_logger

        get_logger().warning("pkg_version_fallback error=%s", exc)
        return "0+unknown"
