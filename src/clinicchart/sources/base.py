"""Base helpers for clinic data sources: locator resolution and line reading."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

REMOTE_PREFIXES = ("http://", "https://")


class FormatError(ValueError):
    """Raised when a clinic data file is malformed. Aborts the whole load."""


def is_remote(locator: str) -> bool:
    return locator.lower().startswith(REMOTE_PREFIXES)


def resolve_path(locator: str) -> Path:
    """Turn an input locator into a local file path.

    Windows-style separators are normalized to '/'. Remote (http/https)
    locators are not supported.
    """
    if not locator or not locator.strip():
        raise ValueError("Input locator cannot be empty.")
    if is_remote(locator):
        raise ValueError(f"Remote sources are not supported: {locator}")
    path = Path(locator.strip().replace("\\", "/"))
    if not path.is_file():
        raise FileNotFoundError(f"Clinic data file not found: {locator}")
    return path


def read_lines(locator: str) -> Iterator[str]:
    """Yield the lines of a local clinic data file without line endings."""
    path = resolve_path(locator)
    with open(path, encoding="utf-8") as f:
        for line in f:
            yield line.rstrip("\r\n")
