"""Four-letter level codes rendered by ``%L``.

Codes follow log4go (``DEBG``, ``EROR`` ...) so log servers that parse
those columns keep working. Applications may register codes for their own
level names.

Example:
    from netlog.core.levels import register_level, short_code

    register_level("AUDIT", code="AUDT")
    short_code("warning")  # "WARN"
"""

from __future__ import annotations

from typing import Final

_DEFAULT_CODES: Final[dict[str, str]] = {
    "FINEST": "FNST",
    "FINE": "FINE",
    "DEBUG": "DEBG",
    "TRACE": "TRAC",
    "INFO": "INFO",
    "WARNING": "WARN",
    "WARN": "WARN",  # alias
    "ERROR": "EROR",
    "CRITICAL": "CRIT",
    "FATAL": "CRIT",  # alias
}

_custom_codes: dict[str, str] = {}


def register_level(name: str, *, code: str | None = None) -> None:
    """Register a custom level name and its ``%L`` code.

    Args:
        name: Level name (e.g., "AUDIT"). Will be uppercased.
        code: Four-letter code rendered by ``%L``. Defaults to the first
              four characters of the name.

    Raises:
        ValueError: If the name already exists or the code is not exactly
                    four characters.
    """
    name_upper = name.upper()

    if name_upper in _DEFAULT_CODES or name_upper in _custom_codes:
        raise ValueError(f"Level '{name_upper}' already exists")

    resolved = (code or name_upper[:4]).upper()
    if len(resolved) != 4:
        raise ValueError(f"Level code must be 4 characters, got {resolved!r}")

    _custom_codes[name_upper] = resolved


def short_code(level: str) -> str:
    """Return the four-letter code for a level name.

    Unknown levels are rendered as their first four uppercase characters,
    padded with spaces, so formatted lines keep a fixed-width level column.
    """
    level_upper = level.upper()
    if level_upper in _custom_codes:
        return _custom_codes[level_upper]
    if level_upper in _DEFAULT_CODES:
        return _DEFAULT_CODES[level_upper]
    return level_upper[:4].ljust(4)


def _reset_registry() -> None:
    """Reset the registry to initial state (for testing only)."""
    _custom_codes.clear()
