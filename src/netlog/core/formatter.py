"""
Template formatter for log records.

Templates use ``%`` tokens:

- ``%T`` time (``HH:MM:SS TZ``), ``%t`` short time (``HH:MM``)
- ``%D`` date (``YYYY/MM/DD``), ``%d`` short date (``MM/DD/YY``)
- ``%L`` four-letter level code (``DEBG``, ``INFO``, ``WARN``, ``EROR``...)
- ``%S`` source, ``%s`` short source (text after the last ``/``)
- ``%M`` message, ``%%`` a literal percent sign

Unknown tokens are copied to the output unchanged.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

from .levels import short_code
from .records import LogRecord

DEFAULT_FORMAT = "[%D %T] [%L] (%S) %M"

_Piece = Callable[[LogRecord], str]


def _short_source(record: LogRecord) -> str:
    return record.source.rsplit("/", 1)[-1]


_TOKENS: dict[str, _Piece] = {
    "T": lambda r: r.timestamp.strftime("%H:%M:%S %Z").rstrip(),
    "t": lambda r: r.timestamp.strftime("%H:%M"),
    "D": lambda r: r.timestamp.strftime("%Y/%m/%d"),
    "d": lambda r: r.timestamp.strftime("%m/%d/%y"),
    "L": lambda r: short_code(r.level),
    "S": lambda r: r.source,
    "s": _short_source,
    "M": lambda r: r.message,
}


def _literal(text: str) -> _Piece:
    return lambda _r: text


@lru_cache(maxsize=64)
def compile_template(template: str) -> tuple[_Piece, ...]:
    """Split a template into literal and token renderers."""
    pieces: list[_Piece] = []
    buf: list[str] = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "%" and i + 1 < n:
            token = template[i + 1]
            if token == "%":
                buf.append("%")
            elif token in _TOKENS:
                if buf:
                    pieces.append(_literal("".join(buf)))
                    buf = []
                pieces.append(_TOKENS[token])
            else:
                buf.append(ch + token)
            i += 2
            continue
        buf.append(ch)
        i += 1
    if buf:
        pieces.append(_literal("".join(buf)))
    return tuple(pieces)


def format_record(template: str, record: LogRecord) -> str:
    """Render ``record`` with ``template``. An empty template gives ``""``."""
    if not template:
        return ""
    return "".join(piece(record) for piece in compile_template(template))


class Formatter:
    """Callable formatter bound to one template."""

    def __init__(self, template: str = DEFAULT_FORMAT) -> None:
        self._template = template

    @property
    def template(self) -> str:
        return self._template

    def __call__(self, record: LogRecord) -> str:
        return format_record(self._template, record)


__all__ = ["DEFAULT_FORMAT", "Formatter", "compile_template", "format_record"]
