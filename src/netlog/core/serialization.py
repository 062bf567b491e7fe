"""
Wire encoding for log batches.

A batch travels as an ``application/x-www-form-urlencoded`` body with two
fields: ``app`` (the application name, verbatim) and ``logs`` (a compact
JSON array of formatted lines). JSON is produced with orjson.
"""

from __future__ import annotations

from typing import Sequence
from urllib.parse import parse_qs, urlencode

import orjson

from .errors import BatchSerializationError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def serialize_lines(lines: Sequence[str]) -> bytes:
    """Serialize lines to a compact JSON array.

    Raises:
        BatchSerializationError: if any element is not a string or cannot
            be encoded (e.g. lone surrogates).
    """
    for line in lines:
        if not isinstance(line, str):
            raise BatchSerializationError(
                "Batch lines must be strings",
                line_type=type(line).__name__,
            )
    try:
        return orjson.dumps(list(lines))
    except (TypeError, orjson.JSONEncodeError) as e:
        raise BatchSerializationError("Batch serialization failed", cause=e) from e


def build_form_body(app_name: str, lines: Sequence[str]) -> bytes:
    """Encode ``app`` and ``logs`` as a form body, keys in sorted order."""
    logs = serialize_lines(lines).decode("utf-8")
    return urlencode(sorted({"app": app_name, "logs": logs}.items())).encode("ascii")


def parse_form_body(body: bytes | str) -> tuple[str, list[str]]:
    """Decode a form body produced by :func:`build_form_body`.

    Returns the application name and the ordered list of lines.
    """
    text = body.decode("ascii") if isinstance(body, bytes) else body
    fields = parse_qs(text, keep_blank_values=True, strict_parsing=True)
    app = fields["app"][0]
    logs = orjson.loads(fields["logs"][0])
    if not isinstance(logs, list):
        raise BatchSerializationError("logs field is not a JSON array")
    return app, [str(line) for line in logs]


__all__ = [
    "FORM_CONTENT_TYPE",
    "build_form_body",
    "parse_form_body",
    "serialize_lines",
]
