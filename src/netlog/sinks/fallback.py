"""Stderr fallback for batches the HTTP sender had to drop.

Only used when ``fallback_on_failure`` is enabled on the writer; the
default policy drops failed batches silently.
"""

from __future__ import annotations

import json
import sys
from typing import Sequence, TextIO


def _serialize_entry(entry: dict[str, object]) -> str:
    try:
        return json.dumps(entry, separators=(",", ":"), default=str)
    except Exception:
        try:
            return json.dumps({"message": str(entry)}, separators=(",", ":"))
        except Exception:
            return '{"message":"unserializable"}'


def write_batch_to_stderr(
    app_name: str,
    lines: Sequence[str],
    *,
    reason: str,
    stream: TextIO | None = None,
) -> int:
    """Write each line of a dropped batch as one JSON object per line.

    Returns the number of lines written. Errors writing to the stream are
    contained.
    """
    out = stream or sys.stderr
    written = 0
    try:
        for line in lines:
            out.write(
                _serialize_entry(
                    {"app": app_name, "line": line, "fallback_reason": reason}
                )
            )
            out.write("\n")
            written += 1
        out.flush()
    except Exception:
        return written
    return written


__all__ = ["write_batch_to_stderr"]
