"""
Log records consumed by the netlog formatter.

The writer core never inspects these fields; only the formatter does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


@dataclass(frozen=True)
class LogRecord:
    """Structured log record: level, timestamp, source and message."""

    level: str
    message: str
    source: str = ""
    timestamp: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if not self.level:
            raise ValueError("Log record level cannot be empty")
        if not isinstance(self.timestamp, datetime):
            raise ValueError("Timestamp must be a datetime object")

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "message": self.message,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogRecord:
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        elif isinstance(timestamp, (int, float)):
            timestamp = datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone()
        elif timestamp is None:
            timestamp = _now()
        return cls(
            level=str(data.get("level", "INFO")),
            message=str(data.get("message", "")),
            source=str(data.get("source", "")),
            timestamp=timestamp,
        )

    @classmethod
    def from_stdlib(cls, record: logging.LogRecord) -> LogRecord:
        """Build a record from a stdlib ``logging.LogRecord``.

        The source is ``pathname:lineno`` so that ``%s`` renders the file
        name and line of the call site.
        """
        source = f"{record.pathname}:{record.lineno}" if record.pathname else record.name
        return cls(
            level=record.levelname,
            message=record.getMessage(),
            source=source,
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone(),
        )


__all__ = ["LogRecord"]
