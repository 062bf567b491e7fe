from .cache import LineCache
from .formatter import DEFAULT_FORMAT, Formatter, format_record
from .records import LogRecord
from .scheduler import FlushScheduler
from .settings import Settings, WriterConfig
from .writer import NetLogWriter

__all__ = [
    "DEFAULT_FORMAT",
    "FlushScheduler",
    "Formatter",
    "LineCache",
    "LogRecord",
    "NetLogWriter",
    "Settings",
    "WriterConfig",
    "format_record",
]
