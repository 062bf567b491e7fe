"""
Error taxonomy for netlog.

Errors are raised inside the sender boundary and converted into
``TransmitResult`` values there; only configuration errors ever reach a
caller, and only at construction time.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    TRANSPORT = "transport"
    SERIALIZATION = "serialization"
    CONFIGURATION = "configuration"


class NetlogError(Exception):
    """Base class for all netlog errors."""

    category: ErrorCategory = ErrorCategory.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = dict(context)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "category": self.category.value,
            "message": self.message,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        data.update(self.context)
        return data


class TransportError(NetlogError):
    """The HTTP request could not be built or completed."""

    category = ErrorCategory.TRANSPORT


class BatchSerializationError(NetlogError):
    """A batch could not be encoded as a JSON array of strings."""

    category = ErrorCategory.SERIALIZATION


class ConfigurationError(NetlogError):
    """Writer configuration failed validation."""

    category = ErrorCategory.CONFIGURATION


__all__ = [
    "BatchSerializationError",
    "ConfigurationError",
    "ErrorCategory",
    "NetlogError",
    "TransportError",
]
