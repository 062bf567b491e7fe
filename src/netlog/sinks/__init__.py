from __future__ import annotations

from .fallback import write_batch_to_stderr
from .http_form import HttpFormSender, TransmitResult

__all__ = [
    "HttpFormSender",
    "TransmitResult",
    "write_batch_to_stderr",
]
