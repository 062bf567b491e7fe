"""
Lock-guarded line cache shared by writer threads and the flush scheduler.

The cache is append-only between drains. A drain swaps the internal list
for a fresh one while holding the lock, so every appended line ends up in
exactly one drained batch.
"""

from __future__ import annotations

import threading


class LineCache:
    """Ordered buffer of formatted lines awaiting transmission.

    ``append`` may be called from any number of threads; ``drain_and_clear``
    is called by the scheduler. Both hold the lock only for the list
    mutation, never across I/O.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: list[str] = []

    def append(self, line: str) -> int:
        """Append ``line`` to the tail and return the new cache length."""
        with self._lock:
            self._lines.append(line)
            return len(self._lines)

    def drain_and_clear(self) -> list[str]:
        """Return all cached lines in append order and reset the cache.

        An empty cache returns ``[]`` and is left untouched.
        """
        with self._lock:
            if not self._lines:
                return []
            lines = self._lines
            self._lines = []
        return lines

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


__all__ = ["LineCache"]
