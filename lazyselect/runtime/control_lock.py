"""Single control lock serializing engine operations.

All structural state is mutated while holding this lock. It also carries
the cascade guard: a selection cascade triggered while another one is
running (a presentation echo of a checkbox change) is refused.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ControlLock:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._in_cascade = False

    @property
    def in_cascade(self) -> bool:
        return self._in_cascade

    @contextmanager
    def held(self) -> Iterator[None]:
        with self._lock:
            yield

    @contextmanager
    def cascade(self) -> Iterator[bool]:
        """Enter the cascade guard; yields ``False`` when a cascade is already running."""
        with self._lock:
            if self._in_cascade:
                yield False
                return
            self._in_cascade = True
            try:
                yield True
            finally:
                self._in_cascade = False


__all__ = ["ControlLock"]
