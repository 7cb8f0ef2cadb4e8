"""Background worker for recursive extension census scans."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtensionScanRequest:
    """One census job for ``root``, tagged with the mutation generation it started in."""

    request_id: int
    root: Path
    generation: int


@dataclass(frozen=True)
class ExtensionScanResult:
    """Completed census from the background worker."""

    request: ExtensionScanRequest
    counts: dict[str, int]


class ExtensionScanScheduler:
    """Single-threaded latest-request-wins scan scheduler."""

    def __init__(self, scan_extensions: Callable[[Path], dict[str, int]]) -> None:
        self._scan_extensions = scan_extensions
        self._lock = threading.Lock()
        self._pending: ExtensionScanRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._results: Queue[ExtensionScanResult] = Queue()
        self._idle = threading.Event()
        self._idle.set()

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    self._idle.set()
                    return

            try:
                counts = self._scan_extensions(request.root)
            except Exception:
                logger.exception("Extension scan of %s failed", request.root)
                continue
            self._results.put(ExtensionScanResult(request=request, counts=counts))

    def schedule(self, root: Path, generation: int) -> int:
        """Queue or replace pending scan work and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending = ExtensionScanRequest(request_id=request_id, root=root, generation=generation)
            if self._running:
                return request_id
            self._running = True
            self._idle.clear()

        worker = threading.Thread(
            target=self._worker,
            name="lazyselect-extension-scan",
            daemon=True,
        )
        worker.start()
        return request_id

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no scan is running or pending."""
        return self._idle.wait(timeout)

    def drain_results(self) -> list[ExtensionScanResult]:
        """Drain all completed scan results."""
        out: list[ExtensionScanResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "ExtensionScanRequest",
    "ExtensionScanResult",
    "ExtensionScanScheduler",
]
