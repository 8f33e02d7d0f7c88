"""Per-key mutual exclusion for check-then-act sequences.

Availability checks and order writes on the same item must be linearizable.
Each item id gets its own lock; acquiring it is bounded by a timeout so a
stuck request fails cleanly before writing anything.

Given a ``lock_dir``, the table also takes a ``FileLock`` per item there,
which extends the exclusion to every process sharing that directory (each
CLI call is a separate process with its own table).
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog
from filelock import FileLock, Timeout

from rms.domain.exceptions import OperationTimeoutError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class KeyedLock:

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        lock_dir: Path | None = None,
    ) -> None:
        self._timeout = timeout
        self._lock_dir = lock_dir
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        if lock_dir is not None:
            lock_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())

        deadline = time.monotonic() + self._timeout
        if not lock.acquire(timeout=self._timeout):
            self._timed_out(key)
        try:
            if self._lock_dir is None:
                yield
                return
            file_lock = FileLock(
                self._lock_dir / f"item-{key}.lock",
                timeout=max(deadline - time.monotonic(), 0),
            )
            try:
                file_lock.acquire()
            except Timeout:
                self._timed_out(key)
            try:
                yield
            finally:
                file_lock.release()
        finally:
            lock.release()

    def _timed_out(self, key: str) -> None:
        logger.warning("Lock wait timed out", key=key, timeout=self._timeout)
        raise OperationTimeoutError(f"Item '{key}' is busy, try again in a moment")
