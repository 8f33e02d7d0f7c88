"""A JSON array stored in one file, shared by the JSON repositories.

Every CLI call is its own process, so reads and writes take two locks: a
per-path ``RLock`` for threads of this process and a ``FileLock`` next to
the file for other processes. A read-compare-write sequence (``update``)
holds both for its whole duration. Writes go to a temporary file that
replaces the original, so readers never see a half-written file.
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from decimal import InvalidOperation
from pathlib import Path
from typing import TypeVar

import structlog
from filelock import FileLock, Timeout

from rms.domain.exceptions import StorageError, ValidationError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

FILE_LOCK_TIMEOUT_SECONDS = 10.0

# What a stored record that does not decode raises.
MALFORMED_RECORD_ERRORS = (KeyError, TypeError, ValueError, InvalidOperation, ValidationError)

_PATH_LOCKS: dict[Path, tuple[threading.RLock, FileLock]] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _locks_for(path: Path) -> tuple[threading.RLock, FileLock]:
    with _PATH_LOCKS_GUARD:
        if path not in _PATH_LOCKS:
            _PATH_LOCKS[path] = (
                threading.RLock(),
                FileLock(f"{path}.lock", timeout=FILE_LOCK_TIMEOUT_SECONDS),
            )
        return _PATH_LOCKS[path]


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path.resolve()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock, self._file_lock = _locks_for(self._file_path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> list[dict]:
        with self._exclusive():
            try:
                records = json.loads(self._file_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise StorageError(f"Cannot read {self._file_path.name}: {exc}") from exc
        if not isinstance(records, list):
            raise StorageError(f"Cannot read {self._file_path.name}: expected a JSON array")
        return records

    def persist(self, records: list[dict]) -> None:
        with self._exclusive():
            tmp = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
            try:
                tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
                os.replace(tmp, self._file_path)
            except OSError as exc:
                raise StorageError(f"Cannot write {self._file_path.name}: {exc}") from exc

    def update(self, change: Callable[[list[dict]], T]) -> T:
        """Load, let ``change`` mutate the records in place, persist.

        Holds both locks for the whole sequence. ``change`` returns a value
        that is passed back; returning False skips the write.
        """
        with self._exclusive():
            records = self.load()
            with self.malformed():
                outcome = change(records)
            if outcome is not False:
                self.persist(records)
            return outcome

    def decode(self, raw: dict, convert: Callable[[dict], T]) -> T:
        with self.malformed():
            return convert(raw)

    @contextmanager
    def malformed(self) -> Iterator[None]:
        """Report a stored record that cannot be decoded as a StorageError."""
        try:
            yield
        except MALFORMED_RECORD_ERRORS as exc:
            logger.error("Malformed record", file=self._file_path.name, error=repr(exc))
            raise StorageError(
                f"Malformed record in {self._file_path.name}: {exc!r}"
            ) from exc

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as exc:
                raise StorageError(
                    f"{self._file_path.name} is locked by another process"
                ) from exc
            try:
                yield
            finally:
                self._file_lock.release()

    def _ensure_file(self) -> None:
        with self._exclusive():
            if not self._file_path.exists():
                self._file_path.write_text("[]", encoding="utf-8")
