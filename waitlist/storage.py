"""Append-only CSV storage for waitlist records.

The store owns a single CSV file. Each ``append`` call is one critical
section guarded by a per-path ``threading.Lock`` (shared by every store
in the process that points at the same file) and a ``FileLock`` sidecar
for deployments that run several worker processes. Inside the lock the
store decides whether the header is needed, writes the header and the
row, and fsyncs. A failed write truncates the file back to its previous
length, or removes it when this call created it, so readers never see a
partial row.
"""

import csv
import io
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from filelock import FileLock, Timeout

from waitlist.domain import CSV_HEADER, WaitlistRecord
from waitlist.errors import (
    DirectoryCreateFailed,
    DirectoryUnwritable,
    FileUnwritable,
    OpenFailed,
    WriteFailed,
)

logger = logging.getLogger(__name__)

ENCODING = "utf-8"

_path_locks: dict[str, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """Return the process-wide lock for a storage path."""
    key = str(path.resolve())
    with _registry_lock:
        return _path_locks.setdefault(key, threading.Lock())


def format_row(values: Iterable[str]) -> str:
    """Serialize one CSV line (minimal quoting, doubled quotes, ``\\n`` ending)."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(values)
    return buffer.getvalue()


def _write_all(handle, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = handle.write(view)
        view = view[written:]


class WaitlistStore:
    """CSV file that accepts one waitlist row per call.

    Example:
        store = WaitlistStore("media/waitlist.csv")
        store.ensure_ready()
        store.append(record)
    """

    def __init__(
        self,
        path: str | Path,
        lock_timeout: float = 10.0,
        fsync: bool = True,
        dir_mode: int = 0o775,
    ):
        """Initialize the store.

        Args:
            path: CSV file location
            lock_timeout: Seconds to wait for the inter-process lock
            fsync: Flush rows to disk before returning
            dir_mode: Permission bits for a newly created directory
        """
        self._path = Path(path)
        self._fsync = fsync
        self._dir_mode = dir_mode
        self._lock = _lock_for(self._path)
        self._file_lock = FileLock(f"{self._path}.lock", timeout=lock_timeout)

    @property
    def path(self) -> Path:
        """Location of the CSV file."""
        return self._path

    def ensure_ready(self) -> None:
        """Verify or create the directory that holds the CSV file.

        Raises:
            DirectoryUnwritable: The directory exists but cannot be written
            DirectoryCreateFailed: The directory is missing and mkdir failed
        """
        directory = self._path.parent
        if directory.is_dir():
            if not os.access(directory, os.W_OK | os.X_OK):
                logger.error(
                    "Storage directory is not writable: %s (mode %o)",
                    directory,
                    directory.stat().st_mode & 0o777,
                )
                raise DirectoryUnwritable(directory)
            return

        logger.info("Storage directory missing, creating %s", directory)
        try:
            directory.mkdir(mode=self._dir_mode, parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreateFailed(directory) from exc

    def append(self, record: WaitlistRecord) -> None:
        """Append one record, writing the header first on a new file.

        Args:
            record: Validated record to store

        Raises:
            FileUnwritable: The CSV file exists without write permission
            OpenFailed: The lock or the file could not be acquired
            WriteFailed: Header or row write failed (file rolled back)
        """
        row = format_row(record.to_row()).encode(ENCODING)
        with self._locked():
            self._append_locked(row)

    def save(self, record: WaitlistRecord) -> None:
        """Prepare the directory and append the record."""
        self.ensure_ready()
        self.append(record)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as exc:
                raise OpenFailed(self._path, "Timed out waiting for the CSV file lock") from exc
            except OSError as exc:
                raise OpenFailed(self._path) from exc
            try:
                yield
            finally:
                self._file_lock.release()

    def _append_locked(self, row: bytes) -> None:
        exists = self._path.exists()
        if exists and not os.access(self._path, os.W_OK):
            logger.error(
                "CSV file exists but is not writable: %s (mode %o)",
                self._path,
                self._path.stat().st_mode & 0o777,
            )
            raise FileUnwritable(self._path)

        try:
            handle = open(self._path, "ab", buffering=0)
        except OSError as exc:
            raise OpenFailed(self._path) from exc

        try:
            with handle:
                start = os.fstat(handle.fileno()).st_size
                # A pre-existing empty file also gets the header
                is_new_file = start == 0
                reason = "Failed to write CSV data"
                try:
                    if is_new_file:
                        reason = "Failed to write CSV headers"
                        _write_all(handle, format_row(CSV_HEADER).encode(ENCODING))
                        logger.debug("Header written to %s", self._path)
                        reason = "Failed to write CSV data"
                    _write_all(handle, row)
                    if self._fsync:
                        os.fsync(handle.fileno())
                except OSError as exc:
                    self._rollback(handle, start)
                    raise WriteFailed(self._path, reason) from exc
        except WriteFailed:
            if not exists:
                self._discard()
            raise

        logger.debug("Row appended to %s (%d bytes)", self._path, len(row))

    def _rollback(self, handle, size: int) -> None:
        try:
            handle.truncate(size)
        except OSError:
            logger.exception("Could not roll %s back to %d bytes", self._path, size)

    def _discard(self) -> None:
        """Remove a file this call created but could not fill."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Could not remove %s after a failed first write", self._path)
