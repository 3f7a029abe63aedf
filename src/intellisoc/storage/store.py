"""Durable Store - crash-safe persistence of named record collections.

This module provides an interface for collection storage backends,
decoupling the ledger components from specific persistence mechanisms.

Design principles:
- Each collection is a single ordered list of JSON records
- Saves are all-or-nothing (temp file + atomic rename)
- Read-modify-write is serialised per collection, both across threads
  (in-process lock) and across processes (flock on a sidecar lock file)
- Different collections never contend with each other
- Unreadable collections load as empty so readers stay available
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional
import fcntl
import json
import logging
import os
import tempfile
import threading

from intellisoc.common.constants import Collections, StorageConstants
from intellisoc.common.exceptions import StorageError


logger = logging.getLogger(__name__)

Record = Dict[str, Any]
UpdateFn = Callable[[List[Record]], List[Record]]


class DurableStore(ABC):
    """Abstract base class for collection storage backends.

    Lifecycle: construct once per process, ``open()`` at startup, pass the
    instance to every component, ``close()`` at shutdown.
    """

    def open(self) -> "DurableStore":
        """Prepare the backend for use. Returns self."""
        return self

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> "DurableStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def load(self, collection: str) -> List[Record]:
        """Read all records of a collection.

        Args:
            collection: Collection name

        Returns:
            Records in insertion order; empty if the collection is missing
            or cannot be parsed.
        """
        pass

    @abstractmethod
    def save(self, collection: str, records: Iterable[Record]) -> None:
        """Replace a collection's contents atomically.

        Raises:
            StorageError: If the write cannot be completed
        """
        pass

    @abstractmethod
    def update(self, collection: str, fn: UpdateFn) -> List[Record]:
        """Atomically read, transform and write back a collection.

        ``fn`` receives the current records and returns the new list. No
        other ``update`` or ``save`` on the same collection can interleave.

        Returns:
            The records as written

        Raises:
            StorageError: If the write cannot be completed
        """
        pass


class JsonFileStore(DurableStore):
    """File-based store keeping one pretty-printed JSON array per collection.

    Features:
    - ``<data_dir>/<collection>.json`` per collection
    - Atomic replace via a temp file in the same directory
    - Per-collection ``threading.Lock`` plus exclusive ``flock`` on
      ``<collection>.json.lock`` for the whole read-modify-write span
    """

    def __init__(
        self,
        data_dir: str,
        collections: Iterable[str] = Collections.ALL,
        fsync_on_write: bool = False,
        indent: Optional[int] = StorageConstants.JSON_INDENT,
    ):
        """Initialize the store.

        Args:
            data_dir: Directory holding the collection files.
            collections: Collections created empty on ``open()``.
            fsync_on_write: Whether to fsync before the rename (slower but safer).
            indent: JSON indentation for the written files.
        """
        self.data_dir = Path(data_dir)
        self.collections = tuple(collections)
        self.fsync_on_write = fsync_on_write
        self.indent = indent

        # One lock per collection, created on first use
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._opened = False

    def open(self) -> "JsonFileStore":
        """Create the data directory and any missing collection files."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        try:
            os.chmod(self.data_dir, StorageConstants.DATA_DIR_MODE)
        except OSError:
            pass  # May fail on some systems; proceed anyway

        for collection in self.collections:
            with self._exclusive(collection):
                if not self._path(collection).exists():
                    self._write(collection, [])

        self._opened = True
        logger.info(f"JSON file store opened at {self.data_dir}")
        return self

    def close(self) -> None:
        if self._opened:
            self._opened = False
            logger.info(f"JSON file store at {self.data_dir} closed")

    def _path(self, collection: str) -> Path:
        if not collection or os.sep in collection or collection.startswith("."):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.data_dir / f"{collection}.json"

    def _lock_for(self, collection: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = threading.Lock()
                self._locks[collection] = lock
            return lock

    @contextmanager
    def _exclusive(self, collection: str) -> Iterator[None]:
        """Hold the collection's thread lock and cross-process file lock."""
        path = self._path(collection)
        with self._lock_for(collection):
            self.data_dir.mkdir(parents=True, exist_ok=True)
            lock_path = path.with_name(path.name + StorageConstants.LOCK_SUFFIX)
            fd = os.open(
                str(lock_path),
                os.O_RDWR | os.O_CREAT,
                StorageConstants.FILE_MODE,
            )
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(fd, fcntl.LOCK_UN)
            finally:
                os.close(fd)

    def _read(self, collection: str) -> List[Record]:
        path = self._path(collection)
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Could not read collection {collection!r}, treating as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(
                f"Collection {collection!r} is not a JSON array, treating as empty"
            )
            return []
        return data

    def _write(self, collection: str, records: List[Record]) -> None:
        path = self._path(collection)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.data_dir),
            prefix=f"{StorageConstants.TEMP_PREFIX}{collection}-",
            suffix=".json",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=self.indent, default=str)
                f.flush()
                if self.fsync_on_write:
                    os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            logger.error(f"Failed to write collection {collection!r}: {e}")
            raise StorageError(
                f"Failed to write collection {collection!r}",
                collection=collection,
                details={"error": str(e)},
            ) from e

    def load(self, collection: str) -> List[Record]:
        """Read a collection. Readers see either the old or the new file, never a partial one."""
        return self._read(collection)

    def save(self, collection: str, records: Iterable[Record]) -> None:
        records = list(records)
        with self._exclusive(collection):
            self._write(collection, records)

    def update(self, collection: str, fn: UpdateFn) -> List[Record]:
        with self._exclusive(collection):
            current = self._read(collection)
            updated = list(fn(current))
            self._write(collection, updated)
            return updated
