"""Shared JSON-file persistence for the storefront stores."""

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from . import config

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class JsonFileStore:
    """Base class for a store backed by a single JSON document.

    Subclasses set FILENAME and implement empty_document(). Every
    read-modify-write goes through transaction(), which holds an exclusive
    file lock and writes the result atomically.
    """

    FILENAME = "store.json"

    def __init__(self, data_dir: Path | None = None):
        """
        Initialize the store.

        Args:
            data_dir: Override data directory (for testing).
        """
        self.data_dir = Path(data_dir) if data_dir else config.DATA_DIR
        self.path = self.data_dir / self.FILENAME

    def empty_document(self) -> dict[str, Any]:
        return {"schema_version": SCHEMA_VERSION}

    def exists(self) -> bool:
        return self.path.exists()

    def _ensure_dir(self) -> None:
        """Ensure data directory exists."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _lock(self) -> Iterator[None]:
        """Acquire exclusive lock on the store file for read-modify-write operations."""
        self._ensure_dir()
        lock_path = self.data_dir / f".{self.path.stem}.lock"
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _load_data(self) -> dict[str, Any]:
        """Load the document from disk."""
        if not self.path.exists():
            return self.empty_document()

        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save_data(self, data: dict[str, Any]) -> None:
        """Save the document to disk atomically."""
        self._ensure_dir()

        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=f".{self.path.stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
        logger.debug("Wrote %s", self.path)

    @contextmanager
    def transaction(self) -> Iterator[dict[str, Any]]:
        """Yield the document under lock and save it if the block succeeds."""
        with self._lock():
            data = self._load_data()
            yield data
            self._save_data(data)

    def _next_id(self, data: dict[str, Any], key: str) -> int:
        """Allocate the next numeric ID for a collection."""
        next_id = data.get(key, 1)
        data[key] = next_id + 1
        return next_id
