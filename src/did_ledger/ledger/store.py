"""Key-value stores backing the identity ledger.

:class:`KeyValueStore` is the seam to the external ledger. Two
implementations ship with the package:

``InMemoryStore``
    A dict guarded by a :class:`threading.Lock`. Suitable for tests and
    embedding.
``FileStore``
    A single JSON file mapping keys to UTF-8 document text, atomically
    replaced on every mutation. Suitable for the command line and
    development use.

Every store reports I/O failures as :class:`~did_ledger.errors.StorageError`.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from did_ledger.errors import StorageError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """The operations the ledger needs from its backing store."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or ``None`` when *key* is absent."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove *key*. Removing an absent key is not an error."""
        ...


class InMemoryStore:
    """Thread-safe in-memory key-value store."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Return a sorted list of all stored keys."""
        with self._lock:
            return sorted(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class FileStore:
    """Key-value store persisted to a single JSON file.

    The file holds one JSON object whose keys are the store keys and whose
    values are the stored bytes decoded as UTF-8 text. A missing file is an
    empty store.

    Parameters
    ----------
    path:
        Location of the JSON file. Parent directories must exist.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            text = self._load().get(key)
        return None if text is None else text.encode("utf-8")

    def put(self, key: str, value: bytes) -> None:
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StorageError(f"value for {key!r} is not UTF-8 text: {exc}") from exc
        with self._lock:
            data = self._load()
            data[key] = text
            self._save(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._save(data)

    def keys(self) -> list[str]:
        """Return a sorted list of all stored keys."""
        with self._lock:
            return sorted(self._load())

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read store file %s: %s", self.path, exc)
            raise StorageError(f"failed to read {self.path}: {exc}") from exc
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.warning("Store file %s is corrupt: %s", self.path, exc)
            raise StorageError(f"store file {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict) or not all(
            isinstance(value, str) for value in data.values()
        ):
            raise StorageError(
                f"store file {self.path} must hold a JSON object of strings"
            )
        return data

    def _save(self, data: dict[str, str]) -> None:
        # Write a sibling temp file and swap it in; the store file is never
        # left half-written.
        text = json.dumps(data, indent=2, sort_keys=True)
        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self.path)
        except OSError as exc:
            if temp_name is not None:
                Path(temp_name).unlink(missing_ok=True)
            logger.warning("Could not write store file %s: %s", self.path, exc)
            raise StorageError(f"failed to write {self.path}: {exc}") from exc
