"""
Key-value persistence for MedStudy.

The study store only needs two operations from its collaborator:

    get(key) -> str | None
    set(key, value) -> bool

JsonFileStore keeps one file per key under a data directory
(<base_dir>/<key>.json). MemoryStore is dict-backed with an
optional size quota, for tests and embedding.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger


@runtime_checkable
class KeyValueStore(Protocol):
    """String-keyed store the StudyStore persists through."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""
        ...

    def set(self, key: str, value: str) -> bool:
        """Store a value. Returns False if the write failed."""
        ...


class JsonFileStore:
    """
    File-backed key-value store.

    Values are written to a temporary file in the same directory and then
    moved over the target, so a failed write leaves the previous value
    in place.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        filepath = self.path_for(key)
        if not filepath.exists():
            return None

        try:
            return filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {filepath}: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        filepath = self.path_for(key)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self.base_dir
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, filepath)
            tmp_name = None
        except OSError as e:
            logger.error(f"Failed to write {filepath}: {e}")
            return False
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Wrote {len(value)} chars to {filepath}")
        return True


class MemoryStore:
    """
    In-memory key-value store.

    Args:
        quota: Maximum value length in characters; larger writes fail
            the way a full browser storage quota would.
    """

    def __init__(self, quota: int | None = None, initial: dict[str, str] | None = None):
        self.quota = quota
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> bool:
        if self.quota is not None and len(value) > self.quota:
            logger.error(f"Quota exceeded for '{key}': {len(value)} > {self.quota}")
            return False
        self._items[key] = value
        return True

    def __contains__(self, key: str) -> bool:
        return key in self._items
