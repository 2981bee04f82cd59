"""JSON document store for small pieces of on-device state.

Each store owns one file. Writes go to a temp file that replaces the
target, under a FileLock, so a reader never sees a half-written document.
The last written document is cached, so a caller always reads its own
writes even when the file system is slow to reflect them. A
load-modify-store sequence that other processes may race with runs
inside ``locked()``, which re-reads the file once the lock is held.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from filelock import FileLock, Timeout

from .exceptions import StorageError

logger = logging.getLogger(__name__)

_LOCK_TIMEOUT_SECONDS = 5.0


class JsonDocumentStore:
    """Persist one JSON object on disk with read-your-writes caching."""

    def __init__(self, path: Path, *, store_name: Optional[str] = None) -> None:
        self._path = Path(path)
        self._lock = FileLock(str(self._path) + ".lock", timeout=_LOCK_TIMEOUT_SECONDS)
        self._cache: Optional[dict[str, Any]] = None
        self.store_name = store_name or self._path.stem

    @property
    def path(self) -> Path:
        return self._path

    def acquire(self) -> None:
        """Take the file lock and drop the cache so the next load reads the file."""

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._lock.acquire()
        except Timeout as exc:
            raise StorageError(
                f"Timed out waiting for lock on {self._path}", store=self.store_name
            ) from exc
        except OSError as exc:
            raise StorageError(
                f"Cannot lock {self._path}: {exc}", store=self.store_name
            ) from exc
        self._cache = None

    def release(self) -> None:
        self._lock.release()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the file lock across a load-modify-store sequence."""

        self.acquire()
        try:
            yield
        finally:
            self.release()

    def load(self, *, reload: bool = False) -> dict[str, Any]:
        """Load the document. A missing file is an empty document."""

        if reload or self._cache is None:
            try:
                raw = self._path.read_text(encoding="utf-8")
                payload = json.loads(raw)
                if not isinstance(payload, dict):
                    raise ValueError("root is not an object")
            except FileNotFoundError:
                payload = {}
            except (json.JSONDecodeError, ValueError) as exc:
                # A corrupt document is treated as empty; the next write repairs it.
                logger.warning("Discarding unreadable state in %s: %s", self._path, exc)
                payload = {}
            except OSError as exc:
                raise StorageError(
                    f"Cannot read {self._path}: {exc}", store=self.store_name
                ) from exc
            self._cache = payload

        return json.loads(json.dumps(self._cache))

    def store(self, document: dict[str, Any]) -> None:
        """Persist ``document`` atomically."""

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock:
                tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
                tmp_path.write_text(
                    json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True),
                    encoding="utf-8",
                )
                os.replace(tmp_path, self._path)
        except Timeout as exc:
            raise StorageError(
                f"Timed out waiting for lock on {self._path}", store=self.store_name
            ) from exc
        except OSError as exc:
            raise StorageError(
                f"Cannot write {self._path}: {exc}", store=self.store_name
            ) from exc
        self._cache = json.loads(json.dumps(document))

    def clear(self) -> None:
        """Replace the document with an empty one."""
        self.store({})


__all__ = ["JsonDocumentStore"]
