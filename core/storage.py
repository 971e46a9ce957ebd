"""Durable store adapter: snapshot persistence for the engine's stores.

Each store keeps its full state in memory and writes a JSON snapshot under a
named key after every mutation. Loading tolerates a missing snapshot (first
run), a corrupt one, and snapshots written by older or newer shapes of the
model (unknown keys ignored, missing keys default-filled).

Durability is best-effort: a process crash between a mutation and the write
landing on disk loses that write. Save errors are logged, never raised, so
the in-memory state stays authoritative for the running session.
"""

from __future__ import annotations

import functools
import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, TypeVar

from core.fileio import read_text, write_text_atomic
from core.workspace import Clock, SystemClock

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# ── Backends ──────────────────────────────────────────────────


class StorageBackend:
    """Key -> text storage. Subclasses implement read and write."""

    def read(self, key: str) -> str | None:
        raise NotImplementedError

    def write(self, key: str, text: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        """Block until every accepted write has been handed to storage."""

    def close(self) -> None:
        self.flush()


class MemoryBackend(StorageBackend):
    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, text: str) -> None:
        self.data[key] = text


class JsonFileBackend(StorageBackend):
    """One <key>.json file per store inside *directory*, written atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return read_text(path)

    def write(self, key: str, text: str) -> None:
        write_text_atomic(self.path_for(key), text)


class WriteBehindBackend(StorageBackend):
    """Queue writes onto a single worker thread so callers never wait on disk.

    Writes for all keys go through one worker, so they land in the order they
    were issued.
    """

    def __init__(self, inner: StorageBackend) -> None:
        self.inner = inner
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="store-writer")
        self._closed = False

    def read(self, key: str) -> str | None:
        self.flush()
        return self.inner.read(key)

    def write(self, key: str, text: str) -> None:
        if self._closed:
            self.inner.write(key, text)
            return
        future = self._executor.submit(self.inner.write, key, text)
        future.add_done_callback(functools.partial(self._log_failure, key))

    @staticmethod
    def _log_failure(key: str, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Background write of %r failed: %s", key, error)

    def flush(self) -> None:
        if self._closed:
            return
        self._executor.submit(lambda: None).result()

    def close(self) -> None:
        if self._closed:
            return
        self._executor.shutdown(wait=True)
        self._closed = True
        self.inner.close()


# ── Snapshot adapter ──────────────────────────────────────────


def encode_snapshot(snapshot: dict[str, Any]) -> str:
    return json.dumps(snapshot, indent=2, ensure_ascii=False) + "\n"


class DurableStore:
    """load()/save() contract for one named snapshot."""

    def __init__(self, key: str, backend: StorageBackend) -> None:
        self.key = key
        self.backend = backend

    def load(self) -> dict[str, Any]:
        """Return the stored snapshot, or {} when missing or unreadable."""
        try:
            text = self.backend.read(self.key)
        except Exception as e:
            logger.warning("Could not read snapshot %r, using defaults: %s", self.key, e)
            return {}
        if not text or not text.strip():
            return {}
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.warning("Corrupt snapshot %r, using defaults: %s", self.key, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Snapshot %r is not an object, using defaults", self.key)
            return {}
        return data

    def save(self, snapshot: dict[str, Any]) -> bool:
        """Write the snapshot. Returns False (after logging) on failure."""
        try:
            self.backend.write(self.key, encode_snapshot(snapshot))
        except Exception as e:
            logger.error("Could not save snapshot %r: %s", self.key, e)
            return False
        return True


def persists(method: F) -> F:
    """Mark a store method as a mutation: serialize it and save afterwards."""

    @functools.wraps(method)
    def wrapper(self: PersistentStore, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            result = method(self, *args, **kwargs)
            self._persist()
        return result

    return wrapper  # type: ignore[return-value]


class PersistentStore:
    """Base for in-memory stores backed by a DurableStore snapshot.

    Subclasses set ``key`` and implement snapshot() and restore().
    """

    key = ""

    def __init__(self, backend: StorageBackend | None = None, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._durable = DurableStore(self.key, backend or MemoryBackend())
        self.restore(self._durable.load())

    def snapshot(self) -> dict[str, Any]:
        raise NotImplementedError

    def restore(self, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def _persist(self) -> bool:
        return self._durable.save(self.snapshot())

    def _now(self) -> str:
        return self.clock.timestamp()


def records(data: dict[str, Any], name: str) -> list[dict[str, Any]]:
    """The list-of-objects under *name* in a snapshot, skipping malformed entries."""
    items = data.get(name)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]
