"""
JSON document store backed by a data directory, plus an in-memory variant
for tests.

Every collection lives in one named document (e.g. ``campaigns.json``) that
is read and written in full. Callers wrap read-modify-write sequences in
``store.lock(name, ...)`` so concurrent requests in the same process cannot
overwrite each other's updates.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import ExitStack, contextmanager
from typing import Any, Iterator, Protocol

from greenfund.errors import StoreError

logger = logging.getLogger(__name__)

CAMPAIGNS = "campaigns.json"
DONATIONS = "donations.json"
USERS = "users.json"
ADMINS = "admins.json"
SETTINGS = "settings.json"
KYC = "kyc.json"
MESSAGES = "messages.json"


class JsonStore(Protocol):
    """Defines the operations the handlers need from document storage."""

    def load(self, name: str, default: Any = None) -> Any:
        ...

    def save(self, name: str, value: Any) -> None:
        ...

    def lock(self, *names: str):
        ...


class _DocumentLocks:
    """One re-entrant lock per document name, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def get(self, name: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.RLock()
                self._locks[name] = lock
            return lock

    @contextmanager
    def hold(self, *names: str) -> Iterator[None]:
        # Sorted acquisition keeps multi-document callers deadlock free.
        with ExitStack() as stack:
            for name in sorted(set(names)):
                stack.enter_context(self.get(name))
            yield


class FileJsonStore:
    """Stores each document as ``<data_dir>/<name>``."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._locks = _DocumentLocks()

    def _path(self, name: str) -> str:
        return os.path.join(self.data_dir, name)

    def load(self, name: str, default: Any = None) -> Any:
        path = self._path(name)
        if not os.path.exists(path):
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
            value = json.loads(content or "null")
        except (OSError, ValueError):
            logger.warning("Failed to read %s", name, exc_info=True)
            return default
        if value is None:
            return default
        if default is not None and type(value) is not type(default):
            logger.warning(
                "Ignoring %s: expected %s, found %s",
                name,
                type(default).__name__,
                type(value).__name__,
            )
            return default
        return value

    def save(self, name: str, value: Any) -> None:
        path = self._path(name)
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, path)
            except BaseException:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise
        except OSError as exc:
            raise StoreError(f"Failed to write {name}") from exc

    def lock(self, *names: str):
        return self._locks.hold(*names)


class InMemoryJsonStore:
    """Test double keeping JSON round-tripped copies of each document."""

    def __init__(self):
        self.documents: dict[str, Any] = {}
        self._locks = _DocumentLocks()

    def load(self, name: str, default: Any = None) -> Any:
        stored = self.documents.get(name)
        if stored is None:
            return default
        return json.loads(json.dumps(stored))

    def save(self, name: str, value: Any) -> None:
        # Use JSON string to mimic the on-disk behavior
        self.documents[name] = json.loads(json.dumps(value))

    def lock(self, *names: str):
        return self._locks.hold(*names)

    def reset(self) -> None:
        """Clear all stored documents (useful in tests)."""
        self.documents.clear()


def _numeric_id(record: dict) -> int:
    try:
        return int(record.get("id") or 0)
    except (TypeError, ValueError):
        return 0


def next_id(records: list[dict]) -> int:
    """Return one more than the largest numeric id, or 1 for an empty list."""
    return max((_numeric_id(r) for r in records), default=0) + 1
