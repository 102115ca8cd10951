"""Key-value cache for packed repository contents.

Entries are addressed by a namespace and a string key and expire after a
per-entry TTL. Two backends are provided:

- ``InMemoryKeyValueStore`` keeps entries in the process (lost on restart).
- ``FileKeyValueStore`` stores one JSON document per entry under
  ``<work_root>/kv/<namespace>/``. Writes use atomic file replacement to avoid
  partial reads.

There is no locking: two concurrent writers for the same key both succeed and
the last write wins.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from repo_agent.runtime.work_paths import WorkPaths


class StoredEntry(BaseModel):
    """Persisted form of a cache entry."""

    key: str
    value: str
    content_type: str = Field(default="text/plain")
    expires_at: float = Field(..., description="Unix timestamp (seconds).")

    def is_expired(self, *, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class KeyValueData:
    """Value of an existing entry."""

    value: str
    content_type: str

    def text(self) -> str:
        """Returns the value as text."""

        return self.value


@dataclass(frozen=True)
class KeyValueResult:
    """Result of a lookup. ``data`` is None when ``exists`` is False."""

    exists: bool
    data: KeyValueData | None = None


_MISSING = KeyValueResult(exists=False, data=None)


class KeyValueStore:
    """Abstract key-value store."""

    async def get(self, namespace: str, key: str) -> KeyValueResult:
        """Looks up an entry. Expired entries are reported as missing."""

        raise NotImplementedError

    async def set(
        self,
        namespace: str,
        key: str,
        value: str,
        *,
        ttl_seconds: int,
        content_type: str = "text/plain",
    ) -> None:
        """Stores an entry that expires ``ttl_seconds`` from now."""

        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[tuple[str, str], StoredEntry] = {}

    async def get(self, namespace: str, key: str) -> KeyValueResult:
        entry = self._entries.get((namespace, key))
        if entry is None:
            return _MISSING
        if entry.is_expired(now=self._clock()):
            self._entries.pop((namespace, key), None)
            return _MISSING
        return KeyValueResult(
            exists=True,
            data=KeyValueData(value=entry.value, content_type=entry.content_type),
        )

    async def set(
        self,
        namespace: str,
        key: str,
        value: str,
        *,
        ttl_seconds: int,
        content_type: str = "text/plain",
    ) -> None:
        now = self._clock()
        # Sweep expired entries so keys that are never read again do not pile up.
        self._entries = {
            entry_key: entry
            for entry_key, entry in self._entries.items()
            if not entry.is_expired(now=now)
        }
        self._entries[(namespace, key)] = StoredEntry(
            key=key,
            value=value,
            content_type=content_type,
            expires_at=now + ttl_seconds,
        )


class FileKeyValueStore(KeyValueStore):
    """Store backed by JSON files under ``WorkPaths.kv_dir``."""

    _logger = logging.getLogger(__name__)

    def __init__(self, *, paths: WorkPaths, clock: Callable[[], float] = time.time) -> None:
        self._paths = paths
        self._clock = clock

    @property
    def paths(self) -> WorkPaths:
        """Returns resolved paths under WORK_ROOT."""

        return self._paths

    def entry_path(self, namespace: str, key: str) -> Path:
        """Returns the file path of an entry.

        Keys are hashed so arbitrary characters (e.g. '/') are safe as file names.
        """

        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._paths.kv_dir / namespace / f"{digest}.json"

    async def get(self, namespace: str, key: str) -> KeyValueResult:
        return await asyncio.to_thread(self._get_blocking, namespace, key)

    async def set(
        self,
        namespace: str,
        key: str,
        value: str,
        *,
        ttl_seconds: int,
        content_type: str = "text/plain",
    ) -> None:
        entry = StoredEntry(
            key=key,
            value=value,
            content_type=content_type,
            expires_at=self._clock() + ttl_seconds,
        )
        await asyncio.to_thread(self._save_blocking, self.entry_path(namespace, key), entry)

    def _get_blocking(self, namespace: str, key: str) -> KeyValueResult:
        path = self.entry_path(namespace, key)
        # A concurrent reader may remove an expired entry between any two steps.
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return _MISSING
        try:
            entry = StoredEntry.model_validate(json.loads(raw))
        except ValueError:
            self._logger.warning(
                "Cache entry unreadable, dropping: namespace=%s key=%s", namespace, key
            )
            path.unlink(missing_ok=True)
            return _MISSING
        if entry.is_expired(now=self._clock()):
            self._logger.info("Cache entry expired: namespace=%s key=%s", namespace, key)
            path.unlink(missing_ok=True)
            return _MISSING
        return KeyValueResult(
            exists=True,
            data=KeyValueData(value=entry.value, content_type=entry.content_type),
        )

    @staticmethod
    def _save_blocking(path: Path, entry: StoredEntry) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Unique temp name so concurrent writers for one key do not clash.
        tmp_path = path.with_suffix(f".{uuid.uuid4().hex}.tmp")
        serialized = json.dumps(entry.model_dump(), ensure_ascii=False)
        tmp_path.write_text(serialized + "\n", encoding="utf-8")
        os.replace(tmp_path, path)
