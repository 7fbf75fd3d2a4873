"""Durable key/value stores and the secret key storage built on them.

A [KeyValueStore][nostrid.core.storage.KeyValueStore] is a flat mapping of
string slots to string values, shaped like browser ``localStorage`` so the
login widget's slots and ours can share one store. Two implementations ship:

* [MemoryStore][nostrid.core.storage.MemoryStore] -- process-local, for tests
  and ephemeral sessions.
* [JsonFileStore][nostrid.core.storage.JsonFileStore] -- a JSON object on
  disk, rewritten atomically on every change and created with ``0600``
  permissions.

[KeyStorage][nostrid.core.storage.KeyStorage] exclusively owns the secret key
slot and an in-memory copy of its value. The copy exists because the key is
read on every outgoing authenticated request; this process is the sole
writer, so the copy never goes stale.

Warning:
    The secret key is stored verbatim. Protect the store file like any other
    credential file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from nostrid.models.constants import ErrorType, StorageKey
from nostrid.models.results import SaveResult

from .logger import Logger


if TYPE_CHECKING:
    from .config import StorageConfig


_FILE_MODE = 0o600


@runtime_checkable
class KeyValueStore(Protocol):
    """String slot storage. Implementations may raise ``OSError``/``ValueError``."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryStore:
    """Dict-backed store that lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """Store persisted as a single JSON object file.

    Every read goes to disk. Writes go to a sibling ``.tmp`` file that
    replaces the target, so a crash never leaves a half-written store.

    Args:
        path: Location of the JSON file; parent directories are created on
            first write.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} must contain a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        tmp.replace(self._path)

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> list[str]:
        return list(self._read())


def open_store(config: StorageConfig) -> KeyValueStore:
    """Return the store described by *config* (file-backed when ``path`` is set)."""
    if config.path is None:
        return MemoryStore()
    return JsonFileStore(config.path)


class KeyStorage:
    """Persists the secret key and keeps an in-memory copy for the hot path.

    Args:
        store: Durable store; only the ``slot`` entry is ever touched.
        slot: Slot name for the raw ``nsec``.
        json_output: Emit JSON log lines instead of key=value pairs.

    Note:
        Methods never raise. Failures are logged and reported through
        [SaveResult][nostrid.models.results.SaveResult] or a ``None``/``False``
        return value.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        slot: str = StorageKey.SECRET_KEY.value,
        json_output: bool = False,
    ) -> None:
        self._store = store
        self._slot = slot
        self._cached: str | None = None
        self._logger = Logger("key_storage", json_output=json_output)

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def save(self, key: str) -> SaveResult:
        """Write *key* (trimmed) to the durable slot and the in-memory copy.

        Blank input is rejected with a ``validation`` error before the store
        is touched.
        """
        trimmed = key.strip() if isinstance(key, str) else ""
        if not trimmed:
            return SaveResult.fail(ErrorType.VALIDATION, "Key cannot be empty")
        try:
            self._store.set_item(self._slot, trimmed)
        except (OSError, ValueError) as e:
            self._logger.error("key_save_failed", error=str(e))
            return SaveResult.fail(ErrorType.STORAGE, "Failed to save key", e)
        self._cached = trimmed
        self._logger.debug("key_saved")
        return SaveResult.ok()

    def load(self) -> str | None:
        """Return the key from memory, else from the durable slot (caching it)."""
        if self._cached:
            return self._cached
        try:
            key = self._store.get_item(self._slot)
        except (OSError, ValueError) as e:
            self._logger.error("key_load_failed", error=str(e))
            return None
        if key:
            self._cached = key
        return key or None

    def cached(self) -> str | None:
        """Return the in-memory copy only, without touching the store."""
        return self._cached

    def has_stored_key(self) -> bool:
        """Return True if the durable slot holds a non-empty value."""
        try:
            return bool(self._store.get_item(self._slot))
        except (OSError, ValueError) as e:
            self._logger.error("key_probe_failed", error=str(e))
            return False

    def clear(self) -> SaveResult:
        """Remove the key from the durable slot and from memory."""
        self._cached = None
        try:
            self._store.remove_item(self._slot)
        except (OSError, ValueError) as e:
            self._logger.error("key_clear_failed", error=str(e))
            return SaveResult.fail(ErrorType.STORAGE, "Failed to remove key", e)
        self._logger.debug("key_cleared")
        return SaveResult.ok()

    def forget_cached(self) -> None:
        """Drop the in-memory copy; the next load reads the durable slot."""
        self._cached = None
