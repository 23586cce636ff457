"""API key pools with per-key health status.

Each provider ("gemini", "openai") has one ordered pool of keys. Order is the
failover trial order. A parallel status list tracks idle/checking/valid/invalid
per slot, and active_index records which slot most recently succeeded.

Keys can be seeded from the environment:
    GEMINI_API_KEY=key1,key2,key3
    OPENAI_API_KEY=key1,key2
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Protocol

log = logging.getLogger(__name__)

PROVIDERS = ("gemini", "openai")

_ENV_VARS = {"gemini": "GEMINI_API_KEY", "openai": "OPENAI_API_KEY"}


class KeyStatus(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    VALID = "valid"
    INVALID = "invalid"


def mask(key: str) -> str:
    """'sk-abcdef123' -> 'sk-a...'"""
    return f"{key[:4]}..." if key else "<blank>"


def keys_from_env(provider: str) -> list[str]:
    value = os.environ.get(_ENV_VARS[provider], "")
    return [k.strip() for k in value.split(",") if k.strip()]


# --- Persistence ---


class KeyStore(Protocol):
    def load(self, provider: str) -> tuple[list[str], list[str]]: ...

    def save(self, provider: str, keys: list[str], statuses: list[str]) -> None: ...


class MemoryKeyStore:
    """In-process store; nothing survives the interpreter."""

    def __init__(self):
        self._data: dict[str, tuple[list[str], list[str]]] = {}

    def load(self, provider: str) -> tuple[list[str], list[str]]:
        keys, statuses = self._data.get(provider, ([], []))
        return list(keys), list(statuses)

    def save(self, provider: str, keys: list[str], statuses: list[str]) -> None:
        self._data[provider] = (list(keys), list(statuses))


class DiskKeyStore:
    """Local key-value store backed by a diskcache.Cache directory."""

    def __init__(self, directory: str | Path | None = None):
        if directory is None:
            from niche_finder._cache import cache_dir

            directory = Path(cache_dir()) / "keys"
        self.directory = str(directory)
        self._cache = None

    def _ensure(self):
        if self._cache is None:
            from diskcache import Cache

            self._cache = Cache(self.directory)
        return self._cache

    def load(self, provider: str) -> tuple[list[str], list[str]]:
        cache = self._ensure()
        return (
            list(cache.get(f"{provider}:keys", [])),
            list(cache.get(f"{provider}:statuses", [])),
        )

    def save(self, provider: str, keys: list[str], statuses: list[str]) -> None:
        cache = self._ensure()
        with cache.transact():
            cache.set(f"{provider}:keys", list(keys))
            cache.set(f"{provider}:statuses", list(statuses))

    def close(self):
        if self._cache is not None:
            self._cache.close()
            self._cache = None


# --- Key ring ---


class KeyRing:
    """Ordered key pool for one provider with positionally aligned statuses.

    Only apply_validation() can set VALID; mark_invalid() only demotes.
    """

    def __init__(self, provider: str, store: KeyStore | None = None):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider!r}")
        self.provider = provider
        self._store = store if store is not None else MemoryKeyStore()
        keys, statuses = self._store.load(provider)
        self._keys = list(keys)
        self._statuses = self._align(statuses, len(self._keys))
        self.active_index: int | None = None

    @staticmethod
    def _align(statuses: list, n: int) -> list[KeyStatus]:
        out = []
        for s in list(statuses)[:n]:
            try:
                out.append(KeyStatus(s))
            except ValueError:
                out.append(KeyStatus.IDLE)
        out.extend([KeyStatus.IDLE] * (n - len(out)))
        return out

    def _persist(self):
        self._store.save(self.provider, self._keys, [s.value for s in self._statuses])

    @property
    def keys(self) -> list[str]:
        return list(self._keys)

    @property
    def statuses(self) -> list[KeyStatus]:
        return list(self._statuses)

    def __len__(self):
        return len(self._keys)

    def has_valid(self) -> bool:
        return KeyStatus.VALID in self._statuses

    # --- Pool edits ---

    def set_keys(self, keys: list[str]):
        self._keys = [k.strip() for k in keys]
        self._statuses = [KeyStatus.IDLE] * len(self._keys)
        self.active_index = None
        self._persist()

    def add(self, key: str):
        self._keys.append(key.strip())
        self._statuses.append(KeyStatus.IDLE)
        self._persist()

    def delete(self, index: int):
        if not 0 <= index < len(self._keys):
            raise IndexError(f"No {self.provider} key at index {index}")
        del self._keys[index]
        del self._statuses[index]
        if self.active_index is not None:
            if self.active_index == index:
                self.active_index = None
            elif self.active_index > index:
                self.active_index -= 1
        self._persist()

    # --- Status transitions ---

    def mark_invalid(self, index: int) -> bool:
        """Demote one key. Returns True if the status changed."""
        if not 0 <= index < len(self._statuses):
            return False
        if self._statuses[index] is KeyStatus.INVALID:
            return False
        self._statuses[index] = KeyStatus.INVALID
        log.info(
            "Marked %s key #%d (%s) invalid",
            self.provider,
            index,
            mask(self._keys[index]),
        )
        self._persist()
        return True

    def mark_checking(self):
        self._statuses = [KeyStatus.CHECKING] * len(self._keys)

    def apply_validation(self, results: list[bool]):
        if len(results) != len(self._keys):
            raise ValueError(
                f"Got {len(results)} validation results for {len(self._keys)} keys"
            )
        self._statuses = [
            KeyStatus.VALID if ok else KeyStatus.INVALID for ok in results
        ]
        self._persist()

    def set_active(self, index: int):
        self.active_index = index

    def clear_active(self):
        self.active_index = None
