"""Shared caching infrastructure."""

import hashlib
import json
import logging
import os
from pathlib import Path

for name in ("openai", "httpx", "google_genai", "google_genai.models"):
    logging.getLogger(name).setLevel(logging.WARNING)


def cache_dir() -> str:
    """NICHE_FINDER_CACHE_DIR, else ~/.cache/niche_finder, else /tmp."""
    env = os.environ.get("NICHE_FINDER_CACHE_DIR")
    if env:
        return env
    candidates = [
        Path.home() / ".cache" / "niche_finder",
        Path("/tmp/niche_finder_cache"),
    ]
    return str(next((p for p in candidates if p.parent.exists()), candidates[-1]))


class _LazyCache:
    """Lazy-initialized FanoutCache (nothing touches disk until first use)."""

    def __init__(self):
        self._cache = None

    def _ensure(self):
        if self._cache is None:
            from diskcache import FanoutCache

            self._cache = FanoutCache(str(Path(cache_dir()) / "responses"), shards=8)

    def get(self, key):
        self._ensure()
        return self._cache.get(key)

    def set(self, key, value):
        self._ensure()
        return self._cache.set(key, value)


response_cache = _LazyCache()


def cache_key(model: str, payload: dict) -> str:
    """Deterministic key for one provider request (credential excluded)."""
    blob = json.dumps({"model": model, **payload}, sort_keys=True, default=str)
    return hashlib.sha256(blob.encode()).hexdigest()
