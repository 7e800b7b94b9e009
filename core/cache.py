# core/cache.py

"""
In-process TTL cache.

Holds small lookups that are read on every gated request and written
rarely, such as a plan's enabled feature names. Writers evict by key
prefix; anything they miss still expires after its TTL.

Keys are built with cache_key() so prefixes line up:
    cache_key("plan_features", "pro", "enabled") -> "plan_features:pro:enabled"
"""

from threading import Lock
from time import monotonic
from typing import Any, Dict, NamedTuple, Optional


DEFAULT_TTL_SECONDS = 300


class CacheEntry(NamedTuple):
    value: Any
    expires_at: float


class TTLCache:
    """Thread-safe; FastAPI runs sync routes in a threadpool."""

    def __init__(self, default_ttl: int = DEFAULT_TTL_SECONDS):
        self.default_ttl = default_ttl
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = Lock()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if monotonic() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None):
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = CacheEntry(value, monotonic() + ttl)

    def delete_prefix(self, prefix: str) -> int:
        """Evict every key starting with ``prefix``; returns how many."""
        with self._lock:
            stale = [k for k in self._entries if k.startswith(prefix)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self):
        with self._lock:
            self._entries.clear()


_cache = TTLCache()


def cache_key(*parts) -> str:
    return ":".join(str(p) for p in parts)


def cache_get(key: str) -> Optional[Any]:
    return _cache.get(key)


def cache_set(key: str, value: Any, ttl_seconds: Optional[int] = None):
    _cache.set(key, value, ttl_seconds)


def cache_delete_prefix(prefix: str) -> int:
    return _cache.delete_prefix(prefix)


def cache_clear():
    _cache.clear()
