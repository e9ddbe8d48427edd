"""
In-memory cache for remote source text such as signature catalogs.
"""
from typing import Any, Optional
from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass
class CacheEntry:
    """A single cache entry with expiration."""
    value: Any
    expires_at: datetime


class SourceCache:
    """
    Keeps fetched catalog sources around so repeated runs in one process do
    not download the same script again.
    """

    def __init__(self, default_ttl_seconds: int = 600):
        self._cache: dict[str, CacheEntry] = {}
        self.default_ttl = default_ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        if datetime.now() > entry.expires_at:
            del self._cache[key]
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        self._cache[key] = CacheEntry(value=value, expires_at=datetime.now() + timedelta(seconds=ttl))

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


# Global cache instance
_global_cache = SourceCache()


def get_cache() -> SourceCache:
    """Get the global cache instance."""
    return _global_cache
