"""Disk-backed cache provider.

Uses :mod:`diskcache` to persist responses on the filesystem so that a
cache survives between CLI invocations without running a server.  Entries
expire through diskcache's own ``expire=`` support.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import diskcache

from placesapi.cache.base import resolve_ttl


class DiskCacheProvider:
    """:class:`~placesapi.cache.base.CacheProvider` stored in a :class:`diskcache.Cache`.

    Args:
        directory: Root directory for the cache.  A ``responses/``
            subdirectory is created inside it.
        default_ttl: TTL in seconds applied when :meth:`set` gets no
            explicit ``ttl``.  ``0`` keeps entries until deleted.

    Example::

        cache = DiskCacheProvider("/tmp/places-cache", default_ttl=600)
        cache.set("textsearch/json:ab12...", '{"status": "OK", "results": []}')
    """

    def __init__(self, directory: str | Path, default_ttl: int = 0) -> None:
        self.default_ttl = default_ttl
        self._directory = Path(directory) / "responses"
        self._cache = diskcache.Cache(str(self._directory))

    def get(self, key: str) -> Optional[str]:
        return self._cache.get(key)

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        effective = resolve_ttl(ttl, self.default_ttl)
        self._cache.set(key, value, expire=effective if effective > 0 else None)

    def delete(self, key: str) -> bool:
        return bool(self._cache.delete(key))

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return entry count, directory and default TTL."""
        return {
            "size": len(self._cache),
            "directory": str(self._directory),
            "ttl_seconds": self.default_ttl,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()
