"""In-process cache provider.

Keeps entries in a plain dict with monotonic-clock expiry.  Useful for
scripts and tests; nothing survives the process.
"""

from __future__ import annotations

import time
from typing import Optional

from placesapi.cache.base import resolve_ttl


class MemoryProvider:
    """Dict-backed :class:`~placesapi.cache.base.CacheProvider`.

    Args:
        default_ttl: TTL in seconds applied when :meth:`set` gets no
            explicit ``ttl``.  ``0`` keeps entries until deleted.
    """

    def __init__(self, default_ttl: int = 0) -> None:
        self.default_ttl = default_ttl
        self._store: dict[str, tuple[str, Optional[float]]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        effective = resolve_ttl(ttl, self.default_ttl)
        expires_at = time.monotonic() + effective if effective > 0 else None
        self._store[key] = (value, expires_at)

    def delete(self, key: str) -> bool:
        # get() drops expired entries, so an expired key reports False.
        present = self.get(key) is not None
        self._store.pop(key, None)
        return present

    def clear(self) -> None:
        """Remove every entry."""
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
