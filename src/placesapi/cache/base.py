"""Cache provider protocol and cache-key derivation.

A cache provider is any object with ``get`` / ``set`` / ``delete`` over
string keys and string values plus a ``default_ttl`` attribute.  The
client never depends on a concrete backend; it only checks that the
injected object satisfies :class:`CacheProvider`.

Cache keys are ``"<endpoint>:" + sha256(canonical_json(params))``.  The
canonical form sorts keys and uses compact separators so that two
parameter mappings with equal contents always resolve to the same entry
regardless of insertion order.  Changing :func:`canonical_params` changes
every key, so old entries simply stop matching.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class CacheProvider(Protocol):
    """Protocol for response cache backends.

    Implementations own a ``default_ttl`` (seconds, ``0`` = never expire)
    that applies whenever :meth:`set` is called with ``ttl=None``.
    Backend failures are raised as :class:`~placesapi.exceptions.CacheError`;
    an optional ``close()`` releases the backend's resources.
    """

    default_ttl: int

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or ``None`` when missing or expired."""
        ...

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store *value* under *key*, expiring after *ttl* seconds when ``ttl > 0``."""
        ...

    def delete(self, key: str) -> bool:
        """Remove *key*; return ``True`` only if an entry was removed."""
        ...


def canonical_params(params: Optional[Mapping[str, Any]]) -> str:
    """Serialise *params* to a stable, order-independent JSON string."""
    return json.dumps(
        dict(params or {}),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def make_cache_key(endpoint: str, params: Optional[Mapping[str, Any]]) -> str:
    """Build the cache key for a request to *endpoint* with *params*."""
    digest = hashlib.sha256(canonical_params(params).encode("utf-8")).hexdigest()
    return f"{endpoint}:{digest}"


def resolve_ttl(ttl: Optional[int], default_ttl: int) -> int:
    """Return the effective TTL: *ttl* when given, the provider default otherwise."""
    return default_ttl if ttl is None else ttl
