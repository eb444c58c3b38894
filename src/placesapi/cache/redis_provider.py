"""Redis-backed cache provider.

Stores responses in a Redis server through :mod:`redis` (redis-py).  Keys
can be namespaced with a ``prefix`` so that several applications can share
one database.

Writes overwrite unconditionally by default.  Passing
``only_if_absent=True`` switches to ``SET ... NX`` write-once semantics,
where an entry cannot be refreshed until it expires.

Server errors are raised as :class:`~placesapi.exceptions.CacheError`.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis

from placesapi.cache.base import resolve_ttl
from placesapi.exceptions import CacheError
from placesapi.models import RedisConfig

logger = logging.getLogger(__name__)


class RedisProvider:
    """:class:`~placesapi.cache.base.CacheProvider` backed by a Redis client.

    Args:
        client: A connected :class:`redis.Redis` (or compatible) client.
            Values are read back as ``str`` whether or not the client was
            created with ``decode_responses=True``.
        default_ttl: TTL in seconds applied when :meth:`set` gets no
            explicit ``ttl``.  ``0`` keeps entries until deleted.
        prefix: Namespace prepended to every key.
        only_if_absent: Use ``NX`` so existing entries are never replaced.
    """

    def __init__(
        self,
        client: redis.Redis,
        default_ttl: int = 0,
        prefix: str = "",
        only_if_absent: bool = False,
    ) -> None:
        self._client = client
        self.default_ttl = default_ttl
        self.prefix = prefix
        self.only_if_absent = only_if_absent

    @classmethod
    def from_config(cls, config: RedisConfig, default_ttl: int = 0) -> RedisProvider:
        """Connect to the server described by *config*."""
        client = redis.Redis(
            host=config.host,
            port=config.port,
            password=config.password or None,
            db=config.db,
            decode_responses=True,
        )
        return cls(client, default_ttl=default_ttl, prefix=config.prefix)

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise CacheError(f"Redis GET failed for {key}: {exc}") from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        effective = resolve_ttl(ttl, self.default_ttl)
        try:
            stored = self._client.set(
                self._key(key),
                value,
                ex=effective if effective > 0 else None,
                nx=self.only_if_absent,
            )
        except redis.RedisError as exc:
            raise CacheError(f"Redis SET failed for {key}: {exc}") from exc
        if not stored:
            logger.debug("Redis kept existing entry for %s (NX)", key)

    def delete(self, key: str) -> bool:
        try:
            return bool(self._client.delete(self._key(key)))
        except redis.RedisError as exc:
            raise CacheError(f"Redis DEL failed for {key}: {exc}") from exc

    def close(self) -> None:
        """Release the client's connection pool."""
        self._client.close()

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"
