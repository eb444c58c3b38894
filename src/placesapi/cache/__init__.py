"""Pluggable response caching for placesapi.

This package defines the :class:`CacheProvider` protocol consumed by
:class:`~placesapi.client.PlacesClient` and ships three backends:

* :class:`RedisProvider` -- remote key/value store via :mod:`redis`.
* :class:`DiskCacheProvider` -- persistent local store via :mod:`diskcache`.
* :class:`MemoryProvider` -- in-process dict, for scripts and tests.

Any object satisfying the protocol can be injected into the client.
:func:`build_cache_provider` constructs the backend named by a
:class:`~placesapi.models.CacheConfig`.
"""

from __future__ import annotations

from placesapi.cache.base import CacheProvider, canonical_params, make_cache_key
from placesapi.cache.disk_provider import DiskCacheProvider
from placesapi.cache.memory_provider import MemoryProvider
from placesapi.cache.redis_provider import RedisProvider
from placesapi.exceptions import ConfigError
from placesapi.models import CacheConfig


def build_cache_provider(config: CacheConfig) -> CacheProvider:
    """Construct the cache backend selected by ``config.backend``.

    Raises:
        ConfigError: If the backend name is unknown.
    """
    backend = config.backend.lower()
    if backend == "redis":
        return RedisProvider.from_config(config.redis, default_ttl=config.ttl_seconds)
    if backend == "disk":
        directory = config.directory
        if directory is None:
            from placesapi.config import get_cache_dir

            directory = str(get_cache_dir())
        return DiskCacheProvider(directory, default_ttl=config.ttl_seconds)
    if backend == "memory":
        return MemoryProvider(default_ttl=config.ttl_seconds)
    raise ConfigError(f"Unknown cache backend: {config.backend}")


__all__ = [
    "CacheProvider",
    "DiskCacheProvider",
    "MemoryProvider",
    "RedisProvider",
    "build_cache_provider",
    "canonical_params",
    "make_cache_key",
]
