"""Canonical Pydantic models shared across all placesapi modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RedisConfig`, :class:`CacheConfig`, and :class:`ClientConfig`.

**API models** -- describe the upstream service and the result of one call:
    :class:`Endpoint`, :class:`HTTPMethod`, and :class:`PlacesResponse`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api/place/"
"""Base URL every :class:`Endpoint` path is resolved against."""

SUCCESS_STATUSES = frozenset({"OK", "ZERO_RESULTS"})
"""Upstream ``status`` values that are not errors."""


# --- Configuration ---


class RedisConfig(BaseModel):
    """Connection parameters for the Redis cache backend."""

    host: str = Field(default="localhost", description="Redis server host")
    port: int = Field(default=6379, description="Redis server port")
    password: Optional[str] = Field(default=None, description="Redis AUTH password")
    db: int = Field(default=0, description="Redis logical database index")
    prefix: str = Field(
        default="", description="Namespace prepended to every cache key"
    )


class CacheConfig(BaseModel):
    """Response cache settings embedded in a :class:`ClientConfig`.

    ``backend`` selects the :mod:`placesapi.cache` implementation built by
    :func:`~placesapi.cache.build_cache_provider`. ``directory`` is only
    read by the ``disk`` backend and defaults to the XDG cache directory.
    """

    enabled: bool = Field(default=False, description="Enable response caching")
    backend: str = Field(default="redis", description="Cache backend: redis, disk, memory")
    ttl_seconds: int = Field(
        default=3600, description="Default entry TTL in seconds (0 = never expire)"
    )
    directory: Optional[str] = Field(
        default=None, description="Directory for the disk backend"
    )
    redis: RedisConfig = Field(default_factory=RedisConfig)


class ClientConfig(BaseModel):
    """Client configuration persisted at ``~/.config/placesapi/config.json``.

    The API key is normally not stored inline: ``api_key_source`` names where
    to read it from (``env:VAR`` or ``file:/path``), see
    :func:`~placesapi.config.resolve_credential`. An inline ``api_key``
    wins over the source when both are set.

    Example::

        ClientConfig(
            api_key_source="env:GOOGLE_PLACES_API_KEY",
            cache=CacheConfig(enabled=True, backend="redis"),
        )
    """

    api_key: Optional[str] = None
    api_key_source: Optional[str] = Field(
        default="env:GOOGLE_PLACES_API_KEY",
        description="Credential source: env:VAR or file:/path",
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    timeout: Optional[float] = Field(
        default=None, description="Request timeout in seconds (transport default if unset)"
    )
    base_url: str = Field(default=DEFAULT_BASE_URL)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- API models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods the dispatch routine can issue."""

    GET = "GET"
    POST = "POST"


class Endpoint(str, enum.Enum):
    """Upstream operation paths, relative to :data:`DEFAULT_BASE_URL`."""

    NEARBY_SEARCH = "nearbysearch/json"
    TEXT_SEARCH = "textsearch/json"
    FIND_PLACE = "findplacefromtext/json"
    DETAILS = "details/json"
    PLACE_AUTOCOMPLETE = "autocomplete/json"
    QUERY_AUTOCOMPLETE = "queryautocomplete/json"


class PlacesResponse(BaseModel):
    """Outcome of a single dispatched request.

    Carries the upstream status next to the parsed body so callers can
    inspect the status of *their* call instead of reading shared client
    state.
    """

    endpoint: str
    status: str
    body: dict[str, Any] = Field(default_factory=dict)
    from_cache: bool = False

    def extract(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Return the body field *name*, or *default* when absent."""
        return self.body.get(name, default)
