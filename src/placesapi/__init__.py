"""placesapi -- a typed client for the Google Places web service.

Each Places operation (find place, nearby search, text search, details,
place and query autocomplete) is one method on
:class:`~placesapi.client.PlacesClient`.  Responses can be cached through
any backend implementing :class:`~placesapi.cache.CacheProvider`; Redis,
disk and in-memory backends are included.

Typical usage::

    from placesapi import PlacesClient

    client = PlacesClient(api_key="...")
    for place in client.text_search("ramen in tokyo"):
        print(place["name"])

Modules:
    client: The API client and its parameter helpers.
    cache: Cache provider protocol and backends.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration loading and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer command-line interface.
"""

__version__ = "0.1.0"

from placesapi.client import PlacesClient  # noqa: E402
from placesapi.exceptions import (  # noqa: E402
    CacheError,
    ConfigError,
    MissingApiKeyError,
    ParameterValidationError,
    PlacesApiError,
    UpstreamError,
)

__all__ = [
    "CacheError",
    "ConfigError",
    "MissingApiKeyError",
    "ParameterValidationError",
    "PlacesApiError",
    "PlacesClient",
    "UpstreamError",
    "__version__",
]
