"""HTTP client module for placesapi.

Provides :class:`PlacesClient`, a blocking client backed by
:class:`httpx.Client` with status validation and optional response caching,
plus the parameter helpers it uses.

Example::

    from placesapi.client import PlacesClient

    with PlacesClient(api_key) as client:
        results = client.nearby_search("48.8584,2.2945", 500, {"type": "cafe"})
"""

from placesapi.client.places_client import (
    PlacesClient,
    format_location,
    prepare_nearby_search_params,
)

__all__ = ["PlacesClient", "format_location", "prepare_nearby_search_params"]
