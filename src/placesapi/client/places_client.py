"""Synchronous Places API client with optional response caching.

This module provides :class:`PlacesClient`, which wraps
:class:`httpx.Client` and exposes one method per Places operation:

- **Request building** -- each method merges its required parameters into
  the caller's extras (required keys win) and hands them to
  :meth:`PlacesClient.dispatch` with the operation's endpoint path.
- **Status validation** -- the upstream ``status`` field, not the HTTP
  status code, decides success.  ``OK`` and ``ZERO_RESULTS`` pass;
  anything else raises :class:`~placesapi.exceptions.UpstreamError`.
- **Response caching** -- with ``use_cache=True`` successful bodies are
  stored in the injected :class:`~placesapi.cache.CacheProvider` and
  served from it on later identical requests.

There is exactly one attempt per call: no retries and no backoff.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Sequence, Union

import httpx

from placesapi.cache.base import CacheProvider, make_cache_key
from placesapi.exceptions import (
    CacheError,
    ConfigError,
    ConnectionError_,
    InvalidResponseError,
    MissingApiKeyError,
    ParameterValidationError,
    UpstreamError,
)
from placesapi.models import (
    DEFAULT_BASE_URL,
    SUCCESS_STATUSES,
    ClientConfig,
    Endpoint,
    HTTPMethod,
    PlacesResponse,
)

logger = logging.getLogger(__name__)

Location = Union[str, Sequence[float], Mapping[str, float]]

NEARBY_RANKBY_DISTANCE_KEYS = ("keyword", "name", "type")


class PlacesClient:
    """Client for the Places web service.

    Args:
        api_key: Places API key.  May be omitted here and set later through
            :attr:`api_key` or :meth:`set_key`, but every API method raises
            :class:`~placesapi.exceptions.MissingApiKeyError` until it is set.
        verify_ssl: Verify TLS certificates.  Changing it after construction
            rebuilds the underlying transport.
        use_cache: Serve and store responses through *cache*.
        cache: Any object satisfying
            :class:`~placesapi.cache.CacheProvider`.
        base_url: Root URL the endpoint paths are resolved against.
        timeout: Request timeout in seconds; ``None`` keeps the httpx default.
        transport: Optional :class:`httpx.BaseTransport`, mainly for tests
            (:class:`httpx.MockTransport`).

    Raises:
        ConfigError: If ``use_cache`` is set without a cache provider, or the
            provider does not implement the cache protocol.

    Example::

        with PlacesClient("my-key") as client:
            places = client.text_search("pizza in new york")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        verify_ssl: bool = True,
        use_cache: bool = False,
        cache: Optional[CacheProvider] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if use_cache and cache is None:
            raise ConfigError("Cache is enabled but no cache provider was given.")
        if cache is not None and not isinstance(cache, CacheProvider):
            raise ConfigError(
                f"{type(cache).__name__} does not implement the cache provider protocol."
            )
        self._api_key = api_key
        self._verify_ssl = verify_ssl
        self.use_cache = use_cache
        self.cache = cache
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._status: Optional[str] = None
        self._client: Optional[httpx.Client] = None
        self._owns_cache = False

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        api_key: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> PlacesClient:
        """Build a client from a :class:`~placesapi.models.ClientConfig`.

        *api_key* overrides whatever the config resolves to.  The cache
        backend is constructed only when ``config.cache.enabled`` is set.
        """
        from placesapi.cache import build_cache_provider
        from placesapi.config import resolve_api_key

        cache = build_cache_provider(config.cache) if config.cache.enabled else None
        client = cls(
            api_key=api_key or resolve_api_key(config),
            verify_ssl=config.verify_ssl,
            use_cache=config.cache.enabled,
            cache=cache,
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )
        client._owns_cache = cache is not None
        return client

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> PlacesClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client and, when built by :meth:`from_config`, the cache."""
        self._close_http()
        if self._owns_cache:
            close_cache = getattr(self.cache, "close", None)
            if callable(close_cache):
                close_cache()
            self._owns_cache = False

    def _close_http(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Settings
    # ------------------------------------------------------------------ #

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @api_key.setter
    def api_key(self, value: Optional[str]) -> None:
        self._api_key = value

    def set_key(self, api_key: Optional[str]) -> PlacesClient:
        """Set the API key and return the client for chaining."""
        self._api_key = api_key
        return self

    @property
    def verify_ssl(self) -> bool:
        return self._verify_ssl

    @verify_ssl.setter
    def verify_ssl(self, value: bool) -> None:
        if value != self._verify_ssl:
            # httpx fixes TLS settings at construction time.
            self._close_http()
        self._verify_ssl = value

    def set_verify_ssl(self, verify_ssl: bool = True) -> PlacesClient:
        """Toggle TLS verification and return the client for chaining."""
        self.verify_ssl = verify_ssl
        return self

    @property
    def status(self) -> Optional[str]:
        """Status of the most recent network response.

        Shared across calls; under concurrent use read
        :attr:`PlacesResponse.status` from :meth:`dispatch` instead.
        """
        return self._status

    # ------------------------------------------------------------------ #
    # API operations
    # ------------------------------------------------------------------ #

    def find_place(
        self,
        input_text: str,
        input_type: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Find Place request.

        Args:
            input_text: Name, address or phone number to look up.
            input_type: ``textquery`` or ``phonenumber``.
            params: Extra query parameters (``fields``, ``locationbias``, ...).

        Returns:
            The ``candidates`` list.
        """
        self._check_key()
        request = {**(params or {}), "input": input_text, "inputtype": input_type}
        response = self.dispatch(Endpoint.FIND_PLACE, request)
        return response.extract("candidates", [])

    def nearby_search(
        self,
        location: Location,
        radius: Optional[float] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Nearby Search request.

        Args:
            location: ``"lat,lng"`` string or a ``(lat, lng)`` pair.
            radius: Search radius in metres.  Required unless
                ``params["rankby"] == "distance"``.
            params: Extra query parameters (``keyword``, ``type``, ...).

        Returns:
            The ``results`` list.

        Raises:
            ParameterValidationError: If the radius / rankby rule is broken.
        """
        self._check_key()
        request = prepare_nearby_search_params(location, radius, params)
        response = self.dispatch(Endpoint.NEARBY_SEARCH, request)
        return response.extract("results", [])

    def text_search(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Text Search request; returns the ``results`` list."""
        self._check_key()
        request = {**(params or {}), "query": query}
        response = self.dispatch(Endpoint.TEXT_SEARCH, request)
        return response.extract("results", [])

    def place_details(
        self,
        place_id: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any]:
        """Place Details request.

        Unlike the search methods this returns the bare ``result`` object
        rather than a list.
        """
        self._check_key()
        request = {**(params or {}), "place_id": place_id}
        response = self.dispatch(Endpoint.DETAILS, request)
        return response.extract("result", {})

    def place_autocomplete(
        self,
        input_text: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Place Autocomplete request; returns the ``predictions`` list."""
        self._check_key()
        request = {**(params or {}), "input": input_text}
        response = self.dispatch(Endpoint.PLACE_AUTOCOMPLETE, request)
        return response.extract("predictions", [])

    def query_autocomplete(
        self,
        input_text: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Query Autocomplete request; returns the ``predictions`` list."""
        self._check_key()
        request = {**(params or {}), "input": input_text}
        response = self.dispatch(Endpoint.QUERY_AUTOCOMPLETE, request)
        return response.extract("predictions", [])

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def dispatch(
        self,
        endpoint: Union[Endpoint, str],
        params: Optional[Mapping[str, Any]] = None,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
    ) -> PlacesResponse:
        """Send one request to *endpoint* and validate the response status.

        A cache hit returns immediately without touching the network or
        :attr:`status`.  Otherwise the API key is sent in the query string;
        *params* go in the query string for GET and in a JSON body for POST.

        Returns:
            A :class:`~placesapi.models.PlacesResponse` holding the status
            and the parsed body.

        Raises:
            MissingApiKeyError: If no API key is set.
            UpstreamError: If ``status`` is not ``OK`` / ``ZERO_RESULTS``.
            InvalidResponseError: If the body is not a JSON object with a
                ``status`` field.
            ConnectionError_: On network or timeout errors.
            CacheError: If the cache lookup fails.  A failed store is logged
                and the fresh response is returned.
        """
        self._check_key()
        path = endpoint.value if isinstance(endpoint, Endpoint) else endpoint
        if not isinstance(method, HTTPMethod):
            method = HTTPMethod(method.upper())
        request_params = dict(params or {})

        cache_key: Optional[str] = None
        if self.use_cache and self.cache is not None:
            cache_key = make_cache_key(path, request_params)
            cached = self._cache_get(cache_key)
            if cached is not None:
                logger.debug("Cache hit: %s %s", method.value, path)
                return PlacesResponse(
                    endpoint=path,
                    status=cached.get("status", ""),
                    body=cached,
                    from_cache=True,
                )

        body = self._send(method, path, request_params)

        status = body["status"]
        self._status = status
        if status not in SUCCESS_STATUSES:
            raise UpstreamError(status, body.get("error_message"))

        if cache_key is not None:
            try:
                self.cache.set(cache_key, json.dumps(body, ensure_ascii=False))
            except CacheError as exc:
                logger.warning("Response not cached: %s", exc)

        return PlacesResponse(endpoint=path, status=status, body=body)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _check_key(self) -> None:
        if not self._api_key:
            raise MissingApiKeyError()

    def _http(self) -> httpx.Client:
        """Return the lazily-created :class:`httpx.Client`."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "base_url": self._base_url,
                "verify": self._verify_ssl,
            }
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.Client(**kwargs)
        return self._client

    def _build_options(
        self, method: HTTPMethod, params: dict[str, Any]
    ) -> dict[str, Any]:
        """Build httpx request kwargs; the API key always travels in the query."""
        if method is HTTPMethod.POST:
            return {"params": {"key": self._api_key}, "json": params}
        return {"params": {**params, "key": self._api_key}}

    def _send(
        self, method: HTTPMethod, path: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        """Issue the request and return the parsed JSON object."""
        logger.debug("%s %s params=%s", method.value, path, sorted(params))
        try:
            response = self._http().request(
                method.value, path, **self._build_options(method, params)
            )
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Request to {path} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise InvalidResponseError(
                f"Response from {path} is not valid JSON (HTTP {response.status_code})"
            ) from exc
        if not isinstance(body, dict) or "status" not in body:
            raise InvalidResponseError(
                f"Response from {path} has no status field (HTTP {response.status_code})"
            )
        return body

    def _cache_get(self, key: str) -> Optional[dict[str, Any]]:
        """Look up *key*; an unreadable entry is dropped and treated as a miss."""
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            body = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            body = None
        if not isinstance(body, dict):
            logger.warning("Discarding unreadable cache entry %s", key)
            self.cache.delete(key)
            return None
        return body


def format_location(location: Location) -> str:
    """Render *location* as the ``"lat,lng"`` string the API expects."""
    if isinstance(location, str):
        return location
    if isinstance(location, Mapping):
        return f"{location['lat']},{location['lng']}"
    lat, lng = location
    return f"{lat},{lng}"


def prepare_nearby_search_params(
    location: Location,
    radius: Optional[float],
    params: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Merge *location* and *radius* into *params* for a Nearby Search.

    ``rankby=distance`` and ``radius`` are mutually exclusive upstream: with
    ``rankby=distance`` the radius is dropped and one of ``keyword``,
    ``name`` or ``type`` becomes mandatory.  Otherwise a radius is required.

    Raises:
        ParameterValidationError: If either requirement is not met.
    """
    request = {**(params or {}), "location": format_location(location), "radius": radius}

    if request.get("rankby") == "distance":
        del request["radius"]
        if not any(key in request for key in NEARBY_RANKBY_DISTANCE_KEYS):
            raise ParameterValidationError(
                "Nearby Search requires one or more of 'keyword', 'name', or 'type' "
                "params since 'rankby' = 'distance'."
            )
    elif not radius:
        raise ParameterValidationError("radius is required unless rankby=distance")

    return request
