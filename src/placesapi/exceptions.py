"""Exception hierarchy for placesapi.

All exceptions inherit from :class:`PlacesApiError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`placesapi.exit_codes`.
Library callers catch the class they care about; the CLI entry point in
:func:`placesapi.app.main` catches ``PlacesApiError`` and exits with the
matching code.

Subclass hierarchy::

    PlacesApiError (exit 1)
    +-- ConfigError               (exit 1)
    +-- MissingApiKeyError        (exit 3)
    +-- ParameterValidationError  (exit 2)
    +-- UpstreamError             (exit 5)
    +-- InvalidResponseError      (exit 5)
    +-- ConnectionError_          (exit 6)
    +-- CacheError                (exit 6)
"""

from __future__ import annotations

from typing import Optional

from placesapi.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_UPSTREAM_ERROR,
)


class PlacesApiError(Exception):
    """Base exception for all placesapi errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(PlacesApiError):
    """Raised for configuration problems (cache enabled without a provider, bad config file)."""

    exit_code = EXIT_GENERIC_FAILURE


class MissingApiKeyError(PlacesApiError):
    """Raised when an API method is called before an API key is set."""

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, message: str = "API key is not specified.") -> None:
        super().__init__(message)


class ParameterValidationError(PlacesApiError):
    """Raised when request parameters break an upstream constraint (e.g. radius vs rankby)."""

    exit_code = EXIT_INVALID_USAGE


class UpstreamError(PlacesApiError):
    """Raised when the response ``status`` is neither ``OK`` nor ``ZERO_RESULTS``.

    Attributes:
        status: The upstream status code, e.g. ``"INVALID_REQUEST"``.
        error_message: The upstream ``error_message`` field, when present.
    """

    exit_code = EXIT_UPSTREAM_ERROR

    def __init__(self, status: str, error_message: Optional[str] = None) -> None:
        self.status = status
        self.error_message = error_message
        message = f"Response returned with status: {status}"
        if error_message:
            message = f"{message}\nError Message: {error_message}"
        super().__init__(message)


class InvalidResponseError(PlacesApiError):
    """Raised when the response body is not a JSON object carrying a ``status`` field."""

    exit_code = EXIT_UPSTREAM_ERROR


class ConnectionError_(PlacesApiError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class CacheError(PlacesApiError):
    """Raised when a cache backend cannot be reached (e.g. the Redis server is down).

    A failed lookup propagates to the caller.  A failed store after a
    successful request is logged by the client and the response is still
    returned.
    """

    exit_code = EXIT_CONNECTION_ERROR
