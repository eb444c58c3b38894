"""Shared test fixtures for placesapi.

Provides a recording stub transport for the HTTP layer, isolated config
environments, and output-state cleanup.  These fixtures are discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from placesapi.client import PlacesClient
from placesapi.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches Rich consoles bound to sys.stdout/sys.stderr;
    CliRunner swaps those streams, so a stale manager must not leak into
    the next test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Stub transport
# ---------------------------------------------------------------------------


class StubTransport:
    """Records every request and replies with queued payloads.

    Each payload is either a JSON-serialisable object (sent with
    *status_code*), an :class:`httpx.Response`, or an exception instance
    to raise.  The last payload is repeated once the queue runs dry.
    """

    def __init__(self, *payloads: Any, status_code: int = 200) -> None:
        self._payloads = list(payloads) or [{"status": "OK"}]
        self._status_code = status_code
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = self._payloads.pop(0) if len(self._payloads) > 1 else self._payloads[0]
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(self._status_code, json=payload)


@pytest.fixture
def make_stub() -> Callable[..., StubTransport]:
    """Factory for :class:`StubTransport` instances."""
    return StubTransport


@pytest.fixture
def make_client() -> Callable[..., PlacesClient]:
    """Factory building a keyed client wired to a stub transport."""
    clients: list[PlacesClient] = []

    def _make(stub: StubTransport, api_key: str | None = "test-key", **kwargs: Any) -> PlacesClient:
        client = PlacesClient(api_key=api_key, transport=stub.transport, **kwargs)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at *tmp_path*, clears every environment
    variable that can supply an API key or config path, and changes the
    working directory to *tmp_path*.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setattr("placesapi.config._is_xdg_platform", lambda: True)

    for var in ["PLACESAPI_API_KEY", "PLACESAPI_CONFIG", "GOOGLE_PLACES_API_KEY"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
