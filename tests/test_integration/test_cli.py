"""Integration tests for the placesapi command line.

Every command runs through the real Typer app and the real client; only
the HTTP layer is replaced by a stub transport passed in via ``obj``.
Stdout assertions use ``--json -q`` or ``--plain -q`` so that diagnostics
on stderr never mix into the parsed output.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import redis
from typer.testing import CliRunner

from placesapi import __version__
from placesapi.app import app
from placesapi.config import load_config

CAFE = {"name": "Cafe Uno", "formatted_address": "1 Main St", "place_id": "p1"}
BAR = {"name": "Bar Duo", "vicinity": "2 High St", "place_id": "p2"}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def keyed_env(isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated config with an API key supplied through the environment."""
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "env-key")
    return isolated_config


class TestRoot:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_bad_param_format(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(
            app, ["text", "pizza", "-P", "novalue"], obj={"transport": stub.transport}
        )
        assert result.exit_code == 2
        assert stub.calls == 0


class TestSearchCommands:
    def test_text_plain(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "results": [CAFE, BAR]})
        result = runner.invoke(
            app, ["--plain", "-q", "text", "coffee"], obj={"transport": stub.transport}
        )

        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines == ["Cafe Uno\t1 Main St\tp1", "Bar Duo\t2 High St\tp2"]
        assert stub.last.url.path.endswith("/textsearch/json")
        assert stub.last.url.params["query"] == "coffee"
        assert stub.last.url.params["key"] == "env-key"

    def test_key_option_overrides_env(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(
            app, ["-k", "cli-key", "--json", "-q", "text", "x"], obj={"transport": stub.transport}
        )
        assert result.exit_code == 0, result.output
        assert stub.last.url.params["key"] == "cli-key"

    def test_find_json(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "candidates": [CAFE]})
        result = runner.invoke(
            app,
            ["--json", "-q", "find", "Cafe Uno", "-P", "fields=name,place_id"],
            obj={"transport": stub.transport},
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [CAFE]
        params = stub.last.url.params
        assert params["input"] == "Cafe Uno"
        assert params["inputtype"] == "textquery"
        assert params["fields"] == "name,place_id"

    def test_nearby_with_radius(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "results": [BAR]})
        result = runner.invoke(
            app,
            ["--json", "-q", "nearby", "1.5,2.5", "-r", "500", "-P", "type=bar"],
            obj={"transport": stub.transport},
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [BAR]
        assert stub.last.url.params["location"] == "1.5,2.5"
        assert stub.last.url.params["radius"] == "500"
        assert stub.last.url.params["type"] == "bar"

    def test_nearby_without_radius_is_usage_error(
        self, runner: CliRunner, keyed_env: Path, make_stub
    ) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(app, ["nearby", "1.5,2.5"], obj={"transport": stub.transport})

        assert result.exit_code == 2
        assert "radius is required" in result.output
        assert stub.calls == 0

    def test_nearby_rankby_distance(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(
            app,
            ["--json", "-q", "nearby", "1.5,2.5", "-P", "rankby=distance", "-P", "keyword=tea"],
            obj={"transport": stub.transport},
        )
        assert result.exit_code == 0, result.output
        assert "radius" not in stub.last.url.params

    def test_autocomplete(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        prediction = {"description": "Paris, France", "place_id": "p9"}
        stub = make_stub({"status": "OK", "predictions": [prediction]})
        result = runner.invoke(
            app, ["--plain", "-q", "autocomplete", "Par"], obj={"transport": stub.transport}
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["Paris, France\t\tp9"]
        assert stub.last.url.path.endswith("/autocomplete/json")

    def test_query_autocomplete(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "ZERO_RESULTS", "predictions": []})
        result = runner.invoke(
            app,
            ["--json", "-q", "query-autocomplete", "pizza near"],
            obj={"transport": stub.transport},
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []
        assert stub.last.url.path.endswith("/queryautocomplete/json")


class TestDetailsCommand:
    def test_json_output(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        detail = {"name": "Cafe Uno", "rating": 4.5, "place_id": "p1"}
        stub = make_stub({"status": "OK", "result": detail})
        result = runner.invoke(
            app, ["--json", "-q", "details", "p1"], obj={"transport": stub.transport}
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == detail
        assert stub.last.url.params["place_id"] == "p1"


class TestErrorExitCodes:
    def test_missing_key(self, runner: CliRunner, isolated_config: Path, make_stub) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(app, ["text", "coffee"], obj={"transport": stub.transport})

        assert result.exit_code == 3
        assert "API key is not specified" in result.output
        assert stub.calls == 0

    def test_upstream_error(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        stub = make_stub({"status": "REQUEST_DENIED", "error_message": "The key is invalid."})
        result = runner.invoke(app, ["text", "coffee"], obj={"transport": stub.transport})

        assert result.exit_code == 5
        assert "REQUEST_DENIED" in result.output
        assert "The key is invalid." in result.output

    def test_invalid_config(self, runner: CliRunner, keyed_env: Path, make_stub) -> None:
        bad = keyed_env / "bad.json"
        bad.write_text("{", encoding="utf-8")
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(
            app, ["-c", str(bad), "text", "coffee"], obj={"transport": stub.transport}
        )
        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_cache_backend_down(
        self, runner: CliRunner, keyed_env: Path, make_stub, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        runner.invoke(app, ["config", "init", "--backend", "redis", "--enable-cache"])
        redis_client = MagicMock()
        redis_client.get.side_effect = redis.exceptions.ConnectionError("Connection refused")
        monkeypatch.setattr(
            "placesapi.cache.redis_provider.redis.Redis", lambda **kwargs: redis_client
        )
        stub = make_stub({"status": "OK", "results": [CAFE]})

        result = runner.invoke(app, ["text", "coffee"], obj={"transport": stub.transport})

        assert result.exit_code == 6
        assert "Connection refused" in result.output
        assert stub.calls == 0
        redis_client.close.assert_called_once_with()


class TestTransportOptions:
    @pytest.fixture
    def verify_flags(self, monkeypatch: pytest.MonkeyPatch) -> list[bool]:
        """Record the ``verify`` argument of every httpx.Client the CLI builds."""
        seen: list[bool] = []
        real_client = httpx.Client

        def _client(**kwargs):
            seen.append(kwargs["verify"])
            return real_client(**kwargs)

        monkeypatch.setattr("placesapi.client.places_client.httpx.Client", _client)
        return seen

    def test_tls_verified_by_default(
        self, runner: CliRunner, keyed_env: Path, make_stub, verify_flags: list[bool]
    ) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(app, ["--json", "-q", "text", "x"], obj={"transport": stub.transport})
        assert result.exit_code == 0, result.output
        assert verify_flags == [True]

    def test_insecure_disables_verification(
        self, runner: CliRunner, keyed_env: Path, make_stub, verify_flags: list[bool]
    ) -> None:
        stub = make_stub({"status": "OK", "results": []})
        result = runner.invoke(
            app, ["--insecure", "--json", "-q", "text", "x"], obj={"transport": stub.transport}
        )
        assert result.exit_code == 0, result.output
        assert verify_flags == [False]
        assert stub.calls == 1


class TestCaching:
    def test_disk_cache_survives_invocations(
        self, runner: CliRunner, keyed_env: Path, make_stub
    ) -> None:
        init = runner.invoke(app, ["config", "init", "--backend", "disk", "--enable-cache"])
        assert init.exit_code == 0, init.output

        stub = make_stub({"status": "OK", "results": [CAFE]})
        for _ in range(2):
            result = runner.invoke(
                app, ["--json", "-q", "text", "coffee"], obj={"transport": stub.transport}
            )
            assert result.exit_code == 0, result.output
            assert json.loads(result.stdout) == [CAFE]

        assert stub.calls == 1

    def test_no_cache_flag_bypasses_cache(
        self, runner: CliRunner, keyed_env: Path, make_stub
    ) -> None:
        runner.invoke(app, ["config", "init", "--backend", "disk", "--enable-cache"])

        stub = make_stub({"status": "OK", "results": [CAFE]})
        for _ in range(2):
            runner.invoke(
                app,
                ["--no-cache", "--json", "-q", "text", "coffee"],
                obj={"transport": stub.transport},
            )
        assert stub.calls == 2


class TestConfigCommands:
    def test_init_writes_file(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "init", "--backend", "memory", "--enable-cache"])

        assert result.exit_code == 0, result.output
        config = load_config()
        assert config.cache.enabled is True
        assert config.cache.backend == "memory"
        assert config.api_key is None

    def test_init_refuses_overwrite(self, runner: CliRunner, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "init"])
        result = runner.invoke(app, ["config", "init", "--backend", "disk"])
        assert result.exit_code == 2
        assert load_config().cache.backend == "redis"

    def test_init_force(self, runner: CliRunner, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "init"])
        result = runner.invoke(app, ["config", "init", "--backend", "disk", "--force"])
        assert result.exit_code == 0, result.output
        assert load_config().cache.backend == "disk"

    def test_init_unknown_backend(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "init", "--backend", "memcached"])
        assert result.exit_code == 2

    def test_show_masks_secrets(self, runner: CliRunner, isolated_config: Path) -> None:
        path = isolated_config / "places.json"
        path.write_text(
            json.dumps(
                {
                    "api_key": "AIzaSecretKey1234",
                    "cache": {"redis": {"password": "hunter22"}},
                }
            ),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["-c", str(path), "--json", "-q", "config", "show"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["api_key"] == "*" * 13 + "1234"
        assert data["cache"]["redis"]["password"] == "****er22"
        assert "AIzaSecretKey1234" not in result.output
