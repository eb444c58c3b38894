"""Typer application and CLI entry point for placesapi.

Each Places operation is exposed as a sub-command (``find``, ``nearby``,
``text``, ``details``, ``autocomplete``, ``query-autocomplete``) and the
``config`` group manages the configuration file.  Extra API parameters are
passed as repeated ``--param key=value`` options.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  Library errors are mapped to their ``exit_code``.

See Also:
    :mod:`placesapi.config`: Configuration loading and key resolution.
    :mod:`placesapi.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer
from rich.logging import RichHandler

from placesapi import __version__
from placesapi.client import PlacesClient
from placesapi.commands.config import config_app
from placesapi.exceptions import PlacesApiError
from placesapi.exit_codes import EXIT_GENERIC_FAILURE
from placesapi.output import debug, error, format_response, info, print_places

app = typer.Typer(
    name="placesapi",
    help="Query the Google Places API from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config", help="Configuration management.")

_PARAM_HELP = "Extra API parameter as key=value (repeatable)."


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"placesapi {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to the config file."
    ),
    api_key: Optional[str] = typer.Option(
        None, "--key", "-k", help="API key (overrides config and environment)."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", help="Disable TLS certificate verification."
    ),
    cache: Optional[bool] = typer.Option(
        None, "--cache/--no-cache", help="Force response caching on or off."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~placesapi.output.OutputManager`, turns on
    library debug logging for ``--verbose`` and stores connection options
    in ``ctx.obj`` for the sub-commands.
    """
    from placesapi.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    if verbose:
        _enable_debug_logging()

    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["api_key"] = api_key
    ctx.obj["insecure"] = insecure
    ctx.obj["cache"] = cache


def _enable_debug_logging() -> None:
    """Route ``placesapi`` library logs to stderr at DEBUG level."""
    logger = logging.getLogger("placesapi")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(show_path=False, markup=False))
    logger.setLevel(logging.DEBUG)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _parse_params(values: Optional[list[str]]) -> dict[str, Any]:
    """Turn ``["key=value", ...]`` into a dict; values stay strings."""
    params: dict[str, Any] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got: {item}", param_hint="--param")
        params[key.strip()] = value
    return params


def _build_client(ctx: typer.Context) -> PlacesClient:
    """Create a client from the config file plus the root CLI overrides."""
    from placesapi.config import load_config

    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))
    if obj.get("insecure"):
        config.verify_ssl = False
    if obj.get("cache") is not None:
        config.cache.enabled = obj["cache"]
    return PlacesClient.from_config(
        config,
        api_key=obj.get("api_key"),
        transport=obj.get("transport"),
    )


@contextmanager
def _client_session(ctx: typer.Context) -> Iterator[PlacesClient]:
    """Yield a client; library errors become a clean exit with their code."""
    try:
        with _build_client(ctx) as client:
            yield client
            debug(f"Last status: {client.status}")
    except PlacesApiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _report(results: list[dict[str, Any]], title: str) -> None:
    info(f"{len(results)} result(s)")
    print_places(results, title=title)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("find")
def find_command(
    ctx: typer.Context,
    input_text: str = typer.Argument(help="Name, address or phone number."),
    input_type: str = typer.Option(
        "textquery", "--input-type", "-t", help="textquery or phonenumber."
    ),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Find a place from text or a phone number.

    Example::

        placesapi find "Museum of Contemporary Art Australia" -P fields=name,place_id
    """
    params = _parse_params(param)
    with _client_session(ctx) as client:
        _report(client.find_place(input_text, input_type, params), "Candidates")


@app.command("nearby")
def nearby_command(
    ctx: typer.Context,
    location: str = typer.Argument(help="Centre point as 'lat,lng'."),
    radius: Optional[int] = typer.Option(
        None, "--radius", "-r", help="Radius in metres (omit with rankby=distance)."
    ),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Search for places around a location.

    Example::

        placesapi nearby -- -33.8670,151.1957 -r 500 -P type=restaurant
    """
    params = _parse_params(param)
    with _client_session(ctx) as client:
        _report(client.nearby_search(location, radius, params), "Nearby places")


@app.command("text")
def text_command(
    ctx: typer.Context,
    query: str = typer.Argument(help="Free-text query, e.g. 'pizza in new york'."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Search for places matching a text query."""
    params = _parse_params(param)
    with _client_session(ctx) as client:
        _report(client.text_search(query, params), "Places")


@app.command("details")
def details_command(
    ctx: typer.Context,
    place_id: str = typer.Argument(help="Place id returned by a search."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Show the details of a single place."""
    params = _parse_params(param)
    with _client_session(ctx) as client:
        format_response(client.place_details(place_id, params))


@app.command("autocomplete")
def autocomplete_command(
    ctx: typer.Context,
    input_text: str = typer.Argument(help="Partial place name or address."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Autocomplete a place name or address."""
    params = _parse_params(param)
    with _client_session(ctx) as client:
        _report(client.place_autocomplete(input_text, params), "Predictions")


@app.command("query-autocomplete")
def query_autocomplete_command(
    ctx: typer.Context,
    input_text: str = typer.Argument(help="Partial free-text query."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-P", help=_PARAM_HELP),
) -> None:
    """Autocomplete a free-text search query."""
    params = _parse_params(param)
    with _client_session(ctx) as client:
        _report(client.query_autocomplete(input_text, params), "Predictions")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``placesapi`` console script.

    Unhandled :class:`~placesapi.exceptions.PlacesApiError` instances cause
    a clean exit with the error's ``exit_code``.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except PlacesApiError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
