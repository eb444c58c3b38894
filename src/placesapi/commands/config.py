"""Config commands -- view and create the placesapi configuration file.

Provides the ``placesapi config`` sub-command group. The file is a JSON
rendering of :class:`~placesapi.models.ClientConfig` stored in the
placesapi config directory, or wherever ``--config`` /
``$PLACESAPI_CONFIG`` points.
"""

from __future__ import annotations

import typer

from placesapi.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


def _mask(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return f"{'*' * (len(secret) - 4)}{secret[-4:]}"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Inline API keys and the Redis password are masked.

    Example::

        placesapi config show
        placesapi --json config show
    """
    from placesapi.config import config_path, load_config

    config_file = (ctx.obj or {}).get("config_file")
    config = load_config(config_file)
    info(f"Config file: {config_path(config_file)}")

    data = config.model_dump(mode="json")
    if data.get("api_key"):
        data["api_key"] = _mask(data["api_key"])
    redis = data["cache"]["redis"]
    if redis.get("password"):
        redis["password"] = _mask(redis["password"])
    format_response(data)


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    backend: str = typer.Option(
        "redis", "--backend", "-b", help="Cache backend: redis, disk, memory."
    ),
    enable_cache: bool = typer.Option(
        False, "--enable-cache", help="Turn response caching on."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Write a starter configuration file.

    The API key is read from ``$GOOGLE_PLACES_API_KEY`` by default; it is
    never written to the file.

    Example::

        placesapi config init --backend disk --enable-cache
    """
    from placesapi.config import config_path, save_config
    from placesapi.models import CacheConfig, ClientConfig

    config_file = (ctx.obj or {}).get("config_file")
    target = config_path(config_file)
    if target.exists() and not force:
        error(f"Config already exists at {target} (use --force to overwrite)")
        raise typer.Exit(code=2)
    if backend not in ("redis", "disk", "memory"):
        error(f"Unknown cache backend: {backend}")
        raise typer.Exit(code=2)

    config = ClientConfig(cache=CacheConfig(enabled=enable_cache, backend=backend))
    written = save_config(config, target)
    success(f"Wrote {written}")
