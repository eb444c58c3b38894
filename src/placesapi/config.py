"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for placesapi:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.placesapi/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_cache_dir`.
* **Client config** -- A single :class:`~placesapi.models.ClientConfig`
  JSON file (API key source, TLS flag, cache backend). Managed via
  :func:`load_config` and :func:`save_config`.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars or files; :func:`resolve_api_key` applies the API key
  precedence chain.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from placesapi.exceptions import ConfigError
from placesapi.models import ClientConfig

_APP_NAME = "placesapi"
_CONFIG_FILENAME = "config.json"

CONFIG_PATH_ENV = "PLACESAPI_CONFIG"
"""Environment variable overriding the config file location."""

API_KEY_ENV = "PLACESAPI_API_KEY"
"""Environment variable that overrides any configured API key."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on Linux and the BSDs, where XDG base directories apply."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: Path) -> Path:
    """Return (and create) ``$<xdg_var>/placesapi`` or *fallback* off XDG platforms."""
    if _is_xdg_platform():
        root = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(root) / _APP_NAME
    else:
        path = fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/placesapi/`` (default ``~/.config/placesapi/``).
    On macOS/Windows: ``~/.placesapi/``.
    """
    return _app_dir("XDG_CONFIG_HOME", ".config", Path.home() / f".{_APP_NAME}")


def get_cache_dir() -> Path:
    """Return the cache directory used by the disk backend, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/placesapi/`` (default ``~/.cache/placesapi/``).
    On macOS/Windows: ``~/.placesapi/cache/``.
    """
    return _app_dir("XDG_CACHE_HOME", ".cache", Path.home() / f".{_APP_NAME}" / "cache")


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to a temp file beside *path*, then ``os.replace`` it into place.

    On failure the temp file is removed and *path* keeps its old content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Client config ---


def config_path(path: str | Path | None = None) -> Path:
    """Return the config file location.

    Precedence: explicit *path* > ``$PLACESAPI_CONFIG`` > ``<config_dir>/config.json``.
    """
    if path is not None:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


def load_config(path: str | Path | None = None) -> ClientConfig:
    """Load the client configuration.

    Returns:
        The deserialised :class:`~placesapi.models.ClientConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    target = config_path(path)
    if not target.is_file():
        return ClientConfig()
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {target}: {exc}") from exc


def save_config(config: ClientConfig, path: str | Path | None = None) -> Path:
    """Persist *config* atomically and return the path written."""
    target = config_path(path)
    data = config.model_dump(mode="json")
    _atomic_write(target, json.dumps(data, indent=2) + "\n")
    return target


# --- Credential resolution ---


def resolve_credential(source: str, required: bool = True) -> Optional[str]:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Args:
        source: The source descriptor string.
        required: When ``False`` an unset environment variable yields
            ``None`` instead of an error.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None and required:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")


def resolve_api_key(config: ClientConfig) -> Optional[str]:
    """Return the API key for *config*, or ``None`` if none is available.

    Precedence (high to low):
        1. ``$PLACESAPI_API_KEY``
        2. ``config.api_key``
        3. ``config.api_key_source``

    A missing key is not an error here; the client raises
    :class:`~placesapi.exceptions.MissingApiKeyError` on first use.
    """
    env_key = os.environ.get(API_KEY_ENV)
    if env_key:
        return env_key
    if config.api_key:
        return config.api_key
    if config.api_key_source:
        return resolve_credential(config.api_key_source, required=False)
    return None
