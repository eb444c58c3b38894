"""Output formatting for the placesapi CLI with strict stdout/stderr discipline.

* **stdout** -- primary data only (places, details payloads as JSON, plain
  rows or a Rich table). This is what downstream tools pipe and parse.
* **stderr** -- all diagnostics (status lines, errors, debug output).
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

:class:`OutputManager` is created once in
:func:`~placesapi.app.main_callback` and installed via :func:`set_output`;
the module-level helpers (:func:`info`, :func:`error`, ...) delegate to it.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats. ``AUTO`` resolves to ``RICH`` on a colour TTY, ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# Columns shown for list results; the first present key of each tuple wins.
_PLACE_COLUMNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("name", ("name", "description")),
    ("address", ("formatted_address", "vicinity", "structured_formatting")),
    ("place_id", ("place_id",)),
)


class OutputManager:
    """Central manager for CLI output.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render a response payload (dict or list) to stdout in the active format."""
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        else:
            self._print_rich(data)

    def print_places(self, places: list[dict[str, Any]], title: Optional[str] = None) -> None:
        """Render a list of place-like objects.

        JSON mode prints the raw list; plain and Rich modes print one row
        per place with name, address and place id.
        """
        if self._format == OutputFormat.JSON:
            self.format_response(places)
            return

        headers = [label for label, _ in _PLACE_COLUMNS]
        rows = [[_place_cell(place, keys) for _, keys in _PLACE_COLUMNS] for place in places]

        if self._format == OutputFormat.PLAIN:
            for row in rows:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for h in headers:
            table.add_column(h)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(message)

    def success(self, message: str) -> None:
        """Print a green success message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim][debug] {message}[/dim]")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _print_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, ensure_ascii=False, default=str)
                self.print_data(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                self.print_data(json.dumps(item, ensure_ascii=False, default=str))
        else:
            self.print_data(str(data))

    def _print_rich(self, data: Any) -> None:
        json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        self._stdout.print(Syntax(json_str, "json", theme="monokai", word_wrap=True))


def _place_cell(place: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = place.get(key)
        if not value:
            continue
        if key == "structured_formatting" and isinstance(value, dict):
            return str(value.get("secondary_text", ""))
        return str(value)
    return ""


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None`` (used by tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    """Render a payload via the global :class:`OutputManager`."""
    get_output().format_response(data)


def print_places(places: list[dict[str, Any]], title: Optional[str] = None) -> None:
    """Render a list of places via the global :class:`OutputManager`."""
    get_output().print_places(places, title)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
