"""Terminal output for openapi-gen.

Results (inspection tables, plugin lists, build summaries) go to stdout.
Everything else goes to stderr: status lines, warnings, errors and log
records. That keeps ``openapi-gen --json list | jq`` usable.

Three result formats are supported. JSON is one document per command,
plain is tab-separated rows, and rich uses Rich tables and highlighted
JSON. ``AUTO`` picks rich on an interactive terminal and plain otherwise.
``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` turn colour off.

Commands talk to the process-wide :class:`OutputManager` installed by the
root callback, usually through the module-level helpers at the bottom.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

_LOG_HANDLER_NAME = "openapi-gen"


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (to any value) or TERM is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


class OutputManager:
    """Writes command results to stdout and diagnostics to stderr.

    Args:
        format: Result format. ``AUTO`` becomes ``RICH`` on a colour TTY and
            ``PLAIN`` otherwise.
        no_color: Disable colour and markup on both streams.
        quiet: Drop info, success and suggestion lines. Warnings and errors
            are always shown.
        verbose: Show debug lines.
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
            rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def no_color(self) -> bool:
        return self._no_color

    # --- results (stdout) ---

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Print a JSON-compatible value as a result.

        Plain mode writes ``key<TAB>value`` lines for a dict, one line per
        item for a list, and the bare value otherwise.
        """
        if self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, TSV with a header line, or JSON records."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*(escape(cell) for cell in row))
            self._stdout.print(table)

    # --- diagnostics (stderr) ---

    def _emit(self, message: str, prefix: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
            return
        text = escape(f"{prefix}{message}")
        self._stderr.print(f"[{style}]{text}[/]" if style else text)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, style="green")

    def suggest(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, prefix="→ ", style="dim")

    def warning(self, message: str) -> None:
        self._emit(message, prefix="Warning: ", style="yellow")

    def error(self, message: str) -> None:
        self._emit(message, prefix="Error: ", style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit(message, prefix="[debug] ", style="dim")


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def configure_logging(verbose: bool = False, quiet: bool = False, no_color: bool = False) -> None:
    """Send ``openapi_gen`` log records to stderr through a RichHandler.

    The level is WARNING by default, DEBUG with ``--verbose`` and ERROR with
    ``--quiet``. Calling this again replaces the handler it installed before.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger("openapi_gen")
    for handler in list(logger.handlers):
        if handler.get_name() == _LOG_HANDLER_NAME:
            logger.removeHandler(handler)

    console = Console(file=sys.stderr, stderr=True, no_color=no_color or _should_disable_color())
    handler = RichHandler(console=console, show_time=verbose, show_path=verbose, markup=False)
    handler.set_name(_LOG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


# --- process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
