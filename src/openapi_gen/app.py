"""Typer application and CLI entry point for openapi-gen.

The root command accepts a single OpenAPI document argument and inspects
it; ``list`` and ``build`` are sub-commands. Because a Click group cannot
take a positional argument and sub-commands at once, the root group
(:class:`DefaultCommandGroup`) routes any first positional that is not a
command name to ``inspect``::

    openapi-gen petstore.yaml          ==  openapi-gen inspect petstore.yaml
    openapi-gen list --cli
    openapi-gen build -k cli -l go -s petstore.yaml -o out

:func:`main` is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, invokes the Typer app, maps
:class:`~openapi_gen.exceptions.OpenAPIGenError` to its exit code, and writes
a crash log for anything unexpected.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import click
import typer
from typer.core import TyperGroup

from openapi_gen import __version__
from openapi_gen.commands.build import build_command
from openapi_gen.commands.inspect import inspect_command
from openapi_gen.commands.list import list_command
from openapi_gen.exceptions import OpenAPIGenError
from openapi_gen.exit_codes import EXIT_GENERIC_FAILURE
from openapi_gen.output import OutputFormat, OutputManager, configure_logging, error, set_output
from openapi_gen.settings import load_settings


class DefaultCommandGroup(TyperGroup):
    """Root group that treats a leading non-command positional as ``inspect``."""

    default_command = "inspect"

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        for index, arg in enumerate(args):
            if arg == "--":
                break
            if arg.startswith("-") and arg != "-":
                continue
            if arg not in self.commands:
                args = [*args[:index], self.default_command, *args[index:]]
            break
        return super().parse_args(ctx, args)


app = typer.Typer(
    name="openapi-gen",
    cls=DefaultCommandGroup,
    help="Generate code from OpenAPI documents with pluggable generators.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("inspect")(inspect_command)
app.command("list")(list_command)
app.command("build")(build_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"openapi-gen {__version__}")
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
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Resolve builds without running plugins."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~openapi_gen.output.OutputManager`,
    configures logging, loads settings, and stores shared state in
    ``ctx.obj`` for sub-commands. A ``registry`` already present in
    ``ctx.obj`` is kept, which lets callers inject plugins.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(verbose=verbose, quiet=quiet, no_color=output.no_color)

    ctx.ensure_object(dict)
    try:
        if "settings" not in ctx.obj:
            ctx.obj["settings"] = load_settings()
    except OpenAPIGenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    ctx.obj["dry_run"] = dry_run
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from openapi_gen.settings import get_data_dir

    logs_dir = get_data_dir()
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``openapi-gen`` console script.

    Unhandled :class:`~openapi_gen.exceptions.OpenAPIGenError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except OpenAPIGenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
