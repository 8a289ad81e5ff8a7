"""Build command -- run generator plugins for one or more targets.

Targets come either from flags (a single target) or from a configuration
file given with ``--from-file``. Variables given with ``--var`` and
``--vars-file`` are layered over file-defined targets as well.

Usage::

    openapi-gen build -k cli -l go -s petstore.yaml -o out/go -R module=petstore
    openapi-gen build -f openapi-gen.yaml --only go,lib:rust --skip internal
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from openapi_gen.buildconfig import (
    apply_defaults,
    config_from_options,
    load_config,
    overlay_vars,
    parse_selectors,
    select_targets,
)
from openapi_gen.commands import get_registry, get_settings
from openapi_gen.dispatcher import dispatch
from openapi_gen.exceptions import InvalidUsageError, OpenAPIGenError
from openapi_gen.exit_codes import EXIT_PLUGIN_ERROR
from openapi_gen.models import BuildResult
from openapi_gen.output import (
    OutputFormat,
    error,
    format_response,
    get_output,
    info,
    success,
    warning,
)


def build_command(
    ctx: typer.Context,
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Generator kind (e.g. cli, lib)."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Target language (plugin name)."),
    spec: Optional[str] = typer.Option(None, "--spec", "-s", help="OpenAPI document path or URL."),
    var: Optional[List[str]] = typer.Option(None, "--var", "-R", help="Template variable key=value (repeatable)."),
    vars_file: Optional[List[str]] = typer.Option(
        None, "--vars-file", "-F", help="JSON/YAML file of template variables (repeatable)."
    ),
    templates: Optional[str] = typer.Option(None, "--templates", "-T", help="Template directory."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output directory."),
    except_: Optional[str] = typer.Option(
        None, "--except", "-E", help="Comma-separated targets to leave out (language or kind:language)."
    ),
    only: Optional[str] = typer.Option(
        None, "--only", "-O", help="Comma-separated targets to build (language or kind:language)."
    ),
    skip: Optional[str] = typer.Option(
        None, "--skip", "-S", help="Comma-separated tags whose operations plugins should skip."
    ),
    from_file: Optional[str] = typer.Option(
        None, "--from-file", "-f", help="Build configuration file (JSON or YAML)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.1, help="Per-plugin timeout in seconds."
    ),
) -> None:
    """Run generator plugins for the configured build targets."""
    obj = ctx.ensure_object(dict)
    var = var or []
    vars_file = vars_file or []

    try:
        if from_file:
            conflicting = [
                flag
                for flag, value in (
                    ("--kind", kind),
                    ("--language", language),
                    ("--spec", spec),
                    ("--templates", templates),
                    ("--output", output),
                )
                if value
            ]
            if conflicting:
                raise InvalidUsageError(
                    f"{', '.join(conflicting)} cannot be combined with --from-file"
                )
            config = load_config(from_file)
            base_dir = Path(from_file).resolve().parent
            targets = [overlay_vars(t, var, vars_file) for t in apply_defaults(config)]
        else:
            config = config_from_options(
                kind=kind or "",
                language=language or "",
                spec=spec or "",
                var=var,
                vars_files=vars_file,
                templates=templates or "",
                output=output or "",
            )
            base_dir = Path.cwd()
            targets = apply_defaults(config)

        targets = select_targets(targets, only=only, except_=except_)
        if not targets:
            raise InvalidUsageError("No build targets selected")

        results = dispatch(
            targets,
            get_registry(ctx),
            base_dir,
            skip_tags=parse_selectors(skip),
            timeout=timeout or get_settings(ctx).timeout_seconds,
            dry_run=bool(obj.get("dry_run")),
        )
    except OpenAPIGenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    _report(results, dry_run=bool(obj.get("dry_run")))

    if any(not result.ok for result in results):
        raise typer.Exit(code=EXIT_PLUGIN_ERROR)


def _report(results: list[BuildResult], dry_run: bool) -> None:
    """Print one row per target, then per-target errors on stderr."""
    out = get_output()
    if out.format == OutputFormat.JSON:
        format_response([result.model_dump(mode="json") for result in results])
    else:
        rows: list[list[str]] = []
        for result in results:
            if result.ok:
                status = "planned" if dry_run else "ok"
            else:
                status = "failed" if result.exit_code is None else f"exit {result.exit_code}"
            rows.append([result.target, result.plugin or "-", status, str(len(result.files))])
        out.print_table(["Target", "Plugin", "Status", "Files"], rows, title="Build results")

    for result in results:
        if result.ok:
            continue
        error(f"{result.target}: {result.error}")
        if result.stderr:
            warning(f"{result.target} stderr:\n{result.stderr}")

    failed = sum(1 for result in results if not result.ok)
    if failed:
        info(f"{failed} of {len(results)} target(s) failed.")
    else:
        success(f"{len(results)} target(s) {'resolved' if dry_run else 'built'}.")
