"""List command -- show generator plugins discovered on the search path."""

from __future__ import annotations

import typer

from openapi_gen.commands import get_registry, get_settings
from openapi_gen.output import OutputFormat, format_response, get_output, info, suggest


def list_command(
    ctx: typer.Context,
    cli: bool = typer.Option(False, "--cli", help="List cli generators."),
    lib: bool = typer.Option(False, "--lib", help="List lib templates."),
    all_: bool = typer.Option(False, "--all", help="List all generators."),
) -> None:
    """List discovered generator plugins.

    Without flags (or with ``--all``) every kind is listed; ``--cli`` and
    ``--lib`` restrict the listing to those kinds. Plugins hidden behind an
    earlier one with the same kind and name are marked as shadowed.

    Example::

        openapi-gen list --cli
    """
    registry = get_registry(ctx)

    if all_ or not (cli or lib):
        kinds = registry.kinds()
    else:
        kinds = [kind for kind, wanted in (("cli", cli), ("lib", lib)) if wanted]

    plugins = [plugin for kind in kinds for plugin in registry.plugins(kind)]
    shadowed = set(registry.shadowed())

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response([
            {**plugin.model_dump(), "shadowed": plugin in shadowed} for plugin in plugins
        ])
        return

    if not plugins:
        prefix = get_settings(ctx).plugin_prefix
        info("No generator plugins found.")
        suggest(f"Install an executable named {prefix}<kind>-<name> on your PATH")
        return

    rows = [
        [plugin.kind, plugin.name, plugin.path, "yes" if plugin in shadowed else ""]
        for plugin in plugins
    ]
    output.print_table(
        ["Kind", "Name", "Path", "Shadowed"], rows, title=f"Generator plugins ({len(rows)})"
    )
