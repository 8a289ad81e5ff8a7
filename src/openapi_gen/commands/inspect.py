"""Inspect command -- load a spec and show what generators will be given.

``openapi-gen SPEC`` (or ``openapi-gen inspect SPEC``) loads and validates
the document, then prints one row per operation with every identifier form
derived from its ``operationId``, followed by the collected tags and their
class names. ``--json`` prints the full inspection instead, including each
operation's parameter summary.
"""

from __future__ import annotations

import typer

from openapi_gen.exceptions import OpenAPIGenError
from openapi_gen.inspector import inspect_spec
from openapi_gen.models import Inspection
from openapi_gen.output import OutputFormat, debug, error, format_response, get_output, info
from openapi_gen.parser import load_and_validate


def inspect_command(
    spec: str = typer.Argument(..., help="OpenAPI document path, URL, or '-' for stdin."),
) -> None:
    """Load an OpenAPI document and print derived operation names and tags.

    Example::

        openapi-gen petstore.yaml
        openapi-gen --json inspect https://example.com/openapi.json
    """
    try:
        doc = load_and_validate(spec)
        inspection = inspect_spec(doc)
    except OpenAPIGenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    debug(f"{len(inspection.operations)} operation(s), {len(inspection.tags)} tag(s)")
    render_inspection(inspection)


def render_inspection(inspection: Inspection) -> None:
    """Print *inspection* in the active output format."""
    output = get_output()

    if output.format == OutputFormat.JSON:
        data = inspection.model_dump(mode="json")
        data["tags"] = sorted(inspection.tags)
        format_response(data)
        return

    if not inspection.operations:
        info("No operations defined in this spec.")
    else:
        headers = ["Method", "Path", "Tag", "Kebab", "Snake", "Camel", "Pascal", "Flag", "Enum", "Override"]
        rows: list[list[str]] = []
        for op in inspection.operations:
            names = op.names
            rows.append([
                op.method.upper(),
                op.path,
                op.tag or "-",
                names.kebab,
                names.snake,
                names.camel,
                names.pascal,
                names.flag,
                names.enum,
                op.override_name or "",
            ])
        output.print_table(
            headers, rows, title=f"{inspection.title or 'API'} -- Operations ({len(rows)})"
        )

    if inspection.tags:
        tag_rows = [[tag, inspection.tag_classes[tag]] for tag in sorted(inspection.tags)]
        output.print_table(["Tag", "Class"], tag_rows, title="Tags")
