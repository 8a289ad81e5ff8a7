"""openapi-gen -- Orchestrate OpenAPI-driven code generation through plugins.

This package discovers external generator plugins on the search path, loads
and validates OpenAPI documents, derives identifier forms for every
operation, and dispatches build targets to the matching plugin.

Typical workflow::

    openapi-gen list                       # show discovered generators
    openapi-gen petstore.yaml              # inspect operations and tags
    openapi-gen build -k cli -l go -s petstore.yaml -o ./out

Modules:
    app: Typer application and console-script entry point.
    models: Pydantic models shared across the package.
    naming: Identifier case transformations.
    registry: Plugin discovery on the search path.
    inspector: OpenAPI operation and tag inspection.
    buildconfig: Build configuration loading and resolution.
    dispatcher: Plugin invocation for build targets.
    settings: XDG-aware settings and environment overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
