"""Built-in CLI commands for openapi-gen.

* :mod:`~openapi_gen.commands.inspect` -- load a spec and print derived
  identifiers and tags (also the root command's default action).
* :mod:`~openapi_gen.commands.list` -- show discovered generator plugins.
* :mod:`~openapi_gen.commands.build` -- run generator plugins for one or
  more build targets.

Each module exports a plain callback registered on the root app in
:mod:`openapi_gen.app`. Commands read shared state (settings, the plugin
registry, output flags) from ``ctx.obj``.
"""

from __future__ import annotations

from typing import Any

import typer

from openapi_gen.models import Settings
from openapi_gen.registry import PluginRegistry, discover, search_path_dirs


def get_settings(ctx: typer.Context) -> Settings:
    """Return the settings loaded by the root callback (defaults if absent)."""
    obj: dict[str, Any] = ctx.ensure_object(dict)
    settings = obj.get("settings")
    if settings is None:
        settings = obj["settings"] = Settings()
    return settings


def get_registry(ctx: typer.Context) -> PluginRegistry:
    """Return the plugin registry for this invocation, discovering it once.

    A registry placed in ``ctx.obj["registry"]`` by the caller is used as-is.
    """
    obj: dict[str, Any] = ctx.ensure_object(dict)
    registry = obj.get("registry")
    if registry is None:
        settings = get_settings(ctx)
        dirs = search_path_dirs(extra_dirs=settings.plugin_dirs)
        registry = obj["registry"] = discover(dirs, settings.plugin_prefix)
    return registry
