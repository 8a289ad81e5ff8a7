"""Plugin discovery -- find generator executables on the search path.

A generator plugin is any file named ``<prefix><kind>-<name>`` found under
one of the search directories, e.g. ``openapi-gen-cli-typescript`` is a
``cli`` plugin named ``typescript``. :func:`discover` walks the directories
in order and groups what it finds into a :class:`PluginRegistry`.

Discovery is best-effort. A directory that cannot be read, or a file whose
name does not split into a kind and a name, is logged and skipped; the scan
never raises. Callers notice missing plugins through an empty
:meth:`PluginRegistry.plugins` list.

The registry is built once at startup and only read afterwards.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, Mapping, Optional

from openapi_gen.models import Plugin

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "openapi-gen-"
"""Executable name prefix that marks a generator plugin."""


class PluginRegistry:
    """Discovered plugins grouped by kind.

    Each kind maps to plugins in discovery order (search-path order, then
    directory-listing order). Duplicate ``(kind, name)`` pairs from different
    directories are all kept; :meth:`resolve` returns the first one, the same
    way a shell resolves a command name against ``$PATH``.

    Example::

        registry = discover(["/usr/local/bin", "/usr/bin"])
        for plugin in registry.plugins("cli"):
            print(plugin.name, plugin.path)
    """

    def __init__(self) -> None:
        self._by_kind: dict[str, list[Plugin]] = {}

    def add(self, plugin: Plugin) -> None:
        """Append *plugin* to its kind, creating the kind if needed."""
        self._by_kind.setdefault(plugin.kind, []).append(plugin)

    def kinds(self) -> list[str]:
        """Return the discovered kinds in first-seen order."""
        return list(self._by_kind)

    def plugins(self, kind: str) -> list[Plugin]:
        """Return the plugins of *kind*, or an empty list if none were found."""
        return list(self._by_kind.get(kind, []))

    def all(self) -> list[Plugin]:
        """Return every discovered plugin, grouped by kind."""
        return [plugin for plugins in self._by_kind.values() for plugin in plugins]

    def resolve(self, kind: str, name: str) -> Optional[Plugin]:
        """Return the first plugin of *kind* called *name*, if any."""
        for plugin in self._by_kind.get(kind, []):
            if plugin.name == name:
                return plugin
        return None

    def shadowed(self) -> list[Plugin]:
        """Return plugins hidden behind an earlier plugin with the same kind and name."""
        seen: set[tuple[str, str]] = set()
        hidden: list[Plugin] = []
        for plugin in self.all():
            key = (plugin.kind, plugin.name)
            if key in seen:
                hidden.append(plugin)
            else:
                seen.add(key)
        return hidden

    def as_dict(self) -> dict[str, list[Plugin]]:
        return {kind: list(plugins) for kind, plugins in self._by_kind.items()}

    def __contains__(self, kind: object) -> bool:
        return kind in self._by_kind

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_kind)

    def __len__(self) -> int:
        return sum(len(plugins) for plugins in self._by_kind.values())

    def __repr__(self) -> str:
        summary = ", ".join(f"{k}={len(v)}" for k, v in self._by_kind.items())
        return f"PluginRegistry({summary})"


def parse_plugin_name(basename: str, prefix: str = DEFAULT_PREFIX) -> Optional[tuple[str, str]]:
    """Split an executable name into ``(kind, name)``.

    Args:
        basename: File name without directory, e.g. ``openapi-gen-cli-go``.
        prefix: Plugin prefix to strip.

    Returns:
        ``("cli", "go")`` for the example above, or ``None`` when the name
        lacks the prefix or does not contain both a kind and a name.
    """
    if not basename.startswith(prefix):
        return None
    kind, sep, name = basename[len(prefix):].partition("-")
    if not sep or not kind or not name:
        return None
    return kind, name


def search_path_dirs(
    env: Optional[Mapping[str, str]] = None,
    extra_dirs: Iterable[str] = (),
) -> list[str]:
    """Return the directories to scan: *extra_dirs* first, then ``$PATH``.

    Empty ``$PATH`` entries are dropped.
    """
    if env is None:
        env = os.environ
    path_dirs = [d for d in env.get("PATH", "").split(os.pathsep) if d]
    return [*extra_dirs, *path_dirs]


def discover(search_dirs: Iterable[str], prefix: str = DEFAULT_PREFIX) -> PluginRegistry:
    """Scan *search_dirs* recursively and register every plugin found.

    Args:
        search_dirs: Directories to walk, in priority order.
        prefix: Executable name prefix identifying plugins.

    Returns:
        A :class:`PluginRegistry`, possibly empty. Never raises for bad
        directories or malformed names.
    """
    registry = PluginRegistry()

    for directory in search_dirs:

        def _on_error(exc: OSError, directory: str = directory) -> None:
            logger.warning("Cannot scan plugin directory %s: %s", directory, exc)

        for root, dirnames, filenames in os.walk(directory, onerror=_on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                if not filename.startswith(prefix):
                    continue
                parsed = parse_plugin_name(filename, prefix)
                path = os.path.join(root, filename)
                if parsed is None:
                    logger.warning(
                        "Skipping malformed plugin name %s (expected %s<kind>-<name>)",
                        path,
                        prefix,
                    )
                    continue
                kind, name = parsed
                registry.add(Plugin(name=name, kind=kind, path=path))
                logger.debug("Discovered %s plugin '%s' at %s", kind, name, path)

    return registry
