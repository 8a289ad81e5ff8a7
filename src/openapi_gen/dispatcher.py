"""Dispatch build targets to generator plugins.

For each resolved target the dispatcher:

1. selects the plugin registered under the target's ``kind`` whose name is
   the target's ``language`` (:func:`select_plugin`),
2. loads and validates the target's OpenAPI document once per source,
3. runs the plugin executable with the
   :class:`~openapi_gen.models.BuildRequest` serialised as JSON on stdin
   (:func:`run_build`), and
4. reports the exit status plus every file the plugin created or modified
   under the output directory.

Plugin protocol::

    stdin   BuildRequest JSON (one object)
    env     OPENAPI_GEN_OUTPUT, OPENAPI_GEN_KIND, OPENAPI_GEN_LANGUAGE
    exit    0 on success, anything else is a failure

Targets are independent. A missing plugin, a broken spec, a crash or a
timeout is recorded on that target's :class:`~openapi_gen.models.BuildResult`
and the remaining targets still run.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable, Optional

from openapi_gen.buildconfig import resolve_build
from openapi_gen.exceptions import OpenAPIGenError, PluginNotFoundError
from openapi_gen.models import BuildInfo, BuildRequest, BuildResult, Plugin
from openapi_gen.parser import load_and_validate
from openapi_gen.registry import PluginRegistry

logger = logging.getLogger(__name__)

_STDERR_TAIL_LINES = 20


def select_plugin(registry: PluginRegistry, kind: str, language: str = "") -> Plugin:
    """Return the plugin that builds *language* for *kind*.

    With an empty *language* the first plugin of *kind* is used. Among
    duplicates the first discovered wins.

    Raises:
        PluginNotFoundError: If no matching plugin was discovered.
    """
    if language:
        plugin = registry.resolve(kind, language)
        if plugin is not None:
            return plugin
    else:
        candidates = registry.plugins(kind)
        if candidates:
            return candidates[0]

    available = ", ".join(sorted({p.name for p in registry.plugins(kind)})) or "none"
    wanted = f"'{kind}' plugin for '{language}'" if language else f"'{kind}' plugin"
    raise PluginNotFoundError(f"No {wanted} found (available: {available})")


def _snapshot(directory: Path) -> dict[str, tuple[int, int]]:
    """Map every file under *directory* to ``(mtime_ns, size)``."""
    state: dict[str, tuple[int, int]] = {}
    for root, _dirs, files in os.walk(directory):
        for name in files:
            path = os.path.join(root, name)
            try:
                stat = os.stat(path)
            except OSError:
                continue
            state[os.path.relpath(path, directory)] = (stat.st_mtime_ns, stat.st_size)
    return state


def _tail(text: str, lines: int = _STDERR_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


def run_build(
    request: BuildRequest,
    plugin: Plugin,
    timeout: Optional[float] = None,
    target: str = "",
) -> BuildResult:
    """Run *plugin* for *request* and report what happened.

    Never raises for plugin failures; they are returned as a failed
    :class:`~openapi_gen.models.BuildResult`.
    """
    target = target or f"{request.kind}:{request.language or '*'}"
    output_dir = Path(request.output)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        before = _snapshot(output_dir)
    except OSError as exc:
        return BuildResult(
            target=target,
            plugin=plugin.path,
            error=f"Cannot create output directory {request.output}: {exc}",
        )

    env = {
        **os.environ,
        "OPENAPI_GEN_OUTPUT": request.output,
        "OPENAPI_GEN_KIND": request.kind,
        "OPENAPI_GEN_LANGUAGE": request.language,
    }

    logger.info("Running %s for %s", plugin.path, target)
    try:
        proc = subprocess.run(
            [plugin.path],
            input=request.model_dump_json(),
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
            cwd=request.output,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return BuildResult(
            target=target,
            plugin=plugin.path,
            error=f"Plugin {plugin.path} timed out after {timeout}s",
        )
    except OSError as exc:
        return BuildResult(
            target=target,
            plugin=plugin.path,
            error=f"Cannot run plugin {plugin.path}: {exc}",
        )

    if proc.stdout:
        logger.debug("%s stdout:\n%s", plugin.name, proc.stdout.rstrip())

    after = _snapshot(output_dir)
    files = sorted(path for path, state in after.items() if before.get(path) != state)

    ok = proc.returncode == 0
    return BuildResult(
        target=target,
        plugin=plugin.path,
        exit_code=proc.returncode,
        ok=ok,
        error=None if ok else f"Plugin {plugin.path} exited with status {proc.returncode}",
        files=files,
        stderr=_tail(proc.stderr or ""),
    )


def dispatch(
    targets: Iterable[BuildInfo],
    registry: PluginRegistry,
    base_dir: Path,
    skip_tags: Iterable[str] = (),
    timeout: Optional[float] = None,
    dry_run: bool = False,
    check_spec: bool = True,
) -> list[BuildResult]:
    """Build every target and collect one result per target.

    Args:
        targets: Build targets, already filtered and with defaults applied.
        registry: Discovered plugins.
        base_dir: Directory that relative paths resolve against.
        skip_tags: Tags whose operations plugins should leave out.
        timeout: Per-plugin timeout in seconds.
        dry_run: Resolve and select plugins without running them.
        check_spec: Load and validate each spec before running its plugin.

    Returns:
        One :class:`~openapi_gen.models.BuildResult` per target, in order.
    """
    skip = list(skip_tags)
    validated: dict[str, Optional[str]] = {}
    results: list[BuildResult] = []

    for info in targets:
        try:
            request = resolve_build(info, base_dir, skip)
            plugin = select_plugin(registry, request.kind, request.language)
            if check_spec:
                if request.spec not in validated:
                    try:
                        load_and_validate(request.spec)
                        validated[request.spec] = None
                    except OpenAPIGenError as exc:
                        validated[request.spec] = str(exc)
                if validated[request.spec] is not None:
                    raise OpenAPIGenError(validated[request.spec])
        except OpenAPIGenError as exc:
            logger.debug("Target %s failed before running: %s", info.label, exc)
            results.append(BuildResult(target=info.label, error=str(exc)))
            continue

        if dry_run:
            results.append(BuildResult(target=info.label, plugin=plugin.path, ok=True))
            continue

        results.append(run_build(request, plugin, timeout=timeout, target=info.label))

    return results
