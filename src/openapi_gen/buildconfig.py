"""Build configuration loading and resolution.

A build is described either by ``build`` command flags (one target) or by a
configuration file passed with ``--from-file`` (any number of targets). Both
end up as a :class:`~openapi_gen.models.Config`. Each
:class:`~openapi_gen.models.BuildInfo` is then resolved into a
:class:`~openapi_gen.models.BuildRequest`, the payload handed to a plugin.

Resolution rules:

* **Defaults** -- a target whose license or copyright block is empty inherits
  the top-level block of the config (:func:`apply_defaults`).
* **Variables** -- ``vars_files`` are merged in listed order, later files
  overriding earlier ones, then ``vars_values`` override everything
  (:func:`resolve_vars`).
* **Paths** -- relative paths resolve against the config file's directory,
  or the working directory for flag-built targets. Spec URLs are left alone.
* **Selection** -- ``--only`` keeps matching targets, then ``--except``
  drops matching ones (:func:`select_targets`). A selector is ``language``
  or ``kind:language``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from pydantic import ValidationError

from openapi_gen.exceptions import ConfigError, InvalidUsageError
from openapi_gen.models import BuildInfo, BuildRequest, Config, Vars

logger = logging.getLogger(__name__)


# --- Reading files ---


def _read_mapping(path: Path, what: str) -> dict[str, Any]:
    """Read a JSON or YAML file that must hold a mapping."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {what} {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid {what} {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {what} {path}: expected a mapping, got {type(data).__name__}")
    return data


def load_config(path: str | Path) -> Config:
    """Load a build configuration file (JSON or YAML).

    Raises:
        ConfigError: If the file cannot be read, parsed, or validated.
    """
    path = Path(path)
    data = _read_mapping(path, "build config")
    try:
        config = Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid build config {path}: {exc}") from exc
    logger.debug("Loaded %d build target(s) from %s", len(config.build), path)
    return config


# --- Flags ---


def parse_var(item: str) -> tuple[str, str]:
    """Parse a ``--var key=value`` item.

    Raises:
        InvalidUsageError: If *item* has no ``=`` or an empty key.
    """
    key, sep, value = item.partition("=")
    key = key.strip()
    if not sep or not key:
        raise InvalidUsageError(f"Invalid --var '{item}': expected key=value")
    return key, value


def parse_vars(items: Iterable[str]) -> dict[str, str]:
    """Parse repeated ``--var`` items; later keys win."""
    return dict(parse_var(item) for item in items)


def config_from_options(
    kind: str = "",
    language: str = "",
    spec: str = "",
    var: Iterable[str] = (),
    vars_files: Iterable[str] = (),
    templates: str = "",
    output: str = "",
) -> Config:
    """Build a single-target :class:`Config` from ``build`` command flags."""
    info = BuildInfo(
        kind=kind,
        language=language,
        spec=spec,
        templates=templates,
        output=output,
        vars=Vars(vars_values=parse_vars(var), vars_files=list(vars_files)),
    )
    return Config(build=[info])


def overlay_vars(info: BuildInfo, var: Iterable[str], vars_files: Iterable[str]) -> BuildInfo:
    """Layer command-line variables on top of a file-defined target.

    Extra files are merged after the target's own files; inline values
    override the target's inline values.
    """
    extra_values = parse_vars(var)
    extra_files = list(vars_files)
    if not extra_values and not extra_files:
        return info
    merged = Vars(
        vars_values={**info.vars.vars_values, **extra_values},
        vars_files=[*info.vars.vars_files, *extra_files],
    )
    return info.model_copy(update={"vars": merged})


# --- Resolution ---


def apply_defaults(config: Config) -> list[BuildInfo]:
    """Return the config's targets with top-level license/copyright filled in."""
    targets: list[BuildInfo] = []
    for info in config.build:
        update: dict[str, Any] = {}
        if info.license.is_empty() and not config.license.is_empty():
            update["license"] = config.license
        if info.copyright.is_empty() and not config.copyright.is_empty():
            update["copyright"] = config.copyright
        targets.append(info.model_copy(update=update) if update else info)
    return targets


def parse_selectors(value: Optional[str]) -> list[str]:
    """Split a comma-separated ``--only``/``--except``/``--skip`` value."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _matches(info: BuildInfo, selector: str) -> bool:
    kind, sep, language = selector.partition(":")
    if sep:
        return info.kind == kind and info.language == language
    return info.language == selector


def select_targets(
    targets: list[BuildInfo],
    only: Optional[str] = None,
    except_: Optional[str] = None,
) -> list[BuildInfo]:
    """Filter *targets* by ``--only`` then ``--except`` selectors."""
    only_selectors = parse_selectors(only)
    except_selectors = parse_selectors(except_)

    selected = targets
    if only_selectors:
        selected = [t for t in selected if any(_matches(t, s) for s in only_selectors)]
    if except_selectors:
        selected = [t for t in selected if not any(_matches(t, s) for s in except_selectors)]
    return selected


def _resolve_path(value: str, base_dir: Path) -> str:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return str(path.resolve())


def _is_remote(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def resolve_vars(bindings: Vars, base_dir: Path) -> dict[str, str]:
    """Merge variable files and inline values.

    Files are applied in listed order (last write wins), then inline
    ``vars_values`` override file values. Non-string file values are
    converted to their JSON text (``3``, ``true``).

    Raises:
        ConfigError: If a variables file is missing or not a mapping.
    """
    merged: dict[str, str] = {}
    for name in bindings.vars_files:
        path = Path(_resolve_path(name, base_dir))
        if not path.is_file():
            raise ConfigError(f"Variables file not found: {path}")
        data = _read_mapping(path, "variables file")
        merged.update({str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()})
    merged.update(bindings.vars_values)
    return merged


def _read_text(text: str, file: str, base_dir: Path, what: str) -> str:
    """Return *text*, or the contents of *file* when no text is given."""
    if text or not file:
        return text
    path = Path(_resolve_path(file, base_dir))
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {what} file {path}: {exc}") from exc


def resolve_build(
    info: BuildInfo,
    base_dir: Path,
    skip_tags: Iterable[str] = (),
) -> BuildRequest:
    """Resolve *info* into the request handed to a plugin.

    Raises:
        InvalidUsageError: If the target lacks a kind, spec, or output.
        ConfigError: If referenced files cannot be read.
    """
    missing = [name for name in ("kind", "spec", "output") if not getattr(info, name)]
    if missing:
        raise InvalidUsageError(
            f"Build target {info.label} is missing: {', '.join(missing)}"
        )

    spec = info.spec if _is_remote(info.spec) else _resolve_path(info.spec, base_dir)
    templates = _resolve_path(info.templates, base_dir) if info.templates else ""

    return BuildRequest(
        kind=info.kind,
        language=info.language,
        spec=spec,
        output=_resolve_path(info.output, base_dir),
        templates=templates,
        vars=resolve_vars(info.vars, base_dir),
        license_name=info.license.license_name,
        license_text=_read_text(
            info.license.license_text, info.license.license_file, base_dir, "license"
        ),
        copyright_text=_read_text(
            info.copyright.copyright_text, info.copyright.copyright_file, base_dir, "copyright"
        ),
        user_agent=info.user_agent,
        version=info.version,
        api_service_prefix=info.api_service_prefix,
        api_service_suffix=info.api_service_suffix,
        skip_tags=list(skip_tags),
    )
