"""User settings with XDG paths and environment-variable overrides.

This module handles the small amount of persistent state openapi-gen keeps:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openapi-gen/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings file** -- a single :class:`~openapi_gen.models.Settings` JSON
  file holding the plugin prefix, extra plugin directories and the plugin
  timeout.
* **Precedence resolution** -- :func:`load_settings` layers environment
  variables over the file over the defaults.

Precedence (high to low):
    1. ``OPENAPI_GEN_PLUGIN_PREFIX``, ``OPENAPI_GEN_PLUGIN_PATH``,
       ``OPENAPI_GEN_TIMEOUT``
    2. ``settings.json`` in the config directory
    3. Model defaults
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Mapping, Optional

from pydantic import ValidationError

from openapi_gen.exceptions import ConfigError
from openapi_gen.models import Settings

_APP_NAME = "openapi-gen"
_SETTINGS_FILENAME = "settings.json"

ENV_PLUGIN_PREFIX = "OPENAPI_GEN_PLUGIN_PREFIX"
ENV_PLUGIN_PATH = "OPENAPI_GEN_PLUGIN_PATH"
ENV_TIMEOUT = "OPENAPI_GEN_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory (not created).

    On Linux/BSD: ``$XDG_CONFIG_HOME/openapi-gen/`` (default
    ``~/.config/openapi-gen/``). On macOS/Windows: ``~/.openapi-gen/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi-gen/`` (default
    ``~/.local/share/openapi-gen/``). On macOS/Windows:
    ``~/.openapi-gen/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _SETTINGS_FILENAME


# --- Loading ---


def _read_settings_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings file at {path}: expected a JSON object")
    return data


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from disk and apply environment overrides.

    Args:
        env: Environment mapping; defaults to ``os.environ``.

    Returns:
        The effective :class:`~openapi_gen.models.Settings`.

    Raises:
        ConfigError: If the settings file or an override fails validation.
    """
    if env is None:
        env = os.environ

    path = settings_path()
    data: dict = _read_settings_file(path) if path.is_file() else {}

    prefix = env.get(ENV_PLUGIN_PREFIX)
    if prefix:
        data["plugin_prefix"] = prefix

    plugin_path = env.get(ENV_PLUGIN_PATH)
    if plugin_path:
        extra = [d for d in plugin_path.split(os.pathsep) if d]
        data["plugin_dirs"] = extra + list(data.get("plugin_dirs", []))

    timeout = env.get(ENV_TIMEOUT)
    if timeout:
        data["timeout_seconds"] = timeout

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
