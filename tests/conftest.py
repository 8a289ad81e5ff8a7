"""Shared test fixtures for openapi-gen.

Provides reusable fixtures for OpenAPI documents, isolated settings
environments, output state, fake plugin executables, and the CLI runner.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import sys
import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from openapi_gen.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and log handlers after every test.

    The OutputManager and the Rich log handler cache references to
    sys.stdout/sys.stderr at creation time. When the CliRunner redirects
    those streams and the test finishes, the cached references become stale.
    """
    yield
    reset_output()
    logger = logging.getLogger("openapi_gen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# OpenAPI documents
# ---------------------------------------------------------------------------


def make_petstore() -> dict[str, Any]:
    """A small valid OpenAPI 3.0 document exercising tags, refs and params."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Petstore API", "version": "1.0.0"},
        "tags": [{"name": "pets"}, {"name": "admin"}],
        "paths": {
            "/pets": {
                "get": {
                    "operationId": "listPets",
                    "tags": ["pets", "public"],
                    "parameters": [
                        {"$ref": "#/components/parameters/Limit"},
                        {"name": "X-Request-ID", "in": "header", "schema": {"type": "string"}},
                    ],
                    "responses": {
                        "200": {
                            "description": "A list of pets",
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "array",
                                        "items": {"$ref": "#/components/schemas/Pet"},
                                    }
                                }
                            },
                        }
                    },
                },
                "post": {
                    "operationId": "createPet",
                    "tags": ["pets"],
                    "x-operation-name": "add_pet",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                        },
                    },
                    "responses": {"201": {"description": "Created"}},
                },
            },
            "/pets/{petId}": {
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}}
                ],
                "get": {
                    "operationId": "getPetByID",
                    "tags": ["store-front"],
                    "responses": {
                        "200": {
                            "description": "A pet",
                            "content": {
                                "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                            },
                        },
                        "default": {"description": "Error"},
                    },
                },
            },
        },
        "components": {
            "parameters": {
                "Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}}
            },
            "schemas": {
                "Pet": {
                    "type": "object",
                    "required": ["id", "name"],
                    "properties": {
                        "id": {"type": "integer"},
                        "name": {"type": "string"},
                    },
                }
            },
        },
    }


@pytest.fixture
def petstore_doc() -> dict[str, Any]:
    """Fresh petstore document dict."""
    return make_petstore()


@pytest.fixture
def petstore_file(tmp_path: Path) -> Path:
    """Petstore document written as JSON into tmp_path."""
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(make_petstore()), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Settings isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate settings to a temporary directory.

    Points the XDG directories at tmp_path, clears OPENAPI_GEN_* variables,
    and changes the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("openapi_gen.settings._is_xdg_platform", lambda: True)

    for var in [
        "OPENAPI_GEN_PLUGIN_PREFIX",
        "OPENAPI_GEN_PLUGIN_PATH",
        "OPENAPI_GEN_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Fake plugins
# ---------------------------------------------------------------------------


def write_executable(path: Path, body: str) -> Path:
    """Write a Python script at *path* and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


GENERATOR_SCRIPT = """\
import json
import os
import sys

request = json.load(sys.stdin)
out = os.environ["OPENAPI_GEN_OUTPUT"]
with open(os.path.join(out, "request.json"), "w") as f:
    json.dump(request, f)
with open(os.path.join(out, "README.txt"), "w") as f:
    f.write(request["language"] + "\\n")
"""


@pytest.fixture
def make_plugin(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating plugin executables under ``tmp_path/bin``.

    Usage: ``make_plugin("openapi-gen-cli-go")`` or with a custom script body.
    """

    def _make(name: str, body: str = GENERATOR_SCRIPT, directory: Path | None = None) -> Path:
        return write_executable((directory or tmp_path / "bin") / name, body)

    return _make


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def no_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Empty $PATH so discovery only sees explicitly configured directories."""
    monkeypatch.setenv("PATH", os.pathsep)
