"""End-to-end tests for the openapi-gen command line.

Commands run through Typer's CliRunner. Plugin registries are injected via
``obj`` so tests never depend on what is installed on the host ``$PATH``;
the discovery path is covered separately with an emptied ``$PATH``.
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from openapi_gen import __version__
from openapi_gen.app import app
from openapi_gen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_SPEC_ERROR,
    EXIT_SUCCESS,
)
from openapi_gen.models import Plugin, Settings
from openapi_gen.registry import PluginRegistry, discover

FAILING_SCRIPT = """\
import sys

sys.stderr.write("template not found\\n")
sys.exit(3)
"""


def _invoke(runner, args: list[str], registry: PluginRegistry | None = None, **settings):
    obj = {"settings": Settings(**settings)}
    if registry is not None:
        obj["registry"] = registry
    return runner.invoke(app, args, obj=obj)


def _plugins(tmp_path: Path) -> PluginRegistry:
    return discover([str(tmp_path / "bin")])


def _lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Root command
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == EXIT_SUCCESS
        assert f"openapi-gen {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "Usage" in result.output

    def test_help_lists_commands(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == EXIT_SUCCESS
        for command in ("inspect", "list", "build"):
            assert command in result.output


class TestInspect:
    def test_positional_spec_runs_inspect(self, cli_runner, petstore_file: Path) -> None:
        result = _invoke(cli_runner, ["--plain", str(petstore_file)])

        assert result.exit_code == EXIT_SUCCESS, result.output
        lines = _lines(result.output)
        assert "Method\tPath\tTag\tKebab\tSnake\tCamel\tPascal\tFlag\tEnum\tOverride" in lines
        assert (
            "GET\t/pets\tpets\tlist-pets\tlist_pets\tlistPets\tListPets\t--list-pets\tLIST_PETS\t"
            in lines
        )
        assert any(line.startswith("POST\t/pets\t") and line.endswith("\tadd_pet") for line in lines)
        assert "store-front\tStoreFront" in lines

    def test_explicit_subcommand(self, cli_runner, petstore_file: Path) -> None:
        result = _invoke(cli_runner, ["--plain", "inspect", str(petstore_file)])
        assert result.exit_code == EXIT_SUCCESS
        assert "pets\tPets" in _lines(result.output)

    def test_json(self, cli_runner, petstore_file: Path) -> None:
        result = _invoke(cli_runner, ["--json", "-q", str(petstore_file)])

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.output)
        assert data["title"] == "Petstore API"
        assert data["tags"] == ["pets", "store-front"]
        assert data["tag_classes"]["store-front"] == "StoreFront"
        by_id = {op["operation_id"]: op for op in data["operations"]}
        assert by_id["getPetByID"]["names"]["enum"] == "GET_PET_BY_ID"
        assert by_id["createPet"]["override_name"] == "add_pet"
        assert by_id["listPets"]["operation"]["response_body"] == {
            "kind": "array[Pet]",
            "name": "200",
        }

    def test_yaml_spec(self, cli_runner, tmp_path: Path) -> None:
        spec = tmp_path / "api.yaml"
        spec.write_text(
            textwrap.dedent("""\
                openapi: 3.1.0
                info: {title: Mini, version: "1"}
                paths:
                  /health:
                    get:
                      operationId: healthCheck
                      responses:
                        "204": {description: No content}
            """),
            encoding="utf-8",
        )
        result = _invoke(cli_runner, ["--plain", str(spec)])
        assert result.exit_code == EXIT_SUCCESS
        assert any(line.startswith("GET\t/health\t-\thealth-check") for line in _lines(result.output))

    def test_yaml_unquoted_status_codes(self, cli_runner, tmp_path: Path) -> None:
        spec = tmp_path / "api.yaml"
        spec.write_text(
            textwrap.dedent("""\
                openapi: 3.0.3
                info: {title: Mini, version: "1"}
                paths:
                  /health:
                    get:
                      operationId: healthCheck
                      responses:
                        200:
                          description: Healthy
                          content:
                            application/json:
                              schema: {type: object}
            """),
            encoding="utf-8",
        )
        result = _invoke(cli_runner, ["--plain", str(spec)])
        assert result.exit_code == EXIT_SUCCESS
        assert any(line.startswith("GET\t/health\t-\thealth-check") for line in _lines(result.output))

    def test_dangling_ref(self, cli_runner, tmp_path: Path, petstore_doc: dict) -> None:
        petstore_doc["paths"]["/pets"]["post"]["responses"]["201"] = {
            "$ref": "#/components/responses/Nope"
        }
        spec = tmp_path / "dangling.json"
        spec.write_text(json.dumps(petstore_doc))
        result = _invoke(cli_runner, ["--no-color", str(spec)])
        assert result.exit_code == EXIT_SPEC_ERROR
        assert "Invalid OpenAPI document" in result.output

    def test_no_operations(self, cli_runner, tmp_path: Path) -> None:
        spec = tmp_path / "empty.json"
        spec.write_text(
            json.dumps({"openapi": "3.1.0", "info": {"title": "E", "version": "1"}, "paths": {}})
        )
        result = _invoke(cli_runner, ["--plain", str(spec)])
        assert result.exit_code == EXIT_SUCCESS
        assert "No operations defined" in result.output

    def test_missing_file(self, cli_runner, tmp_path: Path) -> None:
        result = _invoke(cli_runner, [str(tmp_path / "nope.yaml")])
        assert result.exit_code == EXIT_SPEC_ERROR
        assert "not found" in result.output

    def test_invalid_spec(self, cli_runner, tmp_path: Path) -> None:
        spec = tmp_path / "broken.json"
        spec.write_text(json.dumps({"openapi": "3.0.3", "paths": {}}))
        result = _invoke(cli_runner, ["--no-color", str(spec)])
        assert result.exit_code == EXIT_SPEC_ERROR
        assert "Invalid OpenAPI document" in result.output

    def test_swagger_rejected(self, cli_runner, tmp_path: Path) -> None:
        spec = tmp_path / "swagger.json"
        spec.write_text(json.dumps({"swagger": "2.0", "info": {}, "paths": {}}))
        result = _invoke(cli_runner, [str(spec)])
        assert result.exit_code == EXIT_SPEC_ERROR

    def test_malformed_operation_name(
        self, cli_runner, tmp_path: Path, petstore_doc: dict
    ) -> None:
        petstore_doc["paths"]["/pets"]["get"]["x-operation-name"] = ["custom_op"]
        spec = tmp_path / "bad-ext.json"
        spec.write_text(json.dumps(petstore_doc))

        result = _invoke(cli_runner, ["--plain", str(spec)])

        assert result.exit_code == EXIT_SPEC_ERROR
        assert "x-operation-name" in result.output
        assert "GET /pets" in result.output
        assert "list-pets" not in result.output


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@pytest.fixture
def registry() -> PluginRegistry:
    registry = PluginRegistry()
    registry.add(Plugin(name="go", kind="cli", path="/opt/a/openapi-gen-cli-go"))
    registry.add(Plugin(name="typescript", kind="cli", path="/opt/a/openapi-gen-cli-typescript"))
    registry.add(Plugin(name="rust", kind="lib", path="/opt/a/openapi-gen-lib-rust"))
    registry.add(Plugin(name="go", kind="cli", path="/opt/b/openapi-gen-cli-go"))
    registry.add(Plugin(name="html", kind="docs", path="/opt/a/openapi-gen-docs-html"))
    return registry


class TestList:
    def test_all_by_default(self, cli_runner, registry: PluginRegistry) -> None:
        result = _invoke(cli_runner, ["--plain", "list"], registry)

        assert result.exit_code == EXIT_SUCCESS
        lines = _lines(result.output)
        assert "Kind\tName\tPath\tShadowed" in lines
        assert "cli\tgo\t/opt/a/openapi-gen-cli-go\t" in lines
        assert "cli\tgo\t/opt/b/openapi-gen-cli-go\tyes" in lines
        assert "docs\thtml\t/opt/a/openapi-gen-docs-html\t" in lines

    def test_all_flag(self, cli_runner, registry: PluginRegistry) -> None:
        result = _invoke(cli_runner, ["--json", "list", "--all"], registry)
        assert len(json.loads(result.output)) == 5

    def test_cli_only(self, cli_runner, registry: PluginRegistry) -> None:
        result = _invoke(cli_runner, ["--json", "list", "--cli"], registry)

        data = json.loads(result.output)
        assert {p["kind"] for p in data} == {"cli"}
        assert [p["name"] for p in data] == ["go", "typescript", "go"]
        assert [p["shadowed"] for p in data] == [False, False, True]

    def test_lib_only(self, cli_runner, registry: PluginRegistry) -> None:
        result = _invoke(cli_runner, ["--json", "list", "--lib"], registry)
        assert json.loads(result.output) == [
            {"name": "rust", "kind": "lib", "path": "/opt/a/openapi-gen-lib-rust", "shadowed": False}
        ]

    def test_cli_and_lib(self, cli_runner, registry: PluginRegistry) -> None:
        result = _invoke(cli_runner, ["--json", "list", "--cli", "--lib"], registry)
        assert {p["kind"] for p in json.loads(result.output)} == {"cli", "lib"}

    def test_empty(self, cli_runner) -> None:
        result = _invoke(cli_runner, ["--plain", "list"], PluginRegistry())
        assert result.exit_code == EXIT_SUCCESS
        assert "No generator plugins found." in result.output
        assert "openapi-gen-<kind>-<name>" in result.output

    def test_discovers_from_plugin_dirs(
        self, cli_runner, tmp_path: Path, make_plugin, no_path, isolated_config
    ) -> None:
        make_plugin("openapi-gen-cli-go", directory=tmp_path / "plugins")
        make_plugin("openapi-gen-broken", directory=tmp_path / "plugins")

        result = _invoke(
            cli_runner, ["--json", "-q", "list"], plugin_dirs=[str(tmp_path / "plugins")]
        )

        assert result.exit_code == EXIT_SUCCESS
        assert [p["name"] for p in json.loads(result.output)] == ["go"]

    def test_custom_prefix(
        self, cli_runner, tmp_path: Path, make_plugin, no_path, isolated_config
    ) -> None:
        make_plugin("gen-lib-rust", directory=tmp_path / "plugins")

        result = _invoke(
            cli_runner,
            ["--json", "list", "--lib"],
            plugin_dirs=[str(tmp_path / "plugins")],
            plugin_prefix="gen-",
        )

        assert [p["name"] for p in json.loads(result.output)] == ["rust"]

    def test_invalid_settings(
        self, cli_runner, isolated_config, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OPENAPI_GEN_TIMEOUT", "soon")
        result = cli_runner.invoke(app, ["list"])
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "Invalid settings" in result.output


# ---------------------------------------------------------------------------
# build
# ---------------------------------------------------------------------------


class TestBuildFromFlags:
    def test_single_target(
        self, cli_runner, tmp_path: Path, petstore_file: Path, make_plugin
    ) -> None:
        make_plugin("openapi-gen-cli-go")
        out = tmp_path / "out" / "go"

        result = _invoke(
            cli_runner,
            [
                "--plain",
                "build",
                "-k", "cli",
                "-l", "go",
                "-s", str(petstore_file),
                "-o", str(out),
                "-R", "module=petstore",
                "--var", "owner=me",
                "-S", "admin,internal",
            ],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "cli:go" in result.output
        sent = json.loads((out / "request.json").read_text())
        assert sent["vars"] == {"module": "petstore", "owner": "me"}
        assert sent["skip_tags"] == ["admin", "internal"]
        assert sent["language"] == "go"

    def test_relative_paths_use_working_directory(
        self, cli_runner, tmp_path: Path, petstore_file: Path, make_plugin, isolated_config
    ) -> None:
        make_plugin("openapi-gen-cli-go")
        (tmp_path / "vars.yaml").write_text("module: fromfile\n")

        result = _invoke(
            cli_runner,
            ["-q", "build", "-k", "cli", "-l", "go", "-s", "petstore.json", "-o", "gen", "-F", "vars.yaml"],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_SUCCESS, result.output
        sent = json.loads((tmp_path / "gen" / "request.json").read_text())
        assert sent["vars"] == {"module": "fromfile"}

    def test_json_results(self, cli_runner, tmp_path: Path, petstore_file: Path, make_plugin) -> None:
        make_plugin("openapi-gen-lib-rust")

        result = _invoke(
            cli_runner,
            ["--json", "-q", "build", "-k", "lib", "-l", "rust", "-s", str(petstore_file), "-o", str(tmp_path / "out")],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_SUCCESS
        [entry] = json.loads(result.output)
        assert entry["target"] == "lib:rust"
        assert entry["ok"] is True
        assert entry["files"] == ["README.txt", "request.json"]

    def test_plugin_failure(self, cli_runner, tmp_path: Path, petstore_file: Path, make_plugin) -> None:
        make_plugin("openapi-gen-cli-go", FAILING_SCRIPT)

        result = _invoke(
            cli_runner,
            ["--plain", "build", "-k", "cli", "-l", "go", "-s", str(petstore_file), "-o", str(tmp_path / "out")],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_PLUGIN_ERROR
        assert "exit 3" in result.output
        assert "template not found" in result.output

    def test_missing_plugin(self, cli_runner, tmp_path: Path, petstore_file: Path) -> None:
        result = _invoke(
            cli_runner,
            ["build", "-k", "cli", "-l", "cobol", "-s", str(petstore_file), "-o", str(tmp_path / "out")],
            PluginRegistry(),
        )
        assert result.exit_code == EXIT_PLUGIN_ERROR
        assert "No 'cli' plugin for 'cobol' found" in result.output

    def test_invalid_spec(self, cli_runner, tmp_path: Path, make_plugin) -> None:
        make_plugin("openapi-gen-cli-go")
        spec = tmp_path / "broken.json"
        spec.write_text(json.dumps({"openapi": "3.0.3", "paths": {}}))

        result = _invoke(
            cli_runner,
            ["build", "-k", "cli", "-l", "go", "-s", str(spec), "-o", str(tmp_path / "out")],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_PLUGIN_ERROR
        assert "Invalid OpenAPI document" in result.output
        assert not (tmp_path / "out").exists()

    def test_missing_output(self, cli_runner, petstore_file: Path) -> None:
        result = _invoke(
            cli_runner, ["build", "-k", "cli", "-l", "go", "-s", str(petstore_file)], PluginRegistry()
        )
        assert result.exit_code == EXIT_PLUGIN_ERROR
        assert "missing: output" in result.output

    def test_bad_var(self, cli_runner, petstore_file: Path) -> None:
        result = _invoke(
            cli_runner,
            ["build", "-k", "cli", "-s", str(petstore_file), "-o", "out", "-R", "novalue"],
            PluginRegistry(),
        )
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "expected key=value" in result.output

    def test_dry_run(self, cli_runner, tmp_path: Path, petstore_file: Path, make_plugin) -> None:
        make_plugin("openapi-gen-cli-go")

        result = _invoke(
            cli_runner,
            ["--plain", "--dry-run", "build", "-k", "cli", "-l", "go", "-s", str(petstore_file), "-o", str(tmp_path / "out")],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_SUCCESS
        assert "planned" in result.output
        assert not (tmp_path / "out").exists()


class TestBuildFromFile:
    @pytest.fixture
    def config_file(self, tmp_path: Path, petstore_file: Path, make_plugin) -> Path:
        make_plugin("openapi-gen-cli-go")
        make_plugin("openapi-gen-lib-go")
        make_plugin("openapi-gen-lib-rust")
        path = tmp_path / "openapi-gen.yaml"
        path.write_text(
            textwrap.dedent("""\
                license_name: Apache-2.0
                build:
                  - kind: cli
                    language: go
                    spec: petstore.json
                    output: out/cli-go
                    vars_values: {module: petstore}
                  - kind: lib
                    language: go
                    spec: petstore.json
                    output: out/lib-go
                  - kind: lib
                    language: rust
                    spec: petstore.json
                    output: out/lib-rust
                    license_name: MIT
            """),
            encoding="utf-8",
        )
        return path

    def test_builds_every_target(self, cli_runner, tmp_path: Path, config_file: Path) -> None:
        result = _invoke(cli_runner, ["--plain", "build", "-f", str(config_file)], _plugins(tmp_path))

        assert result.exit_code == EXIT_SUCCESS, result.output
        for name in ("cli-go", "lib-go", "lib-rust"):
            assert (tmp_path / "out" / name / "request.json").is_file()
        rust = json.loads((tmp_path / "out" / "lib-rust" / "request.json").read_text())
        lib_go = json.loads((tmp_path / "out" / "lib-go" / "request.json").read_text())
        assert rust["license_name"] == "MIT"
        assert lib_go["license_name"] == "Apache-2.0"

    def test_only_and_except(self, cli_runner, tmp_path: Path, config_file: Path) -> None:
        result = _invoke(
            cli_runner,
            ["--json", "-q", "build", "-f", str(config_file), "-O", "go", "-E", "lib:go"],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_SUCCESS
        assert [r["target"] for r in json.loads(result.output)] == ["cli:go"]
        assert not (tmp_path / "out" / "lib-go").exists()

    def test_cli_vars_overlay_file_targets(
        self, cli_runner, tmp_path: Path, config_file: Path
    ) -> None:
        result = _invoke(
            cli_runner,
            ["-q", "build", "-f", str(config_file), "--only", "cli:go", "-R", "module=override"],
            _plugins(tmp_path),
        )

        assert result.exit_code == EXIT_SUCCESS
        sent = json.loads((tmp_path / "out" / "cli-go" / "request.json").read_text())
        assert sent["vars"] == {"module": "override"}

    def test_nothing_selected(self, cli_runner, tmp_path: Path, config_file: Path) -> None:
        result = _invoke(
            cli_runner, ["build", "-f", str(config_file), "-O", "java"], _plugins(tmp_path)
        )
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "No build targets selected" in result.output

    @pytest.mark.parametrize(
        "extra",
        [["-k", "cli"], ["--language", "go"], ["-s", "x.yaml"], ["-T", "tpl"], ["-o", "out"]],
    )
    def test_conflicting_flags(
        self, cli_runner, tmp_path: Path, config_file: Path, extra: list[str]
    ) -> None:
        result = _invoke(cli_runner, ["build", "-f", str(config_file), *extra], _plugins(tmp_path))
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "cannot be combined with --from-file" in result.output

    def test_missing_config(self, cli_runner, tmp_path: Path) -> None:
        result = _invoke(
            cli_runner, ["build", "-f", str(tmp_path / "nope.yaml")], PluginRegistry()
        )
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "Cannot read build config" in result.output

    def test_partial_failure(
        self, cli_runner, tmp_path: Path, config_file: Path, make_plugin
    ) -> None:
        make_plugin("openapi-gen-lib-go", FAILING_SCRIPT)

        result = _invoke(cli_runner, ["--plain", "build", "-f", str(config_file)], _plugins(tmp_path))

        assert result.exit_code == EXIT_PLUGIN_ERROR
        assert (tmp_path / "out" / "cli-go" / "request.json").is_file()
        assert (tmp_path / "out" / "lib-rust" / "request.json").is_file()
        assert "1 of 3 target(s) failed." in result.output
