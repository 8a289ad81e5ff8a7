"""Canonical Pydantic models shared across all openapi-gen modules.

The models fall into three groups:

**Plugin models** -- produced by discovery:
    :class:`Plugin`.

**Build configuration models** -- read from ``--from-file`` documents or
assembled from ``build`` flags, and handed to plugins:
    :class:`License`, :class:`Copyright`, :class:`Vars`, :class:`BuildInfo`,
    :class:`Config`, :class:`BuildRequest`, :class:`BuildResult`, and
    :class:`Settings`.

**Inspection models** -- derived from an OpenAPI document, never persisted:
    :class:`Params`, :class:`Operation`, :class:`Service`,
    :class:`OperationNames`, :class:`InspectedOperation`, and
    :class:`Inspection`.

License, copyright and variable blocks are composed by value into both
:class:`Config` and :class:`BuildInfo`. In configuration files their fields
may be written flat (``license_name: MIT`` next to ``kind: cli``) or nested
(``license: {license_name: MIT}``); both shapes validate to the same model.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Plugins ---


class Plugin(BaseModel):
    """One generator executable found on the search path.

    ``openapi-gen-cli-typescript`` is a plugin of kind ``cli`` named
    ``typescript``. Two plugins are the same plugin when their ``path``
    matches.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: str
    path: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plugin):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)


# --- Build configuration ---


class License(BaseModel):
    """License metadata stamped into generated sources.

    At most one of ``license_text`` and ``license_file`` is expected to be
    set; when both are, the text wins.
    """

    model_config = ConfigDict(frozen=True)

    license_name: str = ""
    license_text: str = ""
    license_file: str = ""

    def is_empty(self) -> bool:
        return not (self.license_name or self.license_text or self.license_file)


class Copyright(BaseModel):
    """Copyright notice, given inline or as a file path."""

    model_config = ConfigDict(frozen=True)

    copyright_text: str = ""
    copyright_file: str = ""

    def is_empty(self) -> bool:
        return not (self.copyright_text or self.copyright_file)


class Vars(BaseModel):
    """Template variable bindings.

    ``vars_files`` are merged in order, then ``vars_values`` override them.
    See :func:`~openapi_gen.buildconfig.resolve_vars`.
    """

    model_config = ConfigDict(frozen=True)

    vars_values: dict[str, str] = Field(default_factory=dict)
    vars_files: list[str] = Field(default_factory=list)


_EMBEDDED: dict[str, type[BaseModel]] = {
    "license": License,
    "copyright": Copyright,
    "vars": Vars,
}


def _lift_inline_fields(data: Any) -> Any:
    """Move flat ``license_*``/``copyright_*``/``vars_*`` keys into nested blocks."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for block, model in _EMBEDDED.items():
        nested = dict(data.get(block) or {})
        for field in model.model_fields:
            if field in data:
                nested.setdefault(field, data.pop(field))
        if nested:
            data[block] = nested
    return data


class BuildInfo(BaseModel):
    """One generation target: which plugin, which spec, where to write.

    Constructed from CLI flags or one entry of a configuration file and not
    mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    license: License = Field(default_factory=License)
    copyright: Copyright = Field(default_factory=Copyright)
    vars: Vars = Field(default_factory=Vars)
    kind: str = ""
    spec: str = Field(default="", description="Path or URL of the OpenAPI document")
    output: str = Field(default="", description="Output directory")
    language: str = ""
    templates: str = Field(default="", description="Template directory")
    user_agent: str = ""
    version: str = ""
    api_service_prefix: str = ""
    api_service_suffix: str = ""

    @model_validator(mode="before")
    @classmethod
    def _inline(cls, data: Any) -> Any:
        return _lift_inline_fields(data)

    @property
    def label(self) -> str:
        """Short ``kind:language`` label used in progress and error messages."""
        return f"{self.kind or '?'}:{self.language or '*'}"


class Config(BaseModel):
    """Top-level build configuration: shared defaults plus build targets.

    Example (YAML)::

        license_name: Apache-2.0
        copyright_text: "(c) Example Corp"
        build:
          - kind: cli
            language: go
            spec: petstore.yaml
            output: out/go
          - kind: lib
            language: rust
            spec: petstore.yaml
            output: out/rust
            license_name: MIT
    """

    license: License = Field(default_factory=License)
    copyright: Copyright = Field(default_factory=Copyright)
    build: list[BuildInfo] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _inline(cls, data: Any) -> Any:
        return _lift_inline_fields(data)


class BuildRequest(BaseModel):
    """Fully resolved build target, serialised as JSON on a plugin's stdin."""

    kind: str
    language: str = ""
    spec: str
    output: str
    templates: str = ""
    vars: dict[str, str] = Field(default_factory=dict)
    license_name: str = ""
    license_text: str = ""
    copyright_text: str = ""
    user_agent: str = ""
    version: str = ""
    api_service_prefix: str = ""
    api_service_suffix: str = ""
    skip_tags: list[str] = Field(default_factory=list)


class BuildResult(BaseModel):
    """Outcome of running one build target."""

    target: str
    plugin: Optional[str] = None
    exit_code: Optional[int] = None
    ok: bool = False
    error: Optional[str] = None
    files: list[str] = Field(default_factory=list)
    stderr: str = ""


class Settings(BaseModel):
    """User settings persisted at ``~/.config/openapi-gen/settings.json``.

    Environment variables override the file; see
    :func:`~openapi_gen.settings.load_settings`.
    """

    plugin_prefix: str = Field(
        default="openapi-gen-", description="Executable name prefix for plugins"
    )
    plugin_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directories searched before $PATH",
    )
    timeout_seconds: float = Field(default=300.0, gt=0)


# --- Inspection ---


class Params(BaseModel):
    """A named, typed value flowing in or out of an operation."""

    kind: str
    name: str


class Operation(BaseModel):
    """Parameter summary of one OpenAPI operation."""

    request_body: Optional[Params] = None
    response_body: Optional[Params] = None
    query_params: list[Params] = Field(default_factory=list)
    request_headers: list[Params] = Field(default_factory=list)
    path_params: list[Params] = Field(default_factory=list)


class Service(BaseModel):
    operations: list[Operation] = Field(default_factory=list)


class OperationNames(BaseModel):
    """Every identifier form derived from one ``operationId``."""

    kebab: str = ""
    snake: str = ""
    camel: str = ""
    pascal: str = ""
    flag: str = ""
    enum: str = ""


class InspectedOperation(BaseModel):
    """One path + method pair with its derived names."""

    path: str
    method: str
    operation_id: str = ""
    override_name: Optional[str] = Field(
        default=None, description="Decoded x-operation-name value"
    )
    tag: Optional[str] = Field(default=None, description="First declared tag")
    names: OperationNames = Field(default_factory=OperationNames)
    operation: Operation = Field(default_factory=Operation)


class Inspection(BaseModel):
    """Result of walking an OpenAPI document.

    ``tags`` is a set; ``tag_classes`` maps each tag to its PascalCase form.
    Operation order follows document order but consumers must not rely on it.
    """

    title: str = ""
    tags: set[str] = Field(default_factory=set)
    tag_classes: dict[str, str] = Field(default_factory=dict)
    operations: list[InspectedOperation] = Field(default_factory=list)

    @property
    def service(self) -> Service:
        return Service(operations=[op.operation for op in self.operations])
