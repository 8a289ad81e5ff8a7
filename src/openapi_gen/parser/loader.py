"""Load OpenAPI documents from a URL, local file, or stdin, and validate them.

This module handles all I/O for fetching raw OpenAPI documents and turning
them into Python dictionaries. JSON and YAML are both accepted, with
format detection from the file extension, the response content type, or the
content itself.

The public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`validate_openapi_version` -- Reject Swagger 2.x and non-3.x
  documents early with a readable message.
* :func:`validate_spec` -- Full schema validation via
  :mod:`openapi_spec_validator`.
* :func:`load_and_validate` -- All of the above in order.

Every failure surfaces as :class:`~openapi_gen.exceptions.SpecParseError`
(or its subclass :class:`~openapi_gen.exceptions.SpecValidationError`), which
the CLI maps to exit code 7.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from openapi_spec_validator import validate
from openapi_spec_validator.validation.exceptions import (
    OpenAPIValidationError,
    ValidatorDetectError,
)
from referencing.exceptions import Unresolvable

from openapi_gen.exceptions import SpecParseError, SpecValidationError

logger = logging.getLogger(__name__)


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin, trying JSON then YAML."""
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S).

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    logger.debug("Fetching spec from %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file.

    ``.json``, ``.yaml`` and ``.yml`` extensions select the parser; other
    extensions fall back to content-based detection.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format,
            or does not hold an object at the top level.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise SpecParseError(
                    f"Spec must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            raise SpecParseError(
                "Spec must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return _stringify_keys(result)

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def _stringify_keys(node: Any) -> Any:
    """Return *node* with every mapping key converted to ``str``.

    YAML reads unquoted response codes (``200:``) and other scalar keys as
    ints, bools or dates, while JSON object keys are always strings.
    """
    if isinstance(node, dict):
        return {str(key): _stringify_keys(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_stringify_keys(item) for item in node]
    return node


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Only OpenAPI 3.x documents are supported.

    Raises:
        SpecParseError: If the version is missing, unsupported, or indicates Swagger 2.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    return version_str


def validate_spec(spec: dict[str, Any]) -> None:
    """Validate *spec* against the OpenAPI schema for its declared version.

    Non-string mapping keys are compared as strings, so documents built in
    code with ``{200: ...}`` response maps validate like parsed ones.

    Raises:
        SpecValidationError: With the validator's message and the JSON path of
            the offending node, or the reference that cannot be resolved.
    """
    try:
        validate(_stringify_keys(spec))
    except OpenAPIValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path)
        where = f" (at {location})" if location else ""
        raise SpecValidationError(f"Invalid OpenAPI document{where}: {exc.message}") from exc
    except Unresolvable as exc:
        raise SpecValidationError(f"Invalid OpenAPI document: unresolvable reference: {exc}") from exc
    except ValidatorDetectError as exc:
        raise SpecValidationError(f"Invalid OpenAPI document: {exc}") from exc


def load_and_validate(source: str) -> dict[str, Any]:
    """Load *source*, check its version and validate it.

    Returns:
        The parsed, validated document.

    Raises:
        SpecParseError: On any load, parse or validation failure.
    """
    doc = load_spec(source)
    version = validate_openapi_version(doc)
    logger.debug("Validating OpenAPI %s document from %s", version, source)
    validate_spec(doc)
    return doc
