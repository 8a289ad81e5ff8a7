"""Walk a validated OpenAPI document and derive generator-facing metadata.

For every path + HTTP method pair, :func:`inspect_spec` records:

* the ``x-operation-name`` override, when present. Its value must decode to
  a non-empty string; anything else raises
  :class:`~openapi_gen.exceptions.ExtensionDecodeError` because generated
  identifiers would be built from it.
* the operation's first tag. Only the first tag groups an operation; the
  document's first top-level tag also seeds the tag set.
* all six identifier forms of the ``operationId``
  (see :func:`~openapi_gen.naming.all_forms`).
* a parameter summary (:class:`~openapi_gen.models.Operation`): query,
  header and path parameters plus request and response body kinds. Path-level
  parameters are merged with operation-level ones, which win on the same
  ``name`` and ``in``.

Each collected tag is also mapped to its PascalCase class name.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from openapi_gen.exceptions import ExtensionDecodeError
from openapi_gen.models import (
    InspectedOperation,
    Inspection,
    Operation,
    Params,
)
from openapi_gen.naming import all_forms, to_pascal
from openapi_gen.parser.refs import deref, ref_name

logger = logging.getLogger(__name__)

OPERATION_NAME_EXTENSION = "x-operation-name"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def decode_operation_name(raw: Any, where: str) -> str:
    """Decode an ``x-operation-name`` payload into an identifier.

    Loaders hand over already-decoded values, so a ``str`` is taken as-is;
    raw ``bytes`` are decoded as JSON first.

    Args:
        raw: The extension value.
        where: ``"GET /pets"``-style location used in error messages.

    Raises:
        ExtensionDecodeError: If the payload is not a non-empty string.
    """
    value = raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            value = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ExtensionDecodeError(
                f"Malformed {OPERATION_NAME_EXTENSION} on {where}: {exc}"
            ) from exc

    if not isinstance(value, str):
        raise ExtensionDecodeError(
            f"Malformed {OPERATION_NAME_EXTENSION} on {where}: expected a JSON string, "
            f"got {json.dumps(value, default=str)}"
        )
    if not value.strip():
        raise ExtensionDecodeError(f"Empty {OPERATION_NAME_EXTENSION} on {where}")
    return value


def inspect_spec(doc: dict[str, Any]) -> Inspection:
    """Collect tags, names and parameter summaries from *doc*.

    Args:
        doc: A loaded and validated OpenAPI 3.x document.

    Returns:
        An :class:`~openapi_gen.models.Inspection`.

    Raises:
        ExtensionDecodeError: If an ``x-operation-name`` payload is malformed.
        SpecParseError: If a ``$ref`` cannot be resolved.
    """
    tags: set[str] = set()

    doc_tags = doc.get("tags") or []
    if doc_tags and isinstance(doc_tags[0], dict) and doc_tags[0].get("name"):
        tags.add(doc_tags[0]["name"])

    operations: list[InspectedOperation] = []

    for path, path_item in (doc.get("paths") or {}).items():
        path_item = deref(path_item, doc)
        if not isinstance(path_item, dict):
            continue
        path_params = path_item.get("parameters", [])

        for method in HTTP_METHODS:
            op = path_item.get(method)
            if not isinstance(op, dict):
                continue
            where = f"{method.upper()} {path}"

            override: Optional[str] = None
            if OPERATION_NAME_EXTENSION in op:
                override = decode_operation_name(op[OPERATION_NAME_EXTENSION], where)
                logger.debug("%s overrides operation name with '%s'", where, override)

            op_tags = op.get("tags") or []
            first_tag = op_tags[0] if op_tags else None
            if first_tag:
                tags.add(first_tag)

            operation_id = op.get("operationId") or ""
            if not operation_id:
                logger.debug("%s has no operationId", where)

            operations.append(
                InspectedOperation(
                    path=path,
                    method=method,
                    operation_id=operation_id,
                    override_name=override,
                    tag=first_tag,
                    names=all_forms(operation_id),
                    operation=_extract_operation(doc, path_params, op),
                )
            )

    info = doc.get("info") or {}
    return Inspection(
        title=info.get("title", ""),
        tags=tags,
        tag_classes={tag: to_pascal(tag) for tag in tags},
        operations=operations,
    )


# ---------------------------------------------------------------------------
# Parameter summary
# ---------------------------------------------------------------------------


def _extract_operation(
    doc: dict[str, Any],
    path_params: list[Any],
    op: dict[str, Any],
) -> Operation:
    params = _merge_parameters(
        [deref(p, doc) for p in path_params],
        [deref(p, doc) for p in op.get("parameters", [])],
    )

    by_location: dict[str, list[Params]] = {"query": [], "header": [], "path": []}
    for param in params:
        location = param.get("in")
        if location in by_location:
            by_location[location].append(
                Params(kind=schema_kind(param.get("schema"), doc), name=param.get("name", ""))
            )

    return Operation(
        request_body=_request_body(op.get("requestBody"), doc),
        response_body=_response_body(op.get("responses") or {}, doc),
        query_params=by_location["query"],
        request_headers=by_location["header"],
        path_params=by_location["path"],
    )


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    ``name`` and ``in``.
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden]
    merged.extend(op_params)
    return merged


def schema_kind(schema: Any, doc: dict[str, Any]) -> str:
    """Describe a schema with a short kind string.

    ``$ref`` schemas are named after their target (``Pet``), arrays wrap
    their item kind (``array[Pet]``), and plain schemas use their ``type``.
    OpenAPI 3.1 type arrays use the first non-null type.
    """
    if not isinstance(schema, dict):
        return "object"
    if "$ref" in schema:
        return ref_name(schema["$ref"])

    type_value = schema.get("type", "object")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        type_value = non_null[0] if non_null else "object"

    if type_value == "array":
        return f"array[{schema_kind(schema.get('items'), doc)}]"
    return str(type_value)


def _first_schema(content: Any) -> Any:
    if not isinstance(content, dict):
        return None
    for media in content.values():
        if isinstance(media, dict) and "schema" in media:
            return media["schema"]
    return None


def _request_body(body: Any, doc: dict[str, Any]) -> Optional[Params]:
    if body is None:
        return None
    kind = ""
    if isinstance(body, dict) and "$ref" in body:
        kind = ref_name(body["$ref"])
        body = deref(body, doc)
    schema = _first_schema(body.get("content")) if isinstance(body, dict) else None
    if schema is not None:
        kind = schema_kind(schema, doc)
    return Params(kind=kind or "object", name="body")


def _response_body(responses: dict[str, Any], doc: dict[str, Any]) -> Optional[Params]:
    """Pick the lowest 2xx response with content, falling back to ``default``."""
    codes = sorted(str(code) for code in responses if str(code).startswith("2"))
    if "default" in responses:
        codes.append("default")

    for code in codes:
        response = responses.get(code)
        if response is None:
            response = responses.get(int(code)) if code.isdigit() else None
        response = deref(response, doc)
        if not isinstance(response, dict):
            continue
        schema = _first_schema(response.get("content"))
        if schema is not None:
            return Params(kind=schema_kind(schema, doc), name=code)
    return None
