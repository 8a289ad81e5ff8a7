"""Follow internal ``$ref`` JSON Reference pointers in OpenAPI documents.

Only internal references (those starting with ``#/``) are supported. The
inspector needs reference *names* as much as their targets (a request body
of ``#/components/schemas/Pet`` has kind ``Pet``), so references are resolved
one at a time on demand rather than inlined across the whole document.
"""

from __future__ import annotations

from typing import Any

from openapi_gen.exceptions import SpecParseError


def ref_name(ref: str) -> str:
    """Return the last segment of a JSON pointer, unescaped.

    ``"#/components/schemas/Pet"`` gives ``"Pet"``.
    """
    return ref.rsplit("/", 1)[-1].replace("~1", "/").replace("~0", "~")


def resolve_ref(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Handles RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/parameters/Limit"``).
        root: The root document to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If the reference is external or any segment in the
            pointer path does not exist in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current


def deref(obj: Any, root: dict[str, Any], limit: int = 32) -> Any:
    """Follow ``$ref`` chains on *obj* until a non-reference value is reached.

    Raises:
        SpecParseError: On an unresolvable or circular chain.
    """
    seen: set[str] = set()
    while isinstance(obj, dict) and "$ref" in obj:
        ref = obj["$ref"]
        if ref in seen or len(seen) >= limit:
            raise SpecParseError(f"Circular $ref chain at '{ref}'")
        seen.add(ref)
        obj = resolve_ref(ref, root)
    return obj
