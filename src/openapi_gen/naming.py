"""Identifier case transformations for generated code.

Turns OpenAPI ``operationId`` values (and tag names) into the identifier
forms generators need: ``kebab-case``, ``snake_case``, ``camelCase``,
``PascalCase``, ``--flag-form`` and ``ENUM_FORM``.

All forms share one segmentation rule. Scanning left to right, a word
boundary falls before a character when:

* it is upper-case and the previous character is lower-case,
* it is a digit and the previous character is not,
* it is not a digit and the previous character is,
* it follows one or more characters that are neither letters nor digits.
  Those characters are dropped; a run of them yields a single boundary.

The first emitted character is never preceded by a boundary, so leading
punctuation disappears and punctuation-only input yields ``""``. A leading
underscore is therefore not kept as a privacy marker: ``to_kebab("_private")``
is ``"private"``, not ``"_private"``. Generators that want the marker must
add it back themselves.

Example::

    >>> to_kebab("getUserByID123")
    'get-user-by-id-123'
    >>> to_enum("getUserByID123")
    'GET_USER_BY_ID_123'
"""

from __future__ import annotations

from typing import Callable, Optional

from openapi_gen.models import OperationNames


def _is_transition(prev: str, char: str) -> bool:
    """Return True if a case or digit transition separates *prev* and *char*."""
    if not prev:
        return False
    if char.isupper() and prev.islower():
        return True
    return char.isdigit() != prev.isdigit()


def _segment(identifier: str, separator: str = "", capitalize: bool = False) -> str:
    """Rebuild *identifier* with *separator* at every word boundary.

    Args:
        identifier: Source identifier; any string is accepted.
        separator: Emitted at each boundary. Empty for camel/Pascal forms.
        capitalize: Upper-case the first character of every word after the
            first.

    Returns:
        The re-segmented identifier. Case is otherwise left untouched.
    """
    out: list[str] = []
    pending = False
    prev = ""

    for char in identifier:
        if not char.isalnum():
            pending = True
            prev = char
            continue

        boundary = pending or _is_transition(prev, char)
        pending = False
        prev = char

        if boundary and out:
            out.append(separator)
            if capitalize:
                char = char.upper()
        out.append(char)

    return "".join(out)


def to_kebab(identifier: str) -> str:
    """Convert *identifier* to ``kebab-case``."""
    return _segment(identifier, "-").lower()


def to_snake(identifier: str) -> str:
    """Convert *identifier* to ``snake_case``."""
    return _segment(identifier, "_").lower()


def to_camel(identifier: str) -> str:
    """Convert *identifier* to ``camelCase``.

    The first character keeps its case: ``"GetPets"`` stays ``"GetPets"``.
    Lower-case the input first when strict camelCase is required.
    """
    return _segment(identifier, capitalize=True)


def to_pascal(identifier: str) -> str:
    """Convert *identifier* to ``PascalCase``."""
    camel = to_camel(identifier)
    return camel[:1].upper() + camel[1:]


def to_flag(identifier: str) -> str:
    """Convert *identifier* to a CLI long-option name (``--kebab-case``).

    Returns ``""`` when the identifier has no letters or digits, since a
    bare ``--`` is not a usable flag.
    """
    kebab = to_kebab(identifier)
    if not kebab:
        return ""
    return "--" + kebab


def to_enum(identifier: str) -> str:
    """Convert *identifier* to an enum constant (``UPPER_SNAKE_CASE``)."""
    return to_snake(identifier).upper()


def all_forms(identifier: str) -> OperationNames:
    """Derive every identifier form for *identifier* at once."""
    return OperationNames(
        kebab=to_kebab(identifier),
        snake=to_snake(identifier),
        camel=to_camel(identifier),
        pascal=to_pascal(identifier),
        flag=to_flag(identifier),
        enum=to_enum(identifier),
    )


# ---------------------------------------------------------------------------
# Label reversal
# ---------------------------------------------------------------------------


def capitalize_first(label: str) -> str:
    """Upper-case the first character of *label*, leaving the rest as-is."""
    return label[:1].upper() + label[1:]


def reverse_split(
    value: str,
    separator: str,
    transform: Optional[Callable[[str], str]] = None,
) -> str:
    """Split *value*, transform each segment, reverse the order, join with ``.``.

    Empty segments are preserved (``"a..b"`` has three segments). The output
    is always joined with ``"."`` whatever *separator* was, which makes this
    suitable for turning hostnames into reverse-domain package names.

    Args:
        value: The string to split.
        separator: Split delimiter. An empty separator splits into single
            characters.
        transform: Optional per-segment function applied before reversal.

    Returns:
        The reversed, dot-joined string.

    Example::

        >>> reverse_split("example.co.mz", ".", capitalize_first)
        'Mz.Co.Example'
    """
    parts = value.split(separator) if separator else list(value)
    if transform is not None:
        parts = [transform(part) for part in parts]
    return ".".join(reversed(parts))
