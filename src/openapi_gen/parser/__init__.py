"""OpenAPI document loading and validation.

Typical usage::

    from openapi_gen.parser import load_and_validate

    doc = load_and_validate("https://petstore3.swagger.io/api/v3/openapi.json")

Schema validation is delegated to :mod:`openapi_spec_validator`; this
package only handles I/O, format detection and error reporting.
"""

from openapi_gen.parser.loader import (
    load_and_validate,
    load_spec,
    validate_openapi_version,
    validate_spec,
)

__all__ = ["load_spec", "validate_openapi_version", "validate_spec", "load_and_validate"]
