"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~openapi_gen.exceptions.OpenAPIGenError` subclass.
CI scripts can inspect the exit code to tell a broken spec from a failing
generator without parsing stderr.

Example::

    $ openapi-gen broken.yaml
    $ echo $?
    7   # EXIT_SPEC_ERROR -- the document failed validation
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_ERROR = 7
"""The OpenAPI document could not be loaded, parsed, or validated."""

EXIT_PLUGIN_ERROR = 10
"""A generator plugin was missing or failed."""
