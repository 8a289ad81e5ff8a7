"""Exception hierarchy for openapi-gen.

All exceptions inherit from :class:`OpenAPIGenError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi_gen.exit_codes`. The top-level handler in
:func:`openapi_gen.app.main` catches ``OpenAPIGenError`` and exits with the
appropriate code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    OpenAPIGenError (exit 1)
    +-- InvalidUsageError         (exit 2)
    +-- SpecParseError            (exit 7)
    |   +-- SpecValidationError   (exit 7)
    |   +-- ExtensionDecodeError  (exit 7)
    +-- PluginError               (exit 10)
    |   +-- PluginNotFoundError   (exit 10)
    +-- ConfigError               (exit 1)

Plugin discovery problems are deliberately absent: discovery logs and skips
bad entries instead of raising.
"""

from openapi_gen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_SPEC_ERROR,
)


class OpenAPIGenError(Exception):
    """Base exception for all openapi-gen errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OpenAPIGenError):
    """Raised for invalid CLI arguments (e.g. a ``--var`` without ``=``)."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(OpenAPIGenError):
    """Raised when the OpenAPI document cannot be read or parsed."""

    exit_code = EXIT_SPEC_ERROR


class SpecValidationError(SpecParseError):
    """Raised when the document fails OpenAPI schema validation.

    The validator's message is kept verbatim so the offending location is
    visible to the user.
    """


class ExtensionDecodeError(SpecParseError):
    """Raised when an ``x-operation-name`` payload is not a JSON string."""


class PluginError(OpenAPIGenError):
    """Raised when a generator plugin cannot be run."""

    exit_code = EXIT_PLUGIN_ERROR


class PluginNotFoundError(PluginError):
    """Raised when no plugin is registered for the requested kind/language."""


class ConfigError(OpenAPIGenError):
    """Raised for configuration problems (unreadable build files, bad settings)."""

    exit_code = EXIT_GENERIC_FAILURE
