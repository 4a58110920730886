"""Exception hierarchy for saloon-sdkgen.

All exceptions inherit from :class:`SdkGenError`, which carries an
``exit_code`` the CLI exits with. They cover configuration and input
problems only: everything raised here aborts the run before generation
starts. Per-artifact generation failures are logged and skipped, and
per-file write failures are reported as write results.

Subclass hierarchy::

    SdkGenError (exit 1)
    +-- ConfigError               (exit 1)
    +-- SpecFileNotFoundError     (exit 1)
    +-- ParserNotRegisteredError  (exit 2)
    +-- SpecParseError            (exit 3)
"""

EXIT_GENERIC_FAILURE = 1
EXIT_INVALID_USAGE = 2
EXIT_SPEC_PARSE_ERROR = 3


class SdkGenError(Exception):
    """Base exception for all saloon-sdkgen errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SdkGenError):
    """Raised when a generator config file is unreadable or invalid."""


class SpecFileNotFoundError(SdkGenError):
    """Raised when the specification file does not exist."""


class ParserNotRegisteredError(SdkGenError):
    """Raised when no parser is registered for the requested spec type.

    This is not the same as an unsupported file format: ``--type`` names the
    specification flavour (openapi, postman), not yaml or json.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, spec_type: str, available: list[str]):
        super().__init__(f"No parser registered for --type='{spec_type}'")
        self.spec_type = spec_type
        self.available = available


class SpecParseError(SdkGenError):
    """Raised when a specification file cannot be read as the selected type."""

    exit_code = EXIT_SPEC_PARSE_ERROR
