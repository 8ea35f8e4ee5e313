"""CLI error handling for reqpack-cli.

Maps reqpack-core exceptions to user-friendly messages and exit codes.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape

from reqpack_cli.output import error
from reqpack_core.errors import (
    ConfigurationError,
    MissingMandatoryInputError,
    PackagingError,
    ReqpackError,
)

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (missing input, bad pattern, bad config)
EXIT_SYSTEM_ERROR = 2  # System error (permissions, write failure)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Ignored; output always goes to the shared console.
        """
        error(escape(self.format_message()))


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - skip: Input should be a valid boolean"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def exit_code_for(err: ReqpackError) -> int:
    """Pick the exit code for a reqpack-core error."""
    if isinstance(err, (MissingMandatoryInputError, ConfigurationError)):
        return EXIT_USER_ERROR
    if isinstance(err, PackagingError):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


@contextmanager
def cli_errors() -> Iterator[None]:
    """Translate library exceptions raised inside the block into CLIError.

    Example:
        >>> with cli_errors():
        ...     packager.run()
    """
    try:
        yield
    except ReqpackError as e:
        raise CLIError(e.user_message, exit_code=exit_code_for(e)) from e
    except PydanticValidationError as e:
        raise CLIError(format_pydantic_error(e)) from e
    except PermissionError as e:
        raise CLIError(
            f"Permission denied: {e.filename}", exit_code=EXIT_SYSTEM_ERROR
        ) from e
