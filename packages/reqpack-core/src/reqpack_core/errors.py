"""Custom exception hierarchy for reqpack-core.

This module defines the exception classes used throughout reqpack:
- ReqpackError: Base exception for all reqpack errors
- ConfigurationError: Raised when configuration or an input document is invalid
- GlobPatternError: Raised when a test result glob pattern cannot be compiled
- MissingMandatoryInputError: Raised when the mandatory requirements file is absent
- PackagingError: Raised when an I/O step of packaging fails
- ArchiveAssemblyError: Raised when writing the zip archive fails

User-facing messages name the artifact or step that failed. Underlying
causes (OS error text, stack context) go to the structlog error log through
``internal_details`` and are chained with ``raise ... from``.
"""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class ReqpackError(Exception):
    """Base exception for reqpack.

    All reqpack exceptions inherit from this class.

    Args:
        user_message: Message to display to the user.
        internal_details: Optional technical details for logging.

    Example:
        >>> raise ReqpackError(
        ...     "Packaging failed",
        ...     internal_details="[Errno 28] No space left on device",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ReqpackError with user message and optional internal details.

        Args:
            user_message: Message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "reqpack_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(ReqpackError):
    """Raised when configuration or an input document cannot be used.

    Use this exception when:
    - A YAML file cannot be parsed
    - A configuration field is invalid
    - A configuration file is not found

    Attributes:
        file_path: Path to the offending file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid YAML",
        ...     file_path="build/reqstool/annotations.yml",
        ...     internal_details="mapping values are not allowed here",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class GlobPatternError(ConfigurationError):
    """Raised when a glob pattern is malformed.

    Attributes:
        pattern: The pattern that failed to compile.

    Example:
        >>> raise GlobPatternError("test_results/[abc.xml", "unterminated '['")
        # User sees: "Invalid glob pattern 'test_results/[abc.xml': unterminated '['"
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class MissingMandatoryInputError(ReqpackError):
    """Raised when a mandatory dataset file does not exist.

    Attributes:
        path: Absolute path where the file was expected.

    Example:
        >>> raise MissingMandatoryInputError(Path("reqstool/requirements.yml"))
        # User sees: "Missing mandatory requirements.yml: /abs/reqstool/requirements.yml"
    """

    def __init__(self, path: Path) -> None:
        absolute = Path(path).absolute()
        super().__init__(f"Missing mandatory {absolute.name}: {absolute}")
        self.path = absolute


class PackagingError(ReqpackError):
    """Raised when reading, writing or copying a packaging input fails.

    Always raised with the underlying ``OSError`` chained as ``__cause__``.

    Example:
        >>> try:
        ...     path.write_text(content)
        ... except OSError as e:
        ...     raise PackagingError(
        ...         f"Cannot write {path}", internal_details=str(e)
        ...     ) from e
    """

    pass


class ArchiveAssemblyError(PackagingError):
    """Raised when the zip archive cannot be assembled or attached.

    The partially written archive, if any, is left on disk; callers
    should discard it.
    """

    pass
