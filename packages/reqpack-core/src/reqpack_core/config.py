"""Packager configuration model.

All inputs of a packaging run (paths, patterns, tags, skip flags) live in
one frozen model that is passed explicitly to the packager and assembler.

Relative paths are resolved against the project base directory by
:meth:`PackagerConfig.for_project` and :meth:`PackagerConfig.from_yaml`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
import yaml

from reqpack_core.errors import ConfigurationError
from reqpack_core.globs import compile_patterns
from reqpack_core.serialization import load_yaml

DEFAULT_TEST_RESULTS_PATTERN = "test_results/**/*.xml"
DEFAULT_REQUIREMENTS_ANNOTATIONS_FILE = Path(
    "build/generated-sources/annotations/resources/annotations.yml"
)
DEFAULT_SVCS_ANNOTATIONS_FILE = Path(
    "build/generated-test-sources/test-annotations/resources/annotations.yml"
)
DEFAULT_OUTPUT_DIRECTORY = Path("build/reqstool")
DEFAULT_DATASET_PATH = Path("reqstool")

CONFIG_SECTION = "reqpack"

_PATH_FIELDS = (
    "requirements_annotations_file",
    "svcs_annotations_file",
    "output_directory",
    "dataset_path",
)


class PackagerConfig(BaseModel):
    """Configuration for one packaging run.

    Attributes:
        requirements_annotations_file: Annotations from the source-code scan.
        svcs_annotations_file: Annotations from the test-code scan.
        output_directory: Where annotations.yml and the zip are written.
        dataset_path: Directory holding requirements.yml and optional files.
        test_results: Glob patterns, relative to the project root.
        language: Ecosystem tag written to the manifest.
        build: Build tool tag written to the manifest.
        skip: Skip the whole run.
        skip_assemble: Combine annotations but do not build the zip.
        skip_attach: Build the zip but do not attach it.

    Example:
        >>> config = PackagerConfig.for_project(
        ...     Path("/work/my-service"),
        ...     test_results=["reports/**/*.xml"],
        ... )
        >>> config.dataset_path
        PosixPath('/work/my-service/reqstool')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    requirements_annotations_file: Path = Field(
        default=DEFAULT_REQUIREMENTS_ANNOTATIONS_FILE,
        description="Annotations produced by the source-code scan",
    )
    svcs_annotations_file: Path = Field(
        default=DEFAULT_SVCS_ANNOTATIONS_FILE,
        description="Annotations produced by the test-code scan",
    )
    output_directory: Path = Field(
        default=DEFAULT_OUTPUT_DIRECTORY,
        description="Output directory for annotations.yml and the zip artifact",
    )
    dataset_path: Path = Field(
        default=DEFAULT_DATASET_PATH,
        description="Directory containing requirements.yml",
    )
    test_results: tuple[str, ...] = Field(
        default=(DEFAULT_TEST_RESULTS_PATTERN,),
        description="Glob patterns selecting test result files",
    )
    language: str = Field(default="python", min_length=1, description="Manifest language tag")
    build: str = Field(default="hatch", min_length=1, description="Manifest build tag")
    skip: bool = Field(default=False, description="Skip execution entirely")
    skip_assemble: bool = Field(default=False, description="Skip zip assembly")
    skip_attach: bool = Field(default=False, description="Skip zip attachment")

    @field_validator("test_results", mode="before")
    @classmethod
    def _default_when_empty(cls, value: Any) -> Any:
        if value is None or (isinstance(value, (list, tuple)) and not value):
            return (DEFAULT_TEST_RESULTS_PATTERN,)
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("test_results")
    @classmethod
    def _compile_patterns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Raises GlobPatternError for malformed patterns
        compile_patterns(value)
        return value

    def resolve(self, base_dir: Path | str) -> PackagerConfig:
        """Return a copy with relative paths anchored at ``base_dir``."""
        base = Path(base_dir)
        updates = {
            name: base / getattr(self, name)
            for name in _PATH_FIELDS
            if not getattr(self, name).is_absolute()
        }
        return self.model_copy(update=updates)

    @classmethod
    def for_project(cls, base_dir: Path | str, **overrides: Any) -> PackagerConfig:
        """Build a config with defaults resolved against ``base_dir``.

        Args:
            base_dir: Project root directory.
            **overrides: Field values replacing the defaults. ``None``
                values are ignored.

        Returns:
            Resolved PackagerConfig.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        return cls.model_validate(values).resolve(base_dir)

    @classmethod
    def from_yaml(
        cls,
        path: Path | str,
        base_dir: Path | str | None = None,
        **overrides: Any,
    ) -> PackagerConfig:
        """Load configuration from a YAML file.

        The file may hold the fields at top level or under a ``reqpack``
        key. Explicit ``overrides`` win over file values.

        Args:
            path: YAML configuration file.
            base_dir: Directory relative paths resolve against. Defaults to
                the configuration file's directory.
            **overrides: Field values taking precedence; ``None`` ignored.

        Raises:
            ConfigurationError: If the file is missing, unreadable or not valid YAML.
            pydantic.ValidationError: If field values are invalid.
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError("Configuration file not found", file_path=str(path))

        try:
            data = load_yaml(path) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Invalid YAML in configuration file",
                file_path=str(path),
                internal_details=str(e),
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(
                "Cannot read configuration file",
                file_path=str(path),
                internal_details=f"{type(e).__name__}: {e}",
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration must be a mapping", file_path=str(path)
            )
        section = data.get(CONFIG_SECTION, data)
        if not isinstance(section, dict):
            raise ConfigurationError(
                "Configuration section must be a mapping",
                file_path=str(path),
                field_path=CONFIG_SECTION,
            )

        values = {**section, **{k: v for k, v in overrides.items() if v is not None}}
        return cls.model_validate(values).resolve(base_dir if base_dir is not None else path.parent)
