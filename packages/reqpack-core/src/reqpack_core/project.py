"""Host build interfaces.

The packager only needs three facts from the host build (final artifact
name, base directory, version) and one capability (register a produced
file). Both are expressed as protocols so any build front end can
supply them.
"""

from __future__ import annotations

from pathlib import Path
import re
import tomllib
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from reqpack_core.errors import ConfigurationError

PYPROJECT_FILE_NAME = "pyproject.toml"


@runtime_checkable
class ProjectMetadata(Protocol):
    """Read-only view of the project being packaged."""

    @property
    def final_name(self) -> str:
        """Base name of the build's final artifact, e.g. ``my-service-1.2.0``."""
        ...

    @property
    def base_dir(self) -> Path:
        """Project root directory."""
        ...

    @property
    def version(self) -> str:
        """Project version string."""
        ...


@runtime_checkable
class ArtifactAttacher(Protocol):
    """Registers a produced file with the host build's artifact set."""

    def attach(self, path: Path, *, artifact_type: str, classifier: str) -> None:
        """Attach ``path`` as an artifact of ``artifact_type`` under ``classifier``."""
        ...


class StaticProject(BaseModel):
    """ProjectMetadata backed by explicit values.

    Example:
        >>> project = StaticProject(
        ...     final_name="my-service-1.2.0",
        ...     base_dir=Path("."),
        ...     version="1.2.0",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    final_name: str = Field(..., min_length=1, description="Final artifact base name")
    base_dir: Path = Field(..., description="Project root directory")
    version: str = Field(..., min_length=1, description="Project version")


def _normalize_name(name: str) -> str:
    # PEP 503 normalization, keeping '-' as separator
    return re.sub(r"[-_.]+", "-", name).lower()


def load_pyproject_metadata(base_dir: Path | str) -> StaticProject:
    """Derive project metadata from ``<base_dir>/pyproject.toml``.

    The final name is ``<normalized name>-<version>``, matching the stem
    of the sdist/wheel the project would build.

    Args:
        base_dir: Project root containing ``pyproject.toml``.

    Returns:
        StaticProject for the project.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or lacks
            a static ``[project]`` name and version.
    """
    base_dir = Path(base_dir)
    pyproject = base_dir / PYPROJECT_FILE_NAME
    if not pyproject.is_file():
        raise ConfigurationError(
            "pyproject.toml not found; pass --final-name and --project-version",
            file_path=str(pyproject),
        )

    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            "Invalid TOML",
            file_path=str(pyproject),
            internal_details=str(e),
        ) from e
    except OSError as e:
        raise ConfigurationError(
            "Cannot read pyproject.toml",
            file_path=str(pyproject),
            internal_details=f"{type(e).__name__}: {e}",
        ) from e

    project = data.get("project", {})
    name = project.get("name")
    version = project.get("version")
    if not name:
        raise ConfigurationError(
            "Missing project name", file_path=str(pyproject), field_path="project.name"
        )
    if not version:
        raise ConfigurationError(
            "Missing static project version",
            file_path=str(pyproject),
            field_path="project.version",
        )

    return StaticProject(
        final_name=f"{_normalize_name(name)}-{version}",
        base_dir=base_dir,
        version=str(version),
    )
