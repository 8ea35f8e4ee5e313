"""Discovery of dataset files and test results to package.

The collector only inspects paths and directory metadata. File contents
are never read here; the archive assembler streams them later.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
import structlog

from reqpack_core.errors import MissingMandatoryInputError, PackagingError
from reqpack_core.globs import GlobMatcher, compile_patterns

logger = structlog.get_logger(__name__)

REQUIREMENTS_FILE_NAME = "requirements.yml"
SOFTWARE_VERIFICATION_CASES_FILE_NAME = "software_verification_cases.yml"
MANUAL_VERIFICATION_RESULTS_FILE_NAME = "manual_verification_results.yml"

REQUIREMENTS = "requirements"
SOFTWARE_VERIFICATION_CASES = "software_verification_cases"
MANUAL_VERIFICATION_RESULTS = "manual_verification_results"

#: Optional dataset files by logical resource name, in packaging order.
OPTIONAL_DATASET_FILES: Mapping[str, str] = {
    SOFTWARE_VERIFICATION_CASES: SOFTWARE_VERIFICATION_CASES_FILE_NAME,
    MANUAL_VERIFICATION_RESULTS: MANUAL_VERIFICATION_RESULTS_FILE_NAME,
}


class MatchedFile(BaseModel):
    """A test result file selected by the glob patterns.

    Attributes:
        relative_path: Forward-slash path relative to the project root.
        path: Absolute filesystem path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    relative_path: str = Field(..., min_length=1)
    path: Path

    @property
    def name(self) -> str:
        """Base file name."""
        return self.path.name


class CollectedResources(BaseModel):
    """Everything the assembler needs to copy, in packaging order.

    Attributes:
        requirements: Mandatory requirements file.
        optional: Present optional dataset files by logical name.
        test_results: Matched test result files sorted by relative path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    requirements: Path
    optional: dict[str, Path] = Field(default_factory=dict)
    test_results: tuple[MatchedFile, ...] = ()


def iter_files(root: Path, *, exclude: Iterable[Path] = ()) -> Iterator[Path]:
    """Yield every regular file under ``root`` exactly once.

    Directory symlinks are not followed. Directories are visited in
    sorted order so the walk itself is stable.

    Args:
        root: Directory to walk.
        exclude: Absolute file paths to leave out.

    Yields:
        Absolute file paths.

    Raises:
        PackagingError: If a directory cannot be listed.
    """
    excluded = {Path(p).absolute() for p in exclude}

    def _raise(err: OSError) -> None:
        raise PackagingError(
            f"Cannot scan directory: {err.filename}",
            internal_details=str(err),
        ) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        for filename in sorted(filenames):
            candidate = Path(dirpath, filename)
            if candidate.is_file() and candidate.absolute() not in excluded:
                yield candidate


class ResourceCollector:
    """Find the dataset files and test results for one packaging run.

    Args:
        dataset_path: Directory holding ``requirements.yml`` and the
            optional dataset files.
        project_root: Directory scanned for test results.
        patterns: Glob patterns relative to ``project_root``.

    Raises:
        GlobPatternError: If any pattern is malformed.

    Example:
        >>> collector = ResourceCollector(
        ...     Path("reqstool"), Path("."), ["test_results/**/*.xml"]
        ... )
        >>> resources = collector.collect()
        >>> [f.relative_path for f in resources.test_results]
        ['test_results/unit/TEST-a.xml']
    """

    def __init__(
        self,
        dataset_path: Path,
        project_root: Path,
        patterns: Iterable[str],
    ) -> None:
        self.dataset_path = Path(dataset_path)
        self.project_root = Path(project_root)
        self.matcher: GlobMatcher = compile_patterns(patterns)

    @property
    def requirements_file(self) -> Path:
        return self.dataset_path / REQUIREMENTS_FILE_NAME

    def require_mandatory(self) -> Path:
        """Return the requirements file, failing if it is absent.

        Raises:
            MissingMandatoryInputError: If ``requirements.yml`` is missing.
        """
        requirements = self.requirements_file
        if not requirements.is_file():
            raise MissingMandatoryInputError(requirements)
        return requirements

    def optional_files(self) -> dict[str, Path]:
        """Return the optional dataset files that exist, by logical name."""
        present: dict[str, Path] = {}
        for name, file_name in OPTIONAL_DATASET_FILES.items():
            candidate = self.dataset_path / file_name
            if candidate.is_file():
                present[name] = candidate
            else:
                logger.debug("optional_dataset_file_absent", resource=name, path=str(candidate))
        return present

    def match_test_results(self, *, exclude: Iterable[Path] = ()) -> tuple[MatchedFile, ...]:
        """Match files under the project root against the glob patterns.

        Args:
            exclude: Absolute paths never to match, such as the archive
                being written.

        Returns:
            Matches sorted by relative path.
        """
        if not self.project_root.is_dir():
            logger.warning("project_root_missing", path=str(self.project_root))
            return ()

        matches: list[MatchedFile] = []
        for file_path in iter_files(self.project_root, exclude=exclude):
            relative = file_path.relative_to(self.project_root).as_posix()
            if self.matcher.matches(relative):
                logger.debug("test_result_matched", path=relative)
                matches.append(MatchedFile(relative_path=relative, path=file_path.absolute()))

        matches.sort(key=lambda m: m.relative_path)
        return tuple(matches)

    def collect(self, *, exclude: Iterable[Path] = ()) -> CollectedResources:
        """Run the full discovery step.

        Raises:
            MissingMandatoryInputError: If ``requirements.yml`` is missing.
            PackagingError: If the project tree cannot be scanned.
        """
        requirements = self.require_mandatory()
        return CollectedResources(
            requirements=requirements,
            optional=self.optional_files(),
            test_results=self.match_test_results(exclude=exclude),
        )
