"""Deterministic zip assembly of the reqstool artifact.

Archive layout for a project whose final name is ``my-service-1.2.0``::

    my-service-1.2.0-reqstool.zip
    └── my-service-1.2.0-reqstool/
        ├── requirements.yml
        ├── software_verification_cases.yml      (if present)
        ├── manual_verification_results.yml      (if present)
        ├── annotations.yml                      (if present)
        ├── test_results/
        │   └── TEST-*.xml                       (matched files, base names)
        └── reqstool_config.yml                  (always last)

Entries are written in that order with a fixed timestamp and fixed
permissions, so unchanged inputs produce a byte-identical archive.
"""

from __future__ import annotations

from datetime import datetime, timezone
import os
from pathlib import Path, PurePosixPath
import shutil
import zipfile

from pydantic import BaseModel, ConfigDict, Field
import structlog

from reqpack_core.annotations import ANNOTATIONS_FILE_NAME
from reqpack_core.collector import REQUIREMENTS, CollectedResources, ResourceCollector
from reqpack_core.config import PackagerConfig
from reqpack_core.errors import ArchiveAssemblyError
from reqpack_core.manifest import (
    ANNOTATIONS,
    MANIFEST_FILE_NAME,
    TEST_RESULTS,
    build_manifest,
    render_manifest,
)
from reqpack_core.project import ProjectMetadata

logger = structlog.get_logger(__name__)

ARCHIVE_SUFFIX = "reqstool"
TEST_RESULTS_DIR = "test_results"

# Earliest timestamp representable in a zip entry
FIXED_ZIP_TIMESTAMP: tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)
ZIP_MIN_YEAR = 1980
ZIP_MAX_YEAR = 2107
ENTRY_MODE = 0o100644


def zip_timestamp() -> tuple[int, int, int, int, int, int]:
    """Return the entry timestamp, honouring ``SOURCE_DATE_EPOCH``.

    Unset or invalid values, and dates a zip entry cannot hold (before 1980
    or after 2107), fall back to the fixed 1980-01-01 timestamp.
    """
    epoch_raw = os.environ.get("SOURCE_DATE_EPOCH")
    if not epoch_raw:
        return FIXED_ZIP_TIMESTAMP
    try:
        dt = datetime.fromtimestamp(int(epoch_raw), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.warning("invalid_source_date_epoch", value=epoch_raw)
        return FIXED_ZIP_TIMESTAMP
    if not ZIP_MIN_YEAR <= dt.year <= ZIP_MAX_YEAR:
        logger.warning(
            "invalid_source_date_epoch", value=epoch_raw, reason="outside zip date range"
        )
        return FIXED_ZIP_TIMESTAMP
    return (dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second)


class AssemblyResult(BaseModel):
    """Outcome of a successful assembly.

    Attributes:
        archive_path: Written zip file.
        entries: Archive entry names in write order.
        resources: Manifest resource map.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    archive_path: Path
    entries: tuple[str, ...] = ()
    resources: dict[str, str | list[str]] = Field(default_factory=dict)


class _EntryWriter:
    """Writes normalized entries into an open zip file."""

    def __init__(self, zf: zipfile.ZipFile, top_level_dir: str) -> None:
        self._zf = zf
        self._top = PurePosixPath(top_level_dir)
        self._date_time = zip_timestamp()
        self.entries: list[str] = []

    def _info(self, arcname: str) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(arcname, date_time=self._date_time)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = (ENTRY_MODE & 0xFFFF) << 16
        info.create_system = 3
        return info

    def add_file(self, source: Path, name: str, subdir: str | None = None) -> str:
        target = self._top / subdir / name if subdir else self._top / name
        arcname = target.as_posix()
        info = self._info(arcname)
        # zipfile picks zip64 headers from the declared size
        info.file_size = source.stat().st_size
        with source.open("rb") as fsrc, self._zf.open(info, "w") as fdst:
            shutil.copyfileobj(fsrc, fdst)
        self.entries.append(arcname)
        logger.debug("archive_entry_added", entry=arcname, source=str(source))
        return arcname

    def add_text(self, text: str, name: str) -> str:
        arcname = (self._top / name).as_posix()
        self._zf.writestr(self._info(arcname), text.encode("utf-8"))
        self.entries.append(arcname)
        logger.debug("archive_entry_added", entry=arcname)
        return arcname


class ArchiveAssembler:
    """Assemble the reqstool zip artifact for a project.

    Args:
        config: Resolved packager configuration.
        project: Host project metadata.

    Example:
        >>> assembler = ArchiveAssembler(config, project)
        >>> result = assembler.assemble()
        >>> result.archive_path.name
        'my-service-1.2.0-reqstool.zip'
    """

    def __init__(self, config: PackagerConfig, project: ProjectMetadata) -> None:
        self.config = config
        self.project = project

    @property
    def top_level_dir(self) -> str:
        return f"{self.project.final_name}-{ARCHIVE_SUFFIX}"

    @property
    def archive_path(self) -> Path:
        return self.config.output_directory / f"{self.top_level_dir}.zip"

    def assemble(self, annotations_path: Path | None = None) -> AssemblyResult:
        """Write the archive.

        Args:
            annotations_path: Combined annotations document. Defaults to
                ``annotations.yml`` in the output directory. Skipped if it
                does not exist.

        Returns:
            AssemblyResult describing the written archive.

        Raises:
            MissingMandatoryInputError: If requirements.yml is missing. No
                archive file is created in that case.
            GlobPatternError: If a test result pattern is malformed.
            ArchiveAssemblyError: If any read or write fails. A partial
                archive may remain on disk.
        """
        if annotations_path is None:
            annotations_path = self.config.output_directory / ANNOTATIONS_FILE_NAME
        archive_path = self.archive_path

        collector = ResourceCollector(
            self.config.dataset_path,
            self.project.base_dir,
            self.config.test_results,
        )
        collected = collector.collect(exclude=[archive_path])

        logger.info("assembling_zip_artifact", archive=str(archive_path.absolute()))

        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                writer = _EntryWriter(zf, self.top_level_dir)
                resources = self._write_entries(writer, collected, annotations_path)
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveAssemblyError(
                f"Error creating zip artifact: {archive_path}",
                internal_details=f"{type(e).__name__}: {e}",
            ) from e

        logger.info(
            "assembled_zip_artifact",
            archive=str(archive_path.absolute()),
            entries=len(writer.entries),
            test_results=len(collected.test_results),
        )
        return AssemblyResult(
            archive_path=archive_path,
            entries=tuple(writer.entries),
            resources=resources,
        )

    def _write_entries(
        self,
        writer: _EntryWriter,
        collected: CollectedResources,
        annotations_path: Path,
    ) -> dict[str, str | list[str]]:
        resources: dict[str, str | list[str]] = {}

        writer.add_file(collected.requirements, collected.requirements.name)
        resources[REQUIREMENTS] = collected.requirements.name

        for name, path in collected.optional.items():
            writer.add_file(path, path.name)
            resources[name] = path.name

        if annotations_path.is_file():
            writer.add_file(annotations_path, annotations_path.name)
            resources[ANNOTATIONS] = annotations_path.name
        else:
            logger.warning("annotations_file_missing", path=str(annotations_path))

        used: set[str] = set()
        for matched in collected.test_results:
            name = matched.name
            if name in used:
                name = self._disambiguate(matched.relative_path, used)
                logger.warning(
                    "test_result_name_collision",
                    path=matched.relative_path,
                    stored_as=name,
                )
            used.add(name)
            writer.add_file(matched.path, name, subdir=TEST_RESULTS_DIR)
        resources[TEST_RESULTS] = list(self.config.test_results)

        manifest = build_manifest(
            self.project.version,
            resources,
            language=self.config.language,
            build=self.config.build,
        )
        writer.add_text(render_manifest(manifest), MANIFEST_FILE_NAME)
        return dict(manifest.resources)

    @staticmethod
    def _disambiguate(relative_path: str, used: set[str]) -> str:
        """Name for a test result whose base name is already taken.

        The project-relative path is flattened with ``__`` separators; a
        numeric suffix is added if even that is taken.
        """
        candidate = relative_path.replace("/", "__")
        if candidate not in used:
            return candidate
        stem, dot, suffix = candidate.rpartition(".")
        if not dot:
            stem, suffix = candidate, ""
        counter = 2
        while True:
            numbered = f"{stem}-{counter}.{suffix}" if suffix else f"{stem}-{counter}"
            if numbered not in used:
                return numbered
            counter += 1
