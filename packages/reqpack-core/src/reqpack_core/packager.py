"""Packaging run orchestration.

:class:`RequirementsPackager` runs the three steps of the build step in
order, each gated by configuration:

1. Combine the upstream annotation documents into ``annotations.yml``.
2. Assemble the zip artifact (unless ``skip_assemble``).
3. Attach the zip artifact to the host build (unless ``skip_attach``, or
   when no zip was assembled in this run).

Every failure surfaces immediately; rerunning the whole step is the
recovery path.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict
import structlog

from reqpack_core.annotations import ANNOTATIONS_FILE_NAME, combine_files
from reqpack_core.archive import ArchiveAssembler, AssemblyResult
from reqpack_core.config import PackagerConfig
from reqpack_core.errors import ArchiveAssemblyError
from reqpack_core.project import ArtifactAttacher, ProjectMetadata

logger = structlog.get_logger(__name__)

ARTIFACT_TYPE = "zip"
ARTIFACT_CLASSIFIER = "reqstool"


class PackagerResult(BaseModel):
    """What a packaging run produced.

    Attributes:
        skipped: True when the run was skipped entirely.
        annotations_path: Combined annotations file, if written.
        assembly: Archive details, if assembled.
        attached: Archive path, if attached.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    skipped: bool = False
    annotations_path: Path | None = None
    assembly: AssemblyResult | None = None
    attached: Path | None = None


class RequirementsPackager:
    """Combine annotations, assemble and attach the reqstool artifact.

    Args:
        config: Resolved packager configuration.
        project: Host project metadata.
        attacher: Host hook registering the produced zip. When None,
            attachment is skipped.

    Example:
        >>> packager = RequirementsPackager(
        ...     PackagerConfig.for_project(project.base_dir), project
        ... )
        >>> result = packager.run()
    """

    def __init__(
        self,
        config: PackagerConfig,
        project: ProjectMetadata,
        attacher: ArtifactAttacher | None = None,
    ) -> None:
        self.config = config
        self.project = project
        self.attacher = attacher
        self.assembler = ArchiveAssembler(config, project)

    @property
    def annotations_path(self) -> Path:
        return self.config.output_directory / ANNOTATIONS_FILE_NAME

    def run(self) -> PackagerResult:
        """Execute the packaging step.

        Raises:
            MissingMandatoryInputError: If requirements.yml is missing.
            ConfigurationError: If an annotations file is not valid YAML.
            PackagingError: If any I/O step fails.
        """
        if self.config.skip:
            logger.info("skipping_reqpack_execution")
            return PackagerResult(skipped=True)

        logger.debug(
            "packaging_reqstool_artifact",
            final_name=self.project.final_name,
            test_results=list(self.config.test_results),
        )

        annotations_path = combine_files(
            self.config.requirements_annotations_file,
            self.config.svcs_annotations_file,
            self.annotations_path,
        )

        assembly: AssemblyResult | None = None
        if self.config.skip_assemble:
            logger.info("skipping_zip_assembly")
        else:
            assembly = self.assembler.assemble(annotations_path)

        attached: Path | None = None
        if self.config.skip_attach:
            logger.info("skipping_zip_attachment")
        elif assembly is None:
            logger.info("skipping_zip_attachment", reason="zip assembly skipped")
        elif self.attacher is None:
            logger.debug("no_artifact_attacher")
        else:
            attached = self.attach()

        return PackagerResult(
            annotations_path=annotations_path,
            assembly=assembly,
            attached=attached,
        )

    def attach(self) -> Path:
        """Attach the assembled zip to the host build.

        Raises:
            ArchiveAssemblyError: If there is no archive to attach or no
                attacher was supplied.
        """
        archive_path = self.assembler.archive_path
        if self.attacher is None:
            raise ArchiveAssemblyError("No artifact attacher configured")
        if not archive_path.is_file():
            raise ArchiveAssemblyError(f"Cannot attach missing zip artifact: {archive_path}")

        logger.info(
            "attaching_artifact", artifact=archive_path.name, classifier=ARTIFACT_CLASSIFIER
        )
        self.attacher.attach(
            archive_path, artifact_type=ARTIFACT_TYPE, classifier=ARTIFACT_CLASSIFIER
        )
        return archive_path
