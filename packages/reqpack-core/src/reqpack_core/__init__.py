"""reqpack-core: reqstool artifact packaging.

This package provides:
- combine: Merge implementation and test annotation trees
- ResourceCollector: Find dataset files and test results to package
- build_manifest: Describe the archive contents (reqstool_config.yml)
- ArchiveAssembler: Write the deterministic zip artifact
- RequirementsPackager: Run combine, assemble and attach as one build step
"""

from __future__ import annotations

__version__ = "0.1.0"

from reqpack_core.annotations import (
    combine,
    combine_files,
    read_subtree,
    render_annotations,
    write_annotations,
)
from reqpack_core.archive import ArchiveAssembler, AssemblyResult
from reqpack_core.collector import CollectedResources, MatchedFile, ResourceCollector
from reqpack_core.config import PackagerConfig

# Error types
from reqpack_core.errors import (
    ArchiveAssemblyError,
    ConfigurationError,
    GlobPatternError,
    MissingMandatoryInputError,
    PackagingError,
    ReqpackError,
)
from reqpack_core.globs import GlobMatcher, compile_patterns
from reqpack_core.manifest import Manifest, build_manifest, render_manifest
from reqpack_core.observability import configure_logging
from reqpack_core.packager import PackagerResult, RequirementsPackager
from reqpack_core.project import (
    ArtifactAttacher,
    ProjectMetadata,
    StaticProject,
    load_pyproject_metadata,
)

__all__ = [
    "__version__",
    # Annotations
    "combine",
    "combine_files",
    "read_subtree",
    "render_annotations",
    "write_annotations",
    # Discovery
    "GlobMatcher",
    "compile_patterns",
    "ResourceCollector",
    "CollectedResources",
    "MatchedFile",
    # Manifest
    "Manifest",
    "build_manifest",
    "render_manifest",
    # Archive
    "ArchiveAssembler",
    "AssemblyResult",
    # Orchestration
    "PackagerConfig",
    "RequirementsPackager",
    "PackagerResult",
    # Host interfaces
    "ProjectMetadata",
    "ArtifactAttacher",
    "StaticProject",
    "load_pyproject_metadata",
    # Logging
    "configure_logging",
    # Errors
    "ReqpackError",
    "ConfigurationError",
    "GlobPatternError",
    "MissingMandatoryInputError",
    "PackagingError",
    "ArchiveAssemblyError",
]
