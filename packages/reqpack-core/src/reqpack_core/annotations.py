"""Requirement annotation combining.

The source-code and test-code scanners each emit an annotations document
of the form::

    requirement_annotations:
      implementations: {...}   # from the source scan
      tests: {...}             # from the test scan

This module extracts the relevant subtree from each and merges them into
one canonical document. Subtree contents are carried through untouched;
only their presence matters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from reqpack_core.errors import ConfigurationError, PackagingError
from reqpack_core.serialization import dump_yaml, load_yaml

logger = structlog.get_logger(__name__)

REQUIREMENT_ANNOTATIONS = "requirement_annotations"
IMPLEMENTATIONS = "implementations"
TESTS = "tests"

ANNOTATIONS_FILE_NAME = "annotations.yml"

ANNOTATIONS_SCHEMA_COMMENT = (
    "# yaml-language-server: $schema=https://raw.githubusercontent.com/reqstool/"
    "reqstool-client/main/src/reqstool/resources/schemas/v1/annotations.schema.json"
)


def _is_empty(subtree: Any) -> bool:
    return subtree is None or (isinstance(subtree, (dict, list)) and not subtree)


def combine(implementations: Any, tests: Any) -> dict[str, Any]:
    """Merge implementation and test annotation subtrees.

    Args:
        implementations: ``implementations`` subtree from the source scan.
        tests: ``tests`` subtree from the test scan.

    Returns:
        New document with ``requirement_annotations`` holding
        ``implementations`` and ``tests``, each only when non-empty.

    Example:
        >>> combine({"REQ_001": [{"elementKind": "CLASS"}]}, {})
        {'requirement_annotations': {'implementations': {'REQ_001': [{'elementKind': 'CLASS'}]}}}
    """
    combined: dict[str, Any] = {}
    if not _is_empty(implementations):
        combined[IMPLEMENTATIONS] = implementations
    if not _is_empty(tests):
        combined[TESTS] = tests
    return {REQUIREMENT_ANNOTATIONS: combined}


def read_subtree(path: Path | str, child: str) -> Any:
    """Read ``requirement_annotations.<child>`` from an upstream document.

    A missing file, an empty document, or a missing key all yield an
    empty mapping.

    Args:
        path: Upstream annotations file.
        child: ``implementations`` or ``tests``.

    Returns:
        The subtree, or ``{}``.

    Raises:
        ConfigurationError: If the file is not valid YAML.
        PackagingError: If the file exists but cannot be read.
    """
    path = Path(path)
    if not path.is_file():
        logger.debug("annotations_file_absent", path=str(path), child=child)
        return {}

    try:
        document = load_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Invalid YAML in annotations file",
            file_path=str(path),
            internal_details=str(e),
        ) from e
    except OSError as e:
        raise PackagingError(
            f"Cannot read annotations file: {path}",
            internal_details=str(e),
        ) from e

    if not isinstance(document, dict):
        return {}
    root = document.get(REQUIREMENT_ANNOTATIONS)
    if not isinstance(root, dict):
        return {}
    subtree = root.get(child)
    return {} if subtree is None else subtree


def render_annotations(document: dict[str, Any]) -> str:
    """Render a combined document with its schema reference comment."""
    return f"{ANNOTATIONS_SCHEMA_COMMENT}\n{dump_yaml(document)}"


def write_annotations(path: Path | str, document: dict[str, Any]) -> Path:
    """Write a combined annotations document.

    Args:
        path: Destination file; parent directories are created.
        document: Output of :func:`combine`.

    Returns:
        The written path.

    Raises:
        PackagingError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_annotations(document), encoding="utf-8")
    except OSError as e:
        raise PackagingError(
            f"Cannot write combined annotations: {path}",
            internal_details=str(e),
        ) from e
    return path


def combine_files(
    requirements_annotations_file: Path | str,
    svcs_annotations_file: Path | str,
    output_file: Path | str,
) -> Path:
    """Combine two upstream annotation files into ``output_file``.

    Args:
        requirements_annotations_file: Source-scan annotations (implementations).
        svcs_annotations_file: Test-scan annotations (tests).
        output_file: Destination of the combined document.

    Returns:
        The written path.
    """
    implementations = read_subtree(requirements_annotations_file, IMPLEMENTATIONS)
    tests = read_subtree(svcs_annotations_file, TESTS)

    logger.info(
        "combining_annotations",
        implementations_file=str(requirements_annotations_file),
        tests_file=str(svcs_annotations_file),
        output=str(Path(output_file).absolute()),
    )
    return write_annotations(output_file, combine(implementations, tests))
