"""reqstool_config.yml manifest generation.

The manifest tells the reqstool client what the archive contains::

    # yaml-language-server: $schema=.../reqstool_config.schema.json
    # version: 1.2.0
    language: python
    build: hatch
    resources:
      requirements: requirements.yml
      annotations: annotations.yml
      test_results:
        - test_results/**/*.xml

``test_results`` keeps the configured glob patterns rather than the list of
matched files.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from reqpack_core.serialization import dump_yaml

MANIFEST_FILE_NAME = "reqstool_config.yml"

CONFIG_SCHEMA_COMMENT = (
    "# yaml-language-server: $schema=https://raw.githubusercontent.com/reqstool/"
    "reqstool-client/main/src/reqstool/resources/schemas/v1/reqstool_config.schema.json"
)

ANNOTATIONS = "annotations"
TEST_RESULTS = "test_results"

#: Fixed order of logical resource names in the manifest.
RESOURCE_ORDER: tuple[str, ...] = (
    "requirements",
    "software_verification_cases",
    "manual_verification_results",
    ANNOTATIONS,
    TEST_RESULTS,
)


class Manifest(BaseModel):
    """Descriptive document appended as the last archive entry.

    Attributes:
        language: Source ecosystem tag.
        build: Build tool tag.
        version: Project version, written as a comment line.
        resources: Logical resource name to file name or pattern list.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    language: str = Field(..., min_length=1)
    build: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    resources: dict[str, str | list[str]] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML body in manifest key order (version excluded)."""
        return {
            "language": self.language,
            "build": self.build,
            "resources": dict(self.resources),
        }


def build_manifest(
    version: str,
    resources: Mapping[str, str | list[str] | tuple[str, ...]],
    *,
    language: str,
    build: str,
) -> Manifest:
    """Build the manifest for one archive.

    Args:
        version: Project version string.
        resources: Logical name to included file name, or pattern list
            for ``test_results``. Unknown names are appended after the
            known ones in the order given.
        language: Ecosystem tag, e.g. ``python``.
        build: Build tool tag, e.g. ``hatch``.

    Returns:
        Manifest with resources in fixed order.
    """
    ordered: dict[str, str | list[str]] = {}
    for name in (*RESOURCE_ORDER, *(k for k in resources if k not in RESOURCE_ORDER)):
        if name not in resources:
            continue
        value = resources[name]
        ordered[name] = value if isinstance(value, str) else list(value)

    return Manifest(language=language, build=build, version=version, resources=ordered)


def render_manifest(manifest: Manifest) -> str:
    """Render the manifest file text, schema and version comments first."""
    body = dump_yaml(manifest.to_dict(), sort_keys=False, explicit_start=False)
    return f"{CONFIG_SCHEMA_COMMENT}\n# version: {manifest.version}\n{body}"
