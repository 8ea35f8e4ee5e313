"""Shared fixtures for cross-package contract tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
import zipfile

import pytest

from reqpack_core import PackagerConfig, RequirementsPackager, StaticProject


@pytest.fixture(autouse=True)
def _no_source_date_epoch(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOURCE_DATE_EPOCH", raising=False)


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a project exercising every archive resource."""
    root = tmp_path / "inventory"
    files = {
        "reqstool/requirements.yml": "requirements:\n  - id: REQ_001\n",
        "reqstool/software_verification_cases.yml": "cases:\n  - id: SVC_001\n",
        "reqstool/manual_verification_results.yml": "results:\n  - id: MVR_001\n",
        "build/generated-sources/annotations/resources/annotations.yml": (
            "requirement_annotations:\n"
            "  implementations:\n"
            "    REQ_001:\n"
            "      - elementKind: CLASS\n"
            "        fullyQualifiedName: inventory.Stock\n"
        ),
        "test_results/unit/TEST-stock.xml": "<testsuite name='stock'/>\n",
        "test_results/integration/TEST-stock.xml": "<testsuite name='stock-it'/>\n",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def build_archive() -> Callable[[Path], Path]:
    """Return a helper packaging a project and returning the zip path."""

    def _build(root: Path) -> Path:
        project = StaticProject(final_name="inventory-0.4.0", base_dir=root, version="0.4.0")
        result = RequirementsPackager(PackagerConfig.for_project(root), project).run()
        assert result.assembly is not None
        return result.assembly.archive_path

    return _build


@pytest.fixture
def archive(
    sample_project: Path, build_archive: Callable[[Path], Path]
) -> Generator[zipfile.ZipFile, None, None]:
    """Open the archive built from ``sample_project``."""
    with zipfile.ZipFile(build_archive(sample_project)) as zf:
        yield zf
