"""Shared pytest fixtures for reqpack-core tests.

This module provides common fixtures used across unit and integration tests.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import sys

import pytest
import structlog

from reqpack_core.config import PackagerConfig
from reqpack_core.project import StaticProject


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture(autouse=True)
def _no_source_date_epoch(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep archive timestamps fixed regardless of the CI environment."""
    monkeypatch.delenv("SOURCE_DATE_EPOCH", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def yml_fixtures(fixtures_dir: Path) -> Path:
    """Return path to the annotation YAML fixtures."""
    return fixtures_dir / "yml"


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    """Return a helper writing text to a path, creating parents."""

    def _write(path: Path, content: str = "") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project_dir(tmp_path: Path, write_file: Callable[[Path, str], Path]) -> Path:
    """Create a project tree with a dataset and three test result files.

    Layout::

        project/
        ├── reqstool/requirements.yml
        ├── test_results/a/x.xml
        ├── test_results/b/y.xml
        └── other/z.xml
    """
    root = tmp_path / "project"
    write_file(root / "reqstool" / "requirements.yml", "requirements: []\n")
    write_file(root / "test_results" / "a" / "x.xml", "<testsuite name='x'/>\n")
    write_file(root / "test_results" / "b" / "y.xml", "<testsuite name='y'/>\n")
    write_file(root / "other" / "z.xml", "<testsuite name='z'/>\n")
    return root


@pytest.fixture
def project(project_dir: Path) -> StaticProject:
    """Return project metadata for ``project_dir``."""
    return StaticProject(final_name="test-project", base_dir=project_dir, version="1.0.0")


@pytest.fixture
def config(project_dir: Path) -> PackagerConfig:
    """Return a packager config with defaults resolved against ``project_dir``."""
    return PackagerConfig.for_project(project_dir)
