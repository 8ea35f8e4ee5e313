"""Shared test fixtures for reqpack-cli tests.

Provides CliRunner fixtures and a sample project tree for testing CLI
commands.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

from click.testing import CliRunner
import pytest
import structlog

PYPROJECT_TOML = """\
[project]
name = "demo_service"
version = "1.0.0"
"""

IMPLEMENTATIONS_YML = """\
requirement_annotations:
  implementations:
    REQ_001:
      - elementKind: CLASS
        fullyQualifiedName: demo.service.Handler
"""

TESTS_YML = """\
requirement_annotations:
  tests:
    SVC_001:
      - elementKind: METHOD
        fullyQualifiedName: tests.test_handler.test_handle
"""


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Drop logging configuration bound to a runner's closed streams."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _no_source_date_epoch(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOURCE_DATE_EPOCH", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a hatch-style project ready for packaging.

    Layout::

        demo/
        ├── pyproject.toml
        ├── reqstool/requirements.yml
        ├── build/generated-sources/annotations/resources/annotations.yml
        ├── build/generated-test-sources/test-annotations/resources/annotations.yml
        └── test_results/unit/TEST-handler.xml
    """
    root = tmp_path / "demo"
    files = {
        "pyproject.toml": PYPROJECT_TOML,
        "reqstool/requirements.yml": "requirements: []\n",
        "build/generated-sources/annotations/resources/annotations.yml": IMPLEMENTATIONS_YML,
        "build/generated-test-sources/test-annotations/resources/annotations.yml": TESTS_YML,
        "test_results/unit/TEST-handler.xml": "<testsuite name='handler'/>\n",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def archive_path(project_dir: Path) -> Path:
    """Return where ``reqpack assemble`` writes the zip for ``project_dir``."""
    return project_dir / "build" / "reqstool" / "demo-service-1.0.0-reqstool.zip"
