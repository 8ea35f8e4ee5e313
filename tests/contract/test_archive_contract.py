"""Archive contract tests.

The zip produced by reqpack is consumed by the reqstool client. These
tests pin the parts of the layout the client relies on; if they fail,
archives from this build are no longer readable the same way.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path, PurePosixPath
import shutil
import zipfile

import pytest
import yaml

from reqpack_core.annotations import ANNOTATIONS_SCHEMA_COMMENT
from reqpack_core.archive import FIXED_ZIP_TIMESTAMP
from reqpack_core.manifest import CONFIG_SCHEMA_COMMENT

pytestmark = pytest.mark.contract

TOP = "inventory-0.4.0-reqstool"


class TestLayout:
    """The archive has one top-level directory with a known layout."""

    def test_single_top_level_directory(self, archive: zipfile.ZipFile) -> None:
        assert {PurePosixPath(name).parts[0] for name in archive.namelist()} == {TOP}

    def test_no_directory_entries(self, archive: zipfile.ZipFile) -> None:
        assert not any(info.is_dir() for info in archive.infolist())

    def test_entry_order(self, archive: zipfile.ZipFile) -> None:
        assert archive.namelist() == [
            f"{TOP}/requirements.yml",
            f"{TOP}/software_verification_cases.yml",
            f"{TOP}/manual_verification_results.yml",
            f"{TOP}/annotations.yml",
            f"{TOP}/test_results/TEST-stock.xml",
            f"{TOP}/test_results/test_results__unit__TEST-stock.xml",
            f"{TOP}/reqstool_config.yml",
        ]

    def test_test_results_are_flat(self, archive: zipfile.ZipFile) -> None:
        for name in archive.namelist():
            parts = PurePosixPath(name).parts
            if "test_results" in parts:
                assert len(parts) == 3

    def test_entry_names_are_unique(self, archive: zipfile.ZipFile) -> None:
        names = archive.namelist()
        assert len(names) == len(set(names))


class TestManifest:
    """reqstool_config.yml describes exactly what is in the archive."""

    def test_header_comments(self, archive: zipfile.ZipFile) -> None:
        lines = archive.read(f"{TOP}/reqstool_config.yml").decode("utf-8").splitlines()
        assert lines[:2] == [CONFIG_SCHEMA_COMMENT, "# version: 0.4.0"]

    def test_resources_point_at_entries(self, archive: zipfile.ZipFile) -> None:
        manifest = yaml.safe_load(archive.read(f"{TOP}/reqstool_config.yml"))
        names = set(archive.namelist())

        resources = manifest["resources"]
        assert list(resources) == [
            "requirements",
            "software_verification_cases",
            "manual_verification_results",
            "annotations",
            "test_results",
        ]
        for key, value in resources.items():
            if key != "test_results":
                assert f"{TOP}/{value}" in names
        assert resources["test_results"] == ["test_results/**/*.xml"]

    def test_tags(self, archive: zipfile.ZipFile) -> None:
        manifest = yaml.safe_load(archive.read(f"{TOP}/reqstool_config.yml"))
        assert (manifest["language"], manifest["build"]) == ("python", "hatch")

    def test_annotations_document(self, archive: zipfile.ZipFile) -> None:
        text = archive.read(f"{TOP}/annotations.yml").decode("utf-8")
        assert text.startswith(f"{ANNOTATIONS_SCHEMA_COMMENT}\n---\n")
        document = yaml.safe_load(text)
        assert list(document["requirement_annotations"]) == ["implementations"]


class TestReproducibility:
    """Unchanged inputs produce byte-identical archives."""

    def test_entry_metadata_is_fixed(self, archive: zipfile.ZipFile) -> None:
        for info in archive.infolist():
            assert info.date_time == FIXED_ZIP_TIMESTAMP
            assert info.external_attr >> 16 == 0o100644
            assert info.compress_type == zipfile.ZIP_DEFLATED

    def test_identical_across_locations(
        self, sample_project: Path, tmp_path: Path, build_archive: Callable[[Path], Path]
    ) -> None:
        copy = shutil.copytree(sample_project, tmp_path / "checkout-2" / "inventory")

        assert build_archive(sample_project).read_bytes() == build_archive(copy).read_bytes()

    def test_source_date_epoch_is_applied(
        self,
        sample_project: Path,
        build_archive: Callable[[Path], Path],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("SOURCE_DATE_EPOCH", "1704067200")

        first = build_archive(sample_project).read_bytes()
        second = build_archive(sample_project).read_bytes()

        assert first == second
        with zipfile.ZipFile(build_archive(sample_project)) as zf:
            assert {info.date_time for info in zf.infolist()} == {(2024, 1, 1, 0, 0, 0)}
