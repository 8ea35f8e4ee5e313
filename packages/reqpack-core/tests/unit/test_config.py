"""Unit tests for reqpack_core.config."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError
import pytest

from reqpack_core.config import DEFAULT_TEST_RESULTS_PATTERN, PackagerConfig
from reqpack_core.errors import ConfigurationError, GlobPatternError


class TestDefaults:
    """Tests for default values."""

    def test_for_project_resolves_defaults(self, tmp_path: Path) -> None:
        config = PackagerConfig.for_project(tmp_path)

        assert config.requirements_annotations_file == (
            tmp_path / "build/generated-sources/annotations/resources/annotations.yml"
        )
        assert config.svcs_annotations_file == (
            tmp_path / "build/generated-test-sources/test-annotations/resources/annotations.yml"
        )
        assert config.output_directory == tmp_path / "build" / "reqstool"
        assert config.dataset_path == tmp_path / "reqstool"
        assert config.test_results == (DEFAULT_TEST_RESULTS_PATTERN,)
        assert (config.language, config.build) == ("python", "hatch")
        assert not (config.skip or config.skip_assemble or config.skip_attach)

    def test_none_overrides_are_ignored(self, tmp_path: Path) -> None:
        config = PackagerConfig.for_project(tmp_path, dataset_path=None, skip=None)
        assert config.dataset_path == tmp_path / "reqstool"
        assert config.skip is False

    def test_absolute_paths_are_kept(self, tmp_path: Path) -> None:
        dataset = tmp_path / "elsewhere"
        config = PackagerConfig.for_project(tmp_path / "project", dataset_path=dataset)
        assert config.dataset_path == dataset

    @pytest.mark.parametrize("empty", [[], (), None])
    def test_empty_patterns_fall_back_to_default(self, empty: object) -> None:
        config = PackagerConfig(test_results=empty)  # type: ignore[arg-type]
        assert config.test_results == (DEFAULT_TEST_RESULTS_PATTERN,)

    def test_single_pattern_string_is_accepted(self) -> None:
        config = PackagerConfig(test_results="reports/*.xml")  # type: ignore[arg-type]
        assert config.test_results == ("reports/*.xml",)


class TestValidation:
    """Tests for rejected configuration."""

    def test_malformed_pattern_fails_fast(self) -> None:
        with pytest.raises(GlobPatternError):
            PackagerConfig(test_results=("test_results/{a,b",))

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PackagerConfig(unknown_option=True)  # type: ignore[call-arg]

    def test_config_is_frozen(self) -> None:
        config = PackagerConfig()
        with pytest.raises(ValidationError):
            config.skip = True  # type: ignore[misc]


class TestFromYaml:
    """Tests for loading configuration files."""

    def test_loads_section(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text(
            "reqpack:\n"
            "  dataset_path: docs/reqstool\n"
            "  test_results:\n"
            "    - reports/**/*.xml\n"
            "  skip_attach: true\n",
            encoding="utf-8",
        )

        config = PackagerConfig.from_yaml(path)

        assert config.dataset_path == tmp_path / "docs" / "reqstool"
        assert config.test_results == ("reports/**/*.xml",)
        assert config.skip_attach is True

    def test_loads_top_level_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("language: java\nbuild: maven\n", encoding="utf-8")
        config = PackagerConfig.from_yaml(path, base_dir=tmp_path / "project")
        assert config.language == "java"
        assert config.output_directory == tmp_path / "project" / "build" / "reqstool"

    def test_overrides_win(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("skip: true\nlanguage: java\n", encoding="utf-8")
        config = PackagerConfig.from_yaml(path, skip=False, language=None)
        assert config.skip is False
        assert config.language == "java"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("", encoding="utf-8")
        assert PackagerConfig.from_yaml(path).dataset_path == tmp_path / "reqstool"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            PackagerConfig.from_yaml(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("skip: [\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            PackagerConfig.from_yaml(path)

    def test_unreadable_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("skip: true\n", encoding="utf-8")

        def _fail(_path: Path) -> None:
            raise OSError(5, "Input/output error")

        monkeypatch.setattr("reqpack_core.config.load_yaml", _fail)
        with pytest.raises(ConfigurationError, match="Cannot read configuration file") as exc_info:
            PackagerConfig.from_yaml(path)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_bytes(b"skip: \xff\xfe\n")
        with pytest.raises(ConfigurationError, match="Cannot read configuration file"):
            PackagerConfig.from_yaml(path)

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            PackagerConfig.from_yaml(path)

    def test_invalid_field_value(self, tmp_path: Path) -> None:
        path = tmp_path / "reqpack.yaml"
        path.write_text("skip: maybe\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            PackagerConfig.from_yaml(path)
