"""reqpack assemble command - combine annotations and build the zip artifact."""

from __future__ import annotations

from pathlib import Path

import click

from reqpack_cli.errors import cli_errors
from reqpack_cli.output import info, print_archive_summary, success
from reqpack_core.config import PackagerConfig
from reqpack_core.project import StaticProject, load_pyproject_metadata


class ConsoleAttacher:
    """Reports the produced artifact on the console.

    Stand-alone runs have no host artifact set; the path is printed so
    a wrapping pipeline can pick it up.
    """

    def attach(self, path: Path, *, artifact_type: str, classifier: str) -> None:
        info(f"Attached {path} (type: {artifact_type}, classifier: {classifier})")


def resolve_project(
    project_dir: Path,
    final_name: str | None,
    project_version: str | None,
) -> StaticProject:
    """Build project metadata from options, falling back to pyproject.toml."""
    if final_name and project_version:
        return StaticProject(final_name=final_name, base_dir=project_dir, version=project_version)

    project = load_pyproject_metadata(project_dir)
    updates: dict[str, str] = {}
    if final_name:
        updates["final_name"] = final_name
    if project_version:
        updates["version"] = project_version
    return project.model_copy(update=updates)


@click.command("assemble")
@click.option(
    "-p",
    "--project-dir",
    "project_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root scanned for test results [default: .]",
)
@click.option(
    "--final-name",
    default=None,
    help="Final artifact name [default: from pyproject.toml]",
)
@click.option(
    "--project-version",
    default=None,
    help="Project version for the manifest [default: from pyproject.toml]",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with packager settings (top level or under 'reqpack')",
)
@click.option(
    "--requirements-annotations-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="REQSTOOL_REQUIREMENTS_ANNOTATIONS_FILE",
    help="Annotations from the source-code scan",
)
@click.option(
    "--svcs-annotations-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="REQSTOOL_SVCS_ANNOTATIONS_FILE",
    help="Annotations from the test-code scan",
)
@click.option(
    "-o",
    "--output-directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="REQSTOOL_OUTPUT_DIRECTORY",
    help="Output directory [default: build/reqstool]",
)
@click.option(
    "-d",
    "--dataset-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="REQSTOOL_DATASET_PATH",
    help="Directory containing requirements.yml [default: reqstool]",
)
@click.option(
    "-t",
    "--test-results",
    multiple=True,
    help="Glob pattern for test result files; repeatable [default: test_results/**/*.xml]",
)
@click.option("--language", default=None, help="Manifest language tag [default: python]")
@click.option("--build", "build_tag", default=None, help="Manifest build tag [default: hatch]")
@click.option("--skip/--no-skip", default=None, envvar="REQSTOOL_SKIP", help="Skip execution")
@click.option(
    "--skip-assemble/--no-skip-assemble",
    default=None,
    envvar="REQSTOOL_SKIP_ASSEMBLE_ZIP_ARTIFACT",
    help="Combine annotations only",
)
@click.option(
    "--skip-attach/--no-skip-attach",
    default=None,
    envvar="REQSTOOL_SKIP_ATTACH_ZIP_ARTIFACT",
    help="Do not attach the zip artifact",
)
@click.option("--list-entries", is_flag=True, default=False, help="Print archive entries")
def assemble(
    project_dir: Path,
    final_name: str | None,
    project_version: str | None,
    config_file: Path | None,
    requirements_annotations_file: Path | None,
    svcs_annotations_file: Path | None,
    output_directory: Path | None,
    dataset_path: Path | None,
    test_results: tuple[str, ...],
    language: str | None,
    build_tag: str | None,
    skip: bool | None,
    skip_assemble: bool | None,
    skip_attach: bool | None,
    list_entries: bool,
) -> None:
    """Combine annotations and assemble the reqstool zip artifact.

    Examples:

        reqpack assemble

        reqpack assemble --test-results "reports/**/*.xml"

        reqpack assemble --final-name my-service-1.0.0 --project-version 1.0.0
    """
    from reqpack_core.packager import RequirementsPackager

    overrides = {
        "requirements_annotations_file": requirements_annotations_file,
        "svcs_annotations_file": svcs_annotations_file,
        "output_directory": output_directory,
        "dataset_path": dataset_path,
        "test_results": list(test_results) or None,
        "language": language,
        "build": build_tag,
        "skip": skip,
        "skip_assemble": skip_assemble,
        "skip_attach": skip_attach,
    }

    with cli_errors():
        if config_file is not None:
            config = PackagerConfig.from_yaml(config_file, project_dir, **overrides)
        else:
            config = PackagerConfig.for_project(project_dir, **overrides)

        if config.skip:
            info("Skipping execution of reqpack")
            return

        project = resolve_project(project_dir, final_name, project_version)
        result = RequirementsPackager(config, project, ConsoleAttacher()).run()

    if result.annotations_path is not None:
        success(f"Combined annotations into {result.annotations_path}")
    if result.assembly is not None:
        success(f"Assembled {result.assembly.archive_path}")
        if list_entries:
            print_archive_summary(result.assembly.entries, result.assembly.resources)
