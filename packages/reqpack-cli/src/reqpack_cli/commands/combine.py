"""reqpack combine command - merge two annotation files."""

from __future__ import annotations

from pathlib import Path

import click

from reqpack_cli.errors import cli_errors
from reqpack_cli.output import success


@click.command("combine")
@click.option(
    "-i",
    "--implementations",
    "implementations_file",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Annotations file providing requirement_annotations.implementations",
)
@click.option(
    "-t",
    "--tests",
    "tests_file",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Annotations file providing requirement_annotations.tests",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("build/reqstool/annotations.yml"),
    help="Combined output file [default: build/reqstool/annotations.yml]",
)
def combine(implementations_file: Path, tests_file: Path, output_file: Path) -> None:
    """Combine implementation and test annotations into one document.

    Missing input files are treated as empty.

    Examples:

        reqpack combine -i build/src-annotations.yml -t build/test-annotations.yml
    """
    from reqpack_core.annotations import combine_files

    with cli_errors():
        written = combine_files(implementations_file, tests_file, output_file)

    success(f"Combined annotations into {written}")
