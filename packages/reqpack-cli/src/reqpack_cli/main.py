"""CLI entry point for reqpack.

Commands are loaded lazily so that ``reqpack --help`` stays fast.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from reqpack_cli import __version__
from reqpack_cli.output import set_no_color
from reqpack_core.observability import configure_logging

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LazyGroup(rclick.RichGroup):
    """Click group that imports command modules only when invoked.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the group.

        Args:
            *args: Positional arguments passed to RichGroup.
            lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
            **kwargs: Keyword arguments passed to RichGroup.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List eager and lazy command names.

        Args:
            ctx: Click context.

        Returns:
            Sorted command names.
        """
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Resolve a command, importing its module on first use.

        Args:
            ctx: Click context.
            cmd_name: Name of the command to resolve.

        Returns:
            The command, or None if the name is unknown.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "assemble": "reqpack_cli.commands.assemble.assemble",
    "combine": "reqpack_cli.commands.combine.combine",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="reqpack")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="REQPACK_LOG_LEVEL",
    show_default=True,
    help="Minimum log level.",
)
@click.option(
    "--json-logs",
    is_flag=True,
    default=False,
    envvar="REQPACK_JSON_LOGS",
    help="Emit logs as JSON lines.",
)
def cli(log_level: str, json_logs: bool) -> None:
    """reqpack - package reqstool traceability artifacts.

    Combines requirement annotations and bundles them with requirements,
    verification cases and test results into a zip for reqstool.

    **Getting Started:**

    - `reqpack assemble` - Combine annotations and build the zip artifact
    - `reqpack combine` - Only combine two annotation files
    """
    configure_logging(log_level=log_level, json_format=json_logs)


if __name__ == "__main__":
    cli()
