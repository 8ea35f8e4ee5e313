"""Rich console output utilities for reqpack-cli.

Colored success/error/warning messages, respecting the NO_COLOR
environment variable and the ``--no-color`` flag.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import os
from typing import Any

from rich.console import Console
from rich.table import Table

_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Args:
        message: Message to display.
        **kwargs: Additional arguments passed to console.print.

    Example:
        >>> success("Assembled build/reqstool/demo-1.0.0-reqstool.zip")
        ✓ Assembled build/reqstool/demo-1.0.0-reqstool.zip
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Args:
        message: Message to display.
        **kwargs: Additional arguments passed to console.print.
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle.

    Args:
        message: Message to display.
        **kwargs: Additional arguments passed to console.print.
    """
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message.

    Args:
        message: Message to display.
        **kwargs: Additional arguments passed to console.print.
    """
    console.print(message, **kwargs)


def print_archive_summary(
    entries: Sequence[str],
    resources: Mapping[str, str | list[str]],
) -> None:
    """Print the archive entries and manifest resources as tables.

    Args:
        entries: Archive entry names in write order.
        resources: Manifest resource map.
    """
    entry_table = Table(title="Archive entries", show_header=False)
    entry_table.add_column("Entry")
    for entry in entries:
        entry_table.add_row(entry)
    console.print(entry_table)

    resource_table = Table(title="Manifest resources")
    resource_table.add_column("Resource")
    resource_table.add_column("Value")
    for name, value in resources.items():
        resource_table.add_row(name, value if isinstance(value, str) else ", ".join(value))
    console.print(resource_table)


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Args:
        no_color: If True, disable colored output.
    """
    global console
    console = create_console(no_color=no_color)
