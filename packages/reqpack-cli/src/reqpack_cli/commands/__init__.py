"""CLI command modules.

Commands are imported lazily by ``reqpack_cli.main.LazyGroup``.
"""

from __future__ import annotations

__all__: list[str] = []
