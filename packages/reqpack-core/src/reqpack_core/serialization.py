"""YAML serialization helpers.

Every call builds its own dumper configuration; there is no shared
serializer instance. Output is block style with sequences indented
under their parent key, which keeps annotation documents byte-stable
for golden-file comparison.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


class _IndentedSequenceDumper(yaml.SafeDumper):
    """SafeDumper that indents sequences nested in mappings.

    PyYAML writes ``key:\\n- item`` by default; this renders
    ``key:\\n  - item``.
    """

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        super().increase_indent(flow, False)


def dump_yaml(
    data: Any,
    *,
    sort_keys: bool = True,
    explicit_start: bool = True,
) -> str:
    """Serialize data to a YAML string.

    Args:
        data: Plain mappings, sequences and scalars.
        sort_keys: Sort mapping keys alphabetically. Disable to keep
            insertion order.
        explicit_start: Emit the ``---`` document start marker.

    Returns:
        YAML text ending with a newline.

    Example:
        >>> print(dump_yaml({"b": [1, 2], "a": "x"}), end="")
        ---
        a: x
        b:
          - 1
          - 2
    """
    return yaml.dump(
        data,
        Dumper=_IndentedSequenceDumper,
        default_flow_style=False,
        sort_keys=sort_keys,
        explicit_start=explicit_start,
        allow_unicode=True,
        width=4096,
    )


def load_yaml(path: Path | str) -> Any:
    """Load a YAML file with the safe loader.

    Args:
        path: File to read (UTF-8).

    Returns:
        Parsed document, or None for an empty file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)
