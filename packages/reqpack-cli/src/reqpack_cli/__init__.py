"""reqpack-cli: command line front end for reqpack-core."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
