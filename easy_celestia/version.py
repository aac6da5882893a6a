"""
Version helpers for easy-celestia.
We keep a static __version__ (PEP 440) and expose the installed distribution
version when the package has been installed (useful to spot stale checkouts).
"""

from __future__ import annotations

from importlib import metadata
from typing import Optional

# Bump this when publishing
__version__ = "0.1.0"

DIST_NAME = "easy-celestia"


def installed_version() -> Optional[str]:
    """Version recorded in the installed distribution metadata, if any."""
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return None


def version() -> str:
    """Human-friendly string, e.g. '0.1.0' or '0.1.0 (installed 0.0.9)'."""
    installed = installed_version()
    if installed is None or installed == __version__:
        return __version__
    return f"{__version__} (installed {installed})"


__all__ = ["__version__", "installed_version", "version"]
