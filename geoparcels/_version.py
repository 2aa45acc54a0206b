"""
Exposes the version of geoparcels
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path


def _read_version_file() -> str | None:
    """
    Used when running from a source checkout that was never installed: reads the
    repository's VERSION file, which is also what setup.py packages.
    """
    version_file = Path(__file__).resolve().parents[1] / "VERSION"
    try:
        return version_file.read_text(encoding="utf-8").strip()
    except OSError:
        return None


try:
    __version__ = version("geoparcels")
except PackageNotFoundError:
    __version__ = _read_version_file()

__all__ = ["__version__"]
