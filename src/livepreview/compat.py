"""Host runtime compatibility helpers."""

from __future__ import annotations

from importlib import metadata
import platform

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from .errors import VersionIncompatible

DISTRIBUTION_NAME = "livepreview"
FALLBACK_SUPPORTED_RANGE = ">=3.10"


def package_metadata() -> dict[str, str] | None:
    """Return the installed distribution's metadata, or None when not installed."""
    try:
        meta = metadata.metadata(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return None
    return {key: str(value) for key, value in meta.items()}


def supported_python_range() -> str:
    meta = package_metadata()
    if meta and meta.get("Requires-Python"):
        return meta["Requires-Python"]
    return FALLBACK_SUPPORTED_RANGE


def current_python_version() -> str:
    return platform.python_version()


def is_compatible(version: str, required_range: str) -> bool:
    """Check if ``version`` (e.g. "3.12.1") falls in ``required_range`` (e.g. ">=3.10")."""
    try:
        requirement = SpecifierSet(required_range)
        parsed = Version(version)
    except (InvalidSpecifier, InvalidVersion):
        return False
    return requirement.contains(parsed, prereleases=True)


def require_compatible(version: str, required_range: str) -> None:
    if not is_compatible(version, required_range):
        raise VersionIncompatible(version, required_range)


SUPPORTED_PYTHON_RANGE = supported_python_range()
PYTHON_VERSION = current_python_version()


def is_python_compatible() -> bool:
    return is_compatible(PYTHON_VERSION, SUPPORTED_PYTHON_RANGE)
