"""Version range compatibility helpers."""

from __future__ import annotations

import pytest

from livepreview.compat import (
    FALLBACK_SUPPORTED_RANGE,
    SUPPORTED_PYTHON_RANGE,
    is_compatible,
    is_python_compatible,
    require_compatible,
    supported_python_range,
)
from livepreview.errors import VersionIncompatible


@pytest.mark.parametrize(
    ("version", "required", "expected"),
    [
        ("3.12.1", ">=3.10", True),
        ("3.9.18", ">=3.10", False),
        ("3.13.0rc1", ">=3.10", True),
        ("3.11.0", ">=3.10,<3.11", False),
        ("not-a-version", ">=3.10", False),
        ("3.12.1", "garbage range", False),
    ],
)
def test_is_compatible(version: str, required: str, expected: bool) -> None:
    assert is_compatible(version, required) is expected


def test_require_compatible_raises_with_both_versions() -> None:
    with pytest.raises(VersionIncompatible, match=r"requires Python >=3\.10, but you are using 3\.8\.0"):
        require_compatible("3.8.0", ">=3.10")


def test_supported_range_falls_back_when_not_installed(monkeypatch: pytest.MonkeyPatch) -> None:
    from livepreview import compat

    monkeypatch.setattr(compat, "package_metadata", lambda: None)
    assert supported_python_range() == FALLBACK_SUPPORTED_RANGE


def test_running_interpreter_is_supported() -> None:
    assert SUPPORTED_PYTHON_RANGE
    assert is_python_compatible() is True
