"""Individual doctor checks."""

from __future__ import annotations

from livepreview.config import PreviewConfig
from livepreview.diagnostics.checks import (
    check_compatibility,
    check_config,
    check_optional_dependencies,
    check_server_port,
    check_shell,
    required_shell,
)
from livepreview.errors import ListenerLookupError
from livepreview.models import ListenerRecord, Severity, VerdictKind


def test_check_compatibility_ok_and_error() -> None:
    ok_entry = check_compatibility("3.12.0", ">=3.10")[0]
    assert ok_entry.severity is Severity.OK
    assert "3.12.0 is compatible" in ok_entry.message

    error_entry = check_compatibility("3.9.0", ">=3.10")[0]
    assert error_entry.severity is Severity.ERROR
    assert ">=3.10" in error_entry.message
    assert error_entry.hint == "Please upgrade your Python"


def test_required_shell_depends_on_platform() -> None:
    assert required_shell("Windows") == "powershell"
    assert required_shell("Linux") == "sh"
    assert required_shell("Darwin") == "sh"


def test_check_shell_reports_missing_shell() -> None:
    entry = check_shell("Linux", which=lambda _name: None)[0]
    assert entry.severity is Severity.ERROR
    assert entry.message == "`sh` is not available"
    assert entry.hint is not None and "PATH" in entry.hint


def test_check_shell_reports_available_shell() -> None:
    entry = check_shell("Windows", which=lambda name: f"C:/bin/{name}.exe")[0]
    assert entry.severity is Severity.OK
    assert entry.message == "`powershell` is available"


def test_check_optional_dependencies_warns_for_missing_and_skips_empty() -> None:
    installed = {"iterfzf"}

    def find_spec(name: str) -> object | None:
        if name == "broken.child":
            raise ModuleNotFoundError("No module named 'broken'")
        return object() if name in installed else None

    entries = check_optional_dependencies(["iterfzf", "", "questionary", "broken.child"], find_spec)

    assert [(entry.severity, entry.message) for entry in entries] == [
        (Severity.OK, "`iterfzf` is installed"),
        (Severity.WARN, "`questionary` (optional) is not installed"),
        (Severity.WARN, "`broken.child` (optional) is not installed"),
    ]


def test_check_config_warns_once_per_unknown_key() -> None:
    entries = check_config(PreviewConfig(port=3000, unknown_keys=("bogusKey", "other")))

    assert [entry.severity for entry in entries] == [Severity.WARN, Severity.WARN]
    assert "bogusKey" in entries[0].message
    assert "other" in entries[1].message


def test_check_config_ok_without_unknown_keys() -> None:
    entries = check_config(PreviewConfig(port=3000))
    assert len(entries) == 1
    assert entries[0].severity is Severity.OK


def test_check_server_port_starts_with_pid_entry_then_verdicts() -> None:
    entries = check_server_port(
        3000,
        lister=lambda port: [ListenerRecord(pid=9999, name="python", port=port)],
        self_pid=4242,
    )

    assert "4242" in entries[0].message
    assert entries[0].severity is Severity.OK
    assert len(entries) == 2
    assert entries[1].verdict is not None
    assert entries[1].verdict.kind is VerdictKind.PORT_STOLEN
    assert entries[1].severity is Severity.WARN


def test_check_server_port_converts_lookup_error() -> None:
    def lister(_port: int) -> list[ListenerRecord]:
        raise ListenerLookupError("lsof command not found")

    entries = check_server_port(3000, lister=lister, self_pid=4242)

    assert entries[-1].severity is Severity.ERROR
    assert "lsof command not found" in entries[-1].message
    assert entries[-1].verdict is None
