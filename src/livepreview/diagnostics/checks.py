"""Individual doctor checks; each returns report entries for one category."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import importlib.util
import json
import os
import platform
import shutil

from livepreview.compat import require_compatible
from livepreview.config import PreviewConfig, config_to_dict
from livepreview.diagnostics.base import (
    CATEGORY_COMPATIBILITY,
    CATEGORY_CONFIG,
    CATEGORY_DEPENDENCIES,
    CATEGORY_SERVER,
    CATEGORY_SHELL,
    ListenerLister,
    ReportEntry,
    ServerHandle,
)
from livepreview.diagnostics.health import report
from livepreview.diagnostics.ownership import classify
from livepreview.errors import ListenerLookupError, VersionIncompatible
from livepreview.models import Severity

WhichFn = Callable[[str], str | None]
FindSpecFn = Callable[[str], object | None]


def check_compatibility(current_version: str, required_range: str) -> tuple[ReportEntry, ...]:
    try:
        require_compatible(current_version, required_range)
    except VersionIncompatible as exc:
        return (
            ReportEntry(
                category=CATEGORY_COMPATIBILITY,
                severity=Severity.ERROR,
                message=str(exc),
                hint="Please upgrade your Python",
            ),
        )
    return (
        ReportEntry(
            category=CATEGORY_COMPATIBILITY,
            severity=Severity.OK,
            message=f"Python {current_version} is compatible with livepreview",
        ),
    )


def required_shell(system: str | None = None) -> str:
    resolved = system if system is not None else platform.system()
    return "powershell" if resolved.lower().startswith("windows") else "sh"


def check_shell(system: str | None = None, which: WhichFn = shutil.which) -> tuple[ReportEntry, ...]:
    shell = required_shell(system)
    if not which(shell):
        return (
            ReportEntry(
                category=CATEGORY_SHELL,
                severity=Severity.ERROR,
                message=f"`{shell}` is not available",
                hint="Please make sure it is installed and available in your PATH",
            ),
        )
    return (ReportEntry(category=CATEGORY_SHELL, severity=Severity.OK, message=f"`{shell}` is available"),)


def check_optional_dependencies(
    modules: Iterable[str],
    find_spec: FindSpecFn = importlib.util.find_spec,
) -> tuple[ReportEntry, ...]:
    entries: list[ReportEntry] = []
    for name in modules:
        if not name:
            continue
        if _module_available(name, find_spec):
            entries.append(
                ReportEntry(category=CATEGORY_DEPENDENCIES, severity=Severity.OK, message=f"`{name}` is installed")
            )
        else:
            entries.append(
                ReportEntry(
                    category=CATEGORY_DEPENDENCIES,
                    severity=Severity.WARN,
                    message=f"`{name}` (optional) is not installed",
                )
            )
    return tuple(entries)


def check_server_port(
    port: int,
    *,
    lister: ListenerLister,
    self_pid: int | None = None,
    server: ServerHandle | None = None,
    self_pid_assumed: bool = False,
) -> tuple[ReportEntry, ...]:
    pid = self_pid if self_pid is not None else os.getpid()
    entries = [ReportEntry(category=CATEGORY_SERVER, severity=Severity.OK, message=f"Checking ownership for PID {pid}")]
    try:
        records = lister(port)
    except ListenerLookupError as exc:
        entries.append(
            ReportEntry(
                category=CATEGORY_SERVER,
                severity=Severity.ERROR,
                message=f"Could not list processes listening on port {port}: {exc}",
                hint="Install lsof or re-run with elevated privileges.",
            )
        )
        return tuple(entries)

    for verdict in report(classify(records, pid), port=port, server=server, self_pid_assumed=self_pid_assumed):
        entries.append(
            ReportEntry(
                category=CATEGORY_SERVER,
                severity=verdict.severity,
                message=verdict.message,
                hint=verdict.hint,
                verdict=verdict,
            )
        )
    return tuple(entries)


def check_config(config: PreviewConfig) -> tuple[ReportEntry, ...]:
    """Report rejected values as errors and unknown keys as warnings."""
    entries = [
        ReportEntry(
            category=CATEGORY_CONFIG,
            severity=Severity.ERROR,
            message=f"`{key}` has an invalid value, using the default: {reason}",
            hint=f"Fix `{key}` in the config file or remove it to use the default.",
        )
        for key, reason in config.invalid_values
    ]
    entries.extend(
        ReportEntry(
            category=CATEGORY_CONFIG,
            severity=Severity.WARN,
            message=f"`{key}` is not a config option",
            hint="Run `livepreview config show` to see the supported configuration keys.",
        )
        for key in config.unknown_keys
    )
    if not entries:
        return (ReportEntry(category=CATEGORY_CONFIG, severity=Severity.OK, message="Configuration is valid"),)
    return tuple(entries)


def config_details(config: PreviewConfig) -> str:
    return json.dumps(config_to_dict(config), indent=2, sort_keys=True)


def _module_available(name: str, find_spec: FindSpecFn) -> bool:
    try:
        return find_spec(name) is not None
    except (ImportError, ValueError):
        # find_spec imports parent packages of dotted names.
        return False
