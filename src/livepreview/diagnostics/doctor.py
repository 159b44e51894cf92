"""Doctor orchestration: run every check and collect one report."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
import importlib.util
import os
import shutil

from livepreview.compat import PYTHON_VERSION, SUPPORTED_PYTHON_RANGE
from livepreview.config import PreviewConfig
from livepreview.diagnostics.base import (
    CATEGORY_COMPATIBILITY,
    CATEGORY_CONFIG,
    CATEGORY_DEPENDENCIES,
    CATEGORY_SERVER,
    CATEGORY_SHELL,
    DiagnosticReport,
    ListenerLister,
    ReportEntry,
    ServerHandle,
)
from livepreview.diagnostics.checks import (
    FindSpecFn,
    WhichFn,
    check_compatibility,
    check_config,
    check_optional_dependencies,
    check_server_port,
    check_shell,
    config_details,
)
from livepreview.diagnostics.listeners import DEFAULT_LOOKUP_TIMEOUT, list_listeners_on_port
from livepreview.errors import DiagnosticsError
from livepreview.logging import get_logger
from livepreview.models import Severity

logger = get_logger(__name__)

CheckFn = Callable[[], tuple[ReportEntry, ...]]


def run_diagnostics(
    config: PreviewConfig,
    *,
    server: ServerHandle | None = None,
    self_pid: int | None = None,
    self_pid_assumed: bool = False,
    lister: ListenerLister | None = None,
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    python_version: str | None = None,
    supported_range: str | None = None,
    system: str | None = None,
    which: WhichFn = shutil.which,
    find_spec: FindSpecFn = importlib.util.find_spec,
) -> DiagnosticReport:
    """Run compatibility, shell, dependency, server-port and config checks.

    Every check runs inside its own boundary, so one failing check becomes an
    error entry and the remaining checks still run. The server-port check only
    runs when ``config.port`` is set. ``self_pid_assumed`` marks ``self_pid`` as a
    guess, which turns foreign listeners into UNKNOWN verdicts.
    """
    if lookup_timeout <= 0:
        raise DiagnosticsError("lookup_timeout must be > 0.")

    pid = self_pid if self_pid is not None else os.getpid()
    version = python_version or PYTHON_VERSION
    required = supported_range or SUPPORTED_PYTHON_RANGE
    resolved_lister = lister or partial(list_listeners_on_port, timeout=lookup_timeout)

    checks: list[tuple[str, CheckFn]] = [
        (CATEGORY_COMPATIBILITY, lambda: check_compatibility(version, required)),
        (CATEGORY_SHELL, lambda: check_shell(system, which)),
        (CATEGORY_DEPENDENCIES, lambda: check_optional_dependencies(config.pickers, find_spec)),
    ]
    port = config.port
    if port is not None:
        checks.append(
            (
                CATEGORY_SERVER,
                lambda: check_server_port(
                    port,
                    lister=resolved_lister,
                    self_pid=pid,
                    server=server,
                    self_pid_assumed=self_pid_assumed,
                ),
            )
        )
    checks.append((CATEGORY_CONFIG, lambda: check_config(config)))

    entries: list[ReportEntry] = []
    for category, check in checks:
        entries.extend(_run_isolated(category, check))

    details = {
        "pid": str(pid),
        "python_version": version,
        "supported_range": required,
        "config": config_details(config),
    }
    if port is not None:
        details["port"] = str(port)
    return DiagnosticReport(entries=tuple(entries), details=details)


def _run_isolated(category: str, check: CheckFn) -> tuple[ReportEntry, ...]:
    logger.debug("Running %s check", category)
    try:
        return check()
    except Exception as exc:
        logger.warning("The %s check raised an unexpected error: %s", category, exc)
        return (
            ReportEntry(
                category=category,
                severity=Severity.ERROR,
                message=f"The {category} check raised an unexpected error: {exc}",
            ),
        )
