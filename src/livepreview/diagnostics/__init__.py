"""Diagnostics contracts and helpers."""

from .base import DiagnosticReport, ListenerLister, ReportEntry, ServerHandle
from .checks import (
    check_compatibility,
    check_config,
    check_optional_dependencies,
    check_server_port,
    check_shell,
)
from .doctor import run_diagnostics
from .health import report
from .listeners import DEFAULT_LOOKUP_TIMEOUT, list_listeners_on_port
from .ownership import classify

__all__ = [
    "DEFAULT_LOOKUP_TIMEOUT",
    "DiagnosticReport",
    "ListenerLister",
    "ReportEntry",
    "ServerHandle",
    "check_compatibility",
    "check_config",
    "check_optional_dependencies",
    "check_server_port",
    "check_shell",
    "classify",
    "list_listeners_on_port",
    "report",
    "run_diagnostics",
]
