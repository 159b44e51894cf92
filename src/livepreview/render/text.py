"""Human-readable report rendering, one line per entry."""

from __future__ import annotations

from livepreview.diagnostics.base import DiagnosticReport
from livepreview.models import Severity

_MARKERS = {
    Severity.OK: "OK",
    Severity.WARN: "WARN",
    Severity.ERROR: "ERROR",
}


def render_text(report: DiagnosticReport) -> str:
    lines = ["livepreview doctor", f"Status: {'ok' if report.ok else 'fail'}"]
    for category in report.categories:
        lines.append("")
        lines.append(f"== {category}")
        for entry in report.for_category(category):
            lines.append(f"[{_MARKERS[entry.severity]}] {entry.message}")
            if entry.hint:
                lines.append(f"  hint: {entry.hint}")
    config_dump = report.details.get("config")
    if config_dump:
        lines.append("")
        lines.append("Your configuration:")
        lines.extend(f"  {line}" for line in config_dump.splitlines())
    return "\n".join(lines)
