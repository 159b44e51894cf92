"""Report formatters."""

from __future__ import annotations

from livepreview.diagnostics.base import DiagnosticReport
from livepreview.errors import RenderError
from livepreview.render.jsonout import listener_to_dict, render_json, report_to_dict
from livepreview.render.text import render_text


def render_report(report: DiagnosticReport, output_format: str) -> str:
    if output_format == "text":
        return render_text(report)
    if output_format == "json":
        return render_json(report)
    raise RenderError(f"Unsupported output format '{output_format}'. Use one of: text, json.")


__all__ = [
    "listener_to_dict",
    "render_json",
    "render_report",
    "render_text",
    "report_to_dict",
]
