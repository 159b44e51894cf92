"""JSON report rendering."""

from __future__ import annotations

import json

from livepreview.diagnostics.base import DiagnosticReport, ReportEntry
from livepreview.models import HealthVerdict, ListenerRecord


def render_json(report: DiagnosticReport) -> str:
    return json.dumps(report_to_dict(report), indent=2, sort_keys=True)


def report_to_dict(report: DiagnosticReport) -> dict[str, object]:
    return {
        "ok": report.ok,
        "entries": [entry_to_dict(entry) for entry in report.entries],
        "details": dict(report.details),
    }


def entry_to_dict(entry: ReportEntry) -> dict[str, object]:
    return {
        "category": entry.category,
        "severity": entry.severity.value,
        "message": entry.message,
        "hint": entry.hint,
        "verdict": verdict_to_dict(entry.verdict) if entry.verdict is not None else None,
    }


def verdict_to_dict(verdict: HealthVerdict) -> dict[str, object]:
    return {
        "kind": verdict.kind.value,
        "owned_by_self": verdict.owned_by_self,
        "server_running": verdict.server_running,
        "listener": listener_to_dict(verdict.listener) if verdict.listener is not None else None,
    }


def listener_to_dict(record: ListenerRecord) -> dict[str, object]:
    return {"pid": record.pid, "name": record.name, "port": record.port}
