"""Turn classified listeners into health verdicts."""

from __future__ import annotations

from collections.abc import Iterable

from livepreview.diagnostics.base import ServerHandle
from livepreview.errors import PortConflict
from livepreview.logging import get_logger
from livepreview.models import ClassifiedListener, HealthVerdict, ListenerRecord, VerdictKind

logger = get_logger(__name__)


def report(
    classified: Iterable[ClassifiedListener],
    *,
    port: int,
    server: ServerHandle | None = None,
    self_pid_assumed: bool = False,
) -> tuple[HealthVerdict, ...]:
    """Produce one verdict per listener, or a single NOT_RUNNING verdict for none.

    Never raises: a missing or failing server object degrades to UNKNOWN.
    When ``self_pid_assumed`` is set the caller only guessed its own PID, so a
    foreign listener is reported as UNKNOWN rather than as a stolen port.
    """
    items = tuple(classified)
    if not items:
        return (
            HealthVerdict(
                kind=VerdictKind.NOT_RUNNING,
                message=f"server is not listening on configured port {port}",
                hint="Start the preview server, or check that `port` matches the running server.",
            ),
        )

    verdicts: list[HealthVerdict] = []
    for item in items:
        if item.is_self:
            verdicts.append(_own_listener_verdict(item.record, port=port, server=server))
        else:
            verdicts.append(_foreign_listener_verdict(item.record, port=port, self_pid_assumed=self_pid_assumed))
    return tuple(verdicts)


def _own_listener_verdict(record: ListenerRecord, *, port: int, server: ServerHandle | None) -> HealthVerdict:
    if server is None:
        return HealthVerdict(
            kind=VerdictKind.UNKNOWN,
            message=f"this process holds port {port}, but no server object was provided to confirm it",
            listener=record,
            owned_by_self=True,
        )

    try:
        running = bool(server.is_running())
    except Exception as exc:
        logger.warning("Server object failed to report its state: %s", exc)
        return HealthVerdict(
            kind=VerdictKind.UNKNOWN,
            message=f"this process holds port {port}, but the server state could not be read: {exc}",
            listener=record,
            owned_by_self=True,
        )

    if not running:
        return HealthVerdict(
            kind=VerdictKind.PORT_STOLEN,
            message=f"another component is using the port {port}",
            hint="Another part of this process bound the port; stop it or configure a different `port`.",
            listener=record,
            owned_by_self=True,
            server_running=False,
        )

    message = f"server is healthy on port {port}"
    webroot = _webroot(server)
    if webroot:
        message = f"{message} (webroot: {webroot})"
    return HealthVerdict(
        kind=VerdictKind.HEALTHY,
        message=message,
        listener=record,
        owned_by_self=True,
        server_running=True,
    )


def _foreign_listener_verdict(record: ListenerRecord, *, port: int, self_pid_assumed: bool) -> HealthVerdict:
    if record.pid is None:
        holder = f"`{record.name}`" if record.name else "a process"
        return HealthVerdict(
            kind=VerdictKind.UNKNOWN,
            message=f"port {port} is held by {holder} whose PID could not be resolved",
            hint="Re-run with elevated privileges to identify the owning process.",
            listener=record,
        )

    if self_pid_assumed:
        return HealthVerdict(
            kind=VerdictKind.UNKNOWN,
            message=f"port {port} is held by `{record.name or 'unknown'}` (PID: {record.pid}), which may be the server",
            hint=f"If PID {record.pid} is the preview server, re-run `livepreview doctor --pid {record.pid}`.",
            listener=record,
        )

    conflict = PortConflict(port, record)
    return HealthVerdict(
        kind=VerdictKind.PORT_STOLEN,
        message=str(conflict),
        hint=conflict.hint,
        listener=record,
    )


def _webroot(server: ServerHandle) -> str | None:
    try:
        value = server.webroot
    except Exception as exc:
        logger.debug("Server object failed to report its webroot: %s", exc)
        return None
    return str(value) if value else None
