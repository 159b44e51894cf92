"""Discover which processes hold a listening TCP socket on a port."""

from __future__ import annotations

import subprocess

import psutil

from livepreview.config import MAX_PORT, MIN_PORT
from livepreview.errors import ListenerLookupError
from livepreview.logging import get_logger
from livepreview.models import ListenerRecord

DEFAULT_LOOKUP_TIMEOUT = 5.0

logger = get_logger(__name__)


def list_listeners_on_port(port: int, *, timeout: float = DEFAULT_LOOKUP_TIMEOUT) -> tuple[ListenerRecord, ...]:
    """Return one record per process listening on ``port``.

    Uses psutil's connection table first. macOS only exposes other users'
    sockets to root, so an ``AccessDenied`` there falls back to ``lsof``.
    Raises ``ListenerLookupError`` when neither mechanism can answer, so callers
    can tell "nothing is listening" apart from "could not check".
    """
    if not is_valid_port(port):
        return ()

    try:
        connections = psutil.net_connections(kind="tcp")
    except psutil.AccessDenied:
        logger.debug("psutil denied access to the connection table; falling back to lsof")
        return _list_with_lsof(port, timeout=timeout)
    except (psutil.Error, OSError) as exc:
        raise ListenerLookupError(f"Could not read the TCP connection table: {exc}") from exc

    records: list[ListenerRecord] = []
    seen: set[int | None] = set()
    for conn in connections:
        if conn.status != psutil.CONN_LISTEN or not conn.laddr:
            continue
        if conn.laddr.port != port:
            continue
        pid = conn.pid or None
        # IPv4 and IPv6 sockets of one process collapse to a single record.
        if pid in seen:
            continue
        seen.add(pid)
        records.append(ListenerRecord(pid=pid, name=_process_name(pid), port=port))

    logger.debug("psutil found %d listener(s) on port %d", len(records), port)
    return tuple(records)


def is_valid_port(port: object) -> bool:
    return isinstance(port, int) and not isinstance(port, bool) and MIN_PORT <= port <= MAX_PORT


def _process_name(pid: int | None) -> str:
    if pid is None:
        return ""
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.ZombieProcess, psutil.AccessDenied):
        return ""


def _list_with_lsof(port: int, *, timeout: float) -> tuple[ListenerRecord, ...]:
    cmd = ["lsof", "-nP", f"-iTCP:{port}", "-sTCP:LISTEN", "-Fpc"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except FileNotFoundError as exc:
        raise ListenerLookupError("lsof command not found; install lsof or run with elevated privileges.") from exc
    except subprocess.TimeoutExpired as exc:
        raise ListenerLookupError(f"lsof did not answer within {timeout:g}s.") from exc
    except OSError as exc:
        raise ListenerLookupError(f"Could not run lsof: {exc}") from exc

    # lsof exits 1 both for "no matches" and for real failures; stderr holding only
    # WARNING lines (e.g. unreadable fuse mounts) still means no matches.
    if result.returncode == 1 and not result.stdout.strip() and _only_warnings(result.stderr):
        return ()
    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise ListenerLookupError(f"lsof failed: {detail}")
    return parse_lsof_fields(result.stdout, port)


def parse_lsof_fields(output: str, port: int) -> tuple[ListenerRecord, ...]:
    """Parse ``lsof -F pc`` output: a ``p<pid>`` line followed by ``c<command>``."""
    records: list[ListenerRecord] = []
    pid: int | None = None
    name = ""
    for line in output.splitlines():
        if not line:
            continue
        tag, value = line[0], line[1:]
        if tag == "p":
            if pid is not None:
                records.append(ListenerRecord(pid=pid, name=name, port=port))
            try:
                pid = int(value)
            except ValueError as exc:
                raise ListenerLookupError(f"Unparseable lsof output line: {line!r}") from exc
            name = ""
        elif tag == "c":
            if pid is None:
                raise ListenerLookupError(f"Unparseable lsof output line: {line!r}")
            name = value
    if pid is not None:
        records.append(ListenerRecord(pid=pid, name=name, port=port))
    return tuple(records)


def _only_warnings(stderr: str) -> bool:
    # Warnings may wrap onto indented continuation lines.
    lines = [line for line in stderr.splitlines() if line.strip()]
    return all("WARNING:" in line or line[0].isspace() for line in lines) and (
        not lines or "WARNING:" in lines[0]
    )
