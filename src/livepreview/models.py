"""Data model contracts for cross-module use."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    OK = "ok"
    WARN = "warn"
    ERROR = "error"


class VerdictKind(str, Enum):
    HEALTHY = "healthy"
    NOT_RUNNING = "not_running"
    PORT_STOLEN = "port_stolen"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ListenerRecord:
    """A process holding a listening TCP socket; ``pid`` is None when unresolved."""

    pid: int | None
    name: str
    port: int


@dataclass(frozen=True)
class ClassifiedListener:
    record: ListenerRecord
    is_self: bool


@dataclass(frozen=True)
class HealthVerdict:
    """Outcome for one listener (or for an empty port).

    ``owned_by_self`` is OS-level socket ownership; ``server_running`` is the
    server object's own view of itself, None when it was not consulted.
    """

    kind: VerdictKind
    message: str
    hint: str | None = None
    listener: ListenerRecord | None = None
    owned_by_self: bool = False
    server_running: bool | None = None

    @property
    def severity(self) -> Severity:
        if self.kind is VerdictKind.HEALTHY:
            return Severity.OK
        return Severity.WARN
