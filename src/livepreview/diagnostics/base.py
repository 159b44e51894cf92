"""Diagnostics interfaces."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

from livepreview.models import HealthVerdict, ListenerRecord, Severity

ListenerLister = Callable[[int], Sequence[ListenerRecord]]

CATEGORY_COMPATIBILITY = "compatibility"
CATEGORY_SHELL = "shell"
CATEGORY_DEPENDENCIES = "dependencies"
CATEGORY_SERVER = "server"
CATEGORY_CONFIG = "config"


class ServerHandle(Protocol):
    """The preview server as seen by diagnostics; never created or owned here."""

    @property
    def webroot(self) -> str | None: ...

    def is_running(self) -> bool: ...


@dataclass(frozen=True)
class ReportEntry:
    category: str
    severity: Severity
    message: str
    hint: str | None = None
    verdict: HealthVerdict | None = None


@dataclass(frozen=True)
class DiagnosticReport:
    entries: tuple[ReportEntry, ...] = ()
    details: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Frozen all the way down: details are exposed read-only.
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def ok(self) -> bool:
        return all(entry.severity is not Severity.ERROR for entry in self.entries)

    @property
    def categories(self) -> tuple[str, ...]:
        seen: list[str] = []
        for entry in self.entries:
            if entry.category not in seen:
                seen.append(entry.category)
        return tuple(seen)

    def for_category(self, category: str) -> tuple[ReportEntry, ...]:
        return tuple(entry for entry in self.entries if entry.category == category)

    @property
    def verdicts(self) -> tuple[HealthVerdict, ...]:
        return tuple(entry.verdict for entry in self.entries if entry.verdict is not None)
