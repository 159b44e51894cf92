"""Error taxonomy for stable module boundaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ListenerRecord


class LivePreviewError(Exception):
    """Base exception for livepreview."""


class ConfigError(LivePreviewError):
    """Raised when configuration is invalid or missing."""


class ConfigWarning(UserWarning):
    """Category for unrecognized configuration keys; reported, never fatal."""


class ListenerLookupError(LivePreviewError, LookupError):
    """Raised when the OS port/process table could not be queried."""


class PortConflict(LivePreviewError):
    """Describes a configured port held by a foreign process."""

    def __init__(self, port: int, listener: ListenerRecord) -> None:
        self.port = port
        self.listener = listener
        super().__init__(
            f"port {port} is being used by another process `{listener.name or 'unknown'}` "
            f"(PID: {listener.pid})"
        )

    @property
    def hint(self) -> str:
        return f"terminate process {self.listener.pid}, e.g. `livepreview kill {self.listener.pid}`"


class VersionIncompatible(LivePreviewError):
    """Raised when the host runtime falls outside the supported range."""

    def __init__(self, current_version: str, required_range: str) -> None:
        self.current_version = current_version
        self.required_range = required_range
        super().__init__(
            f"livepreview requires Python {required_range}, but you are using {current_version}"
        )


class DiagnosticsError(LivePreviewError):
    """Raised for doctor/diagnostics path failures."""


class RenderError(LivePreviewError):
    """Raised when rendering output fails."""
