"""Health diagnostics for the livepreview server."""

from .config import (
    KNOWN_CONFIG_KEYS,
    PreviewConfig,
    config_to_dict,
    default_config,
    init_default_config,
    load_preview_config,
    parse_preview_config,
    resolve_config_path,
)
from .models import ClassifiedListener, HealthVerdict, ListenerRecord, Severity, VerdictKind

__all__ = [
    "KNOWN_CONFIG_KEYS",
    "ClassifiedListener",
    "HealthVerdict",
    "ListenerRecord",
    "PreviewConfig",
    "Severity",
    "VerdictKind",
    "config_to_dict",
    "default_config",
    "init_default_config",
    "load_preview_config",
    "parse_preview_config",
    "resolve_config_path",
]

__version__ = "0.1.0"
