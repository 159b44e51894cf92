"""Configuration schema, TOML loading and validation helpers for livepreview."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, fields
import os
from pathlib import Path
import sys
from typing import Any
import warnings

from platformdirs import user_config_dir

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import ConfigError, ConfigWarning

DEFAULT_CONFIG_FILENAME = "config.toml"
DEFAULT_PICKERS = ("iterfzf", "questionary", "InquirerPy")
MIN_PORT = 1
MAX_PORT = 65535

DEFAULT_CONFIG_TEMPLATE = """# livepreview configuration
port = 5500
address = "127.0.0.1"
browser = "default"
dynamic_root = false
sync_scroll = true
picker = ""
pickers = ["iterfzf", "questionary", "InquirerPy"]
"""


@dataclass(frozen=True)
class PreviewConfig:
    port: int | None = None
    address: str = "127.0.0.1"
    browser: str = "default"
    dynamic_root: bool = False
    sync_scroll: bool = True
    picker: str = ""
    pickers: tuple[str, ...] = DEFAULT_PICKERS
    unknown_keys: tuple[str, ...] = ()
    invalid_values: tuple[tuple[str, str], ...] = ()


_BOOKKEEPING_FIELDS = {"unknown_keys", "invalid_values"}
KNOWN_CONFIG_KEYS = frozenset(item.name for item in fields(PreviewConfig) if item.name not in _BOOKKEEPING_FIELDS)


def default_config() -> PreviewConfig:
    return PreviewConfig()


def default_config_toml() -> str:
    return DEFAULT_CONFIG_TEMPLATE


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    if config_path:
        return Path(config_path).expanduser()

    env_value = os.getenv("LIVEPREVIEW_CONFIG")
    if env_value:
        return Path(env_value).expanduser()

    config_dir = Path(user_config_dir("livepreview", appauthor=False))
    return config_dir / DEFAULT_CONFIG_FILENAME


def init_default_config(config_path: str | Path | None = None, force: bool = False) -> Path:
    """Write the default template and return where it went."""
    path = resolve_config_path(config_path)
    _require_file_path(path)
    if path.exists() and not force:
        raise ConfigError(f"{path} already exists; pass --force to replace it with the defaults.")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(default_config_toml(), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot write the default config to {path}: {exc}") from exc
    return path


def load_preview_config(config_path: str | Path | None = None, *, strict: bool = True) -> PreviewConfig:
    """Read and parse the config file; see ``parse_preview_config`` for ``strict``."""
    path = resolve_config_path(config_path)
    if not path.exists():
        raise ConfigError(f"No config at {path}; create one with `livepreview config init --path \"{path}\"`.")
    _require_file_path(path)

    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path} is not valid TOML ({exc}); fix it or rerun `livepreview config init --force`.") from exc
    return parse_preview_config(raw, strict=strict)


def config_to_dict(config: PreviewConfig) -> dict[str, Any]:
    payload = asdict(config)
    payload["pickers"] = list(config.pickers)
    payload["unknown_keys"] = list(config.unknown_keys)
    payload["invalid_values"] = dict(config.invalid_values)
    return payload


def parse_preview_config(data: Mapping[str, Any], *, strict: bool = True) -> PreviewConfig:
    """Validate a raw mapping against the schema.

    Unrecognized keys are kept in ``unknown_keys`` so diagnostics can flag them;
    they never fail parsing. With ``strict=False`` a bad value for a known key
    falls back to its default and is recorded in ``invalid_values`` instead of
    raising ``ConfigError``.
    """
    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration must be a table, got {type(data).__name__}.")

    invalid: list[tuple[str, str]] = []

    def value(key: str, parse: Callable[[], Any]) -> Any:
        try:
            return parse()
        except ConfigError as exc:
            if strict:
                raise
            invalid.append((key, str(exc)))
            return getattr(_DEFAULTS, key)

    pickers = value("pickers", lambda: _expect_string_list(data, "pickers", default=DEFAULT_PICKERS))
    picker = value("picker", lambda: _expect_picker(data, "picker", pickers))

    unknown_keys = tuple(str(key) for key in data if key not in KNOWN_CONFIG_KEYS)
    for key in unknown_keys:
        warnings.warn(f"`{key}` is not a config option", ConfigWarning, stacklevel=2)

    return PreviewConfig(
        port=value("port", lambda: _expect_port(data, "port")),
        address=value("address", lambda: _expect_non_empty_string(data, "address", default="127.0.0.1")),
        browser=value("browser", lambda: _expect_non_empty_string(data, "browser", default="default")),
        dynamic_root=value("dynamic_root", lambda: _expect_bool(data, "dynamic_root", default=False)),
        sync_scroll=value("sync_scroll", lambda: _expect_bool(data, "sync_scroll", default=True)),
        picker=picker,
        pickers=pickers,
        unknown_keys=unknown_keys,
        invalid_values=tuple(invalid),
    )


_DEFAULTS = PreviewConfig()


def _require_file_path(path: Path) -> None:
    if path.is_dir():
        raise ConfigError(f"{path} is a directory; point --path at a file such as {path / DEFAULT_CONFIG_FILENAME}.")


def _expect_picker(data: Mapping[str, Any], key: str, pickers: tuple[str, ...]) -> str:
    picker = _expect_string(data, key, default="")
    if picker and picker not in pickers:
        choices = ", ".join(pickers)
        raise ConfigError(f"Invalid value for '{key}': expected empty string or one of [{choices}].")
    return picker


def _expect_port(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_PORT <= value <= MAX_PORT:
        raise ConfigError(f"Invalid value for '{key}': expected integer port in {MIN_PORT}-{MAX_PORT}.")
    return value


def _expect_string(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"Invalid value for '{key}': expected string.")
    return value


def _expect_non_empty_string(data: Mapping[str, Any], key: str, default: str) -> str:
    value = _expect_string(data, key, default)
    if not value.strip():
        raise ConfigError(f"Invalid value for '{key}': expected non-empty string.")
    return value


def _expect_bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid value for '{key}': expected boolean true/false.")
    return value


def _expect_string_list(data: Mapping[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key, default)
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"Invalid value for '{key}': expected an array of strings.")
    if not all(isinstance(item, str) for item in value):
        raise ConfigError(f"Invalid value for '{key}': expected an array of strings.")
    return tuple(value)
