"""Typer CLI for livepreview health checks."""

from __future__ import annotations

import json
import os
import warnings

import psutil
import typer

from . import __version__
from .config import (
    KNOWN_CONFIG_KEYS,
    PreviewConfig,
    config_to_dict,
    init_default_config,
    load_preview_config,
    resolve_config_path,
)
from .diagnostics.doctor import run_diagnostics
from .diagnostics.listeners import DEFAULT_LOOKUP_TIMEOUT, list_listeners_on_port
from .diagnostics.ownership import classify
from .errors import ConfigError, ConfigWarning, DiagnosticsError, ListenerLookupError
from .logging import configure_logging
from .render import render_report
from .render.jsonout import listener_to_dict
from .server import HttpProbeServer

KILL_WAIT_SECONDS = 3.0

app = typer.Typer(help="Health checks for the live-preview server.")

config_app = typer.Typer(help="Config commands.")

app.add_typer(config_app, name="config")


@config_app.command("init")
def config_init(
    path: str | None = typer.Option(
        None, "--path", help="Optional config TOML path (defaults to platform config dir)."
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    try:
        written_path = init_default_config(path, force=force)
    except ConfigError as exc:
        typer.secho(f"Config init failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    typer.echo(f"Wrote default config to {written_path}")


@config_app.command("show")
def config_show(
    path: str | None = typer.Option(
        None, "--path", help="Optional config TOML path (defaults to platform config dir)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Render resolved config as JSON."),
) -> None:
    resolved_path = resolve_config_path(path)
    try:
        config = _load_config_quietly(path)
    except ConfigError as exc:
        typer.secho(f"Config show failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    payload = {
        "path": str(resolved_path),
        "config": config_to_dict(config),
        "supported_keys": sorted(KNOWN_CONFIG_KEYS),
    }
    if as_json:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    typer.echo(f"Resolved config path: {payload['path']}")
    typer.echo(f"Port: {config.port if config.port is not None else 'not configured'}")
    typer.echo(f"Address: {config.address}")
    typer.echo(f"Optional dependencies: {', '.join(config.pickers) or 'none'}")
    typer.echo(f"Supported keys: {', '.join(sorted(KNOWN_CONFIG_KEYS))}")
    for key in config.unknown_keys:
        typer.echo(f"Unknown key: {key}")


@app.command("doctor")
def doctor(
    path: str | None = typer.Option(
        None, "--path", help="Optional config TOML path (defaults to platform config dir)."
    ),
    pid: int | None = typer.Option(
        None,
        "--pid",
        min=1,
        help="PID expected to own the server port (defaults to this process).",
    ),
    timeout: float = typer.Option(
        DEFAULT_LOOKUP_TIMEOUT,
        "--timeout",
        help="Seconds to wait for the OS port lookup.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Render the doctor report as JSON."),
) -> None:
    try:
        config = _load_config_quietly(path, strict=False)
        report = run_diagnostics(
            config,
            server=_probe_server(config),
            self_pid=pid,
            self_pid_assumed=pid is None,
            lookup_timeout=timeout,
        )
    except (ConfigError, DiagnosticsError) as exc:
        typer.secho(f"Doctor failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    typer.echo(render_report(report, "json" if as_json else "text"))
    if not report.ok:
        raise typer.Exit(1)


@app.command("ports")
def ports(
    port: int = typer.Argument(..., min=1, max=65535, help="TCP port to inspect."),
    pid: int | None = typer.Option(
        None,
        "--pid",
        min=1,
        help="PID to mark as the expected owner (defaults to this process).",
    ),
    timeout: float = typer.Option(
        DEFAULT_LOOKUP_TIMEOUT,
        "--timeout",
        help="Seconds to wait for the OS port lookup.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Render listeners as JSON."),
) -> None:
    try:
        records = list_listeners_on_port(port, timeout=timeout)
    except ListenerLookupError as exc:
        typer.secho(f"Port lookup failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    classified = classify(records, pid if pid is not None else os.getpid())
    if as_json:
        payload = [
            {**listener_to_dict(item.record), "is_self": item.is_self}
            for item in classified
        ]
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    if not classified:
        typer.echo(f"Nothing is listening on port {port}")
        return
    for item in classified:
        owner = " (self)" if item.is_self else ""
        pid_text = str(item.record.pid) if item.record.pid is not None else "?"
        typer.echo(f"{pid_text}\t{item.record.name or 'unknown'}{owner}")


@app.command("kill")
def kill(
    pid: int = typer.Argument(..., min=1, help="PID of the process holding the port."),
    force: bool = typer.Option(False, "--force", help="Send SIGKILL instead of SIGTERM."),
) -> None:
    if pid == os.getpid():
        typer.secho("Refusing to terminate the current process.", err=True, fg=typer.colors.RED)
        raise typer.Exit(2)

    try:
        process = psutil.Process(pid)
        name = process.name()
        if force:
            process.kill()
        else:
            process.terminate()
        process.wait(timeout=KILL_WAIT_SECONDS)
    except psutil.NoSuchProcess as exc:
        typer.secho(f"No process with PID {pid}.", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc
    except psutil.AccessDenied as exc:
        typer.secho(f"Not permitted to terminate PID {pid}.", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc
    except psutil.TimeoutExpired as exc:
        typer.secho(
            f"PID {pid} did not exit within {KILL_WAIT_SECONDS:g}s; retry with --force.",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(1) from exc

    typer.echo(f"Terminated `{name}` (PID {pid})")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show livepreview version and exit."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    configure_logging(debug)
    ctx.obj = {"debug": debug}
    if version:
        typer.echo(__version__)
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _load_config_quietly(path: str | None, *, strict: bool = True) -> PreviewConfig:
    # Unknown keys (and, for doctor, invalid values) are reported as doctor entries.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConfigWarning)
        return load_preview_config(path, strict=strict)


def _probe_server(config: PreviewConfig) -> HttpProbeServer | None:
    if config.port is None:
        return None
    return HttpProbeServer(address=config.address, port=config.port)
