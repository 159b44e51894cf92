"""CLI behavior for doctor, ports, kill and config commands."""

from __future__ import annotations

import json
import os
from pathlib import Path
import subprocess
import sys
from types import SimpleNamespace

import psutil
import pytest

from livepreview import __version__

pytest.importorskip("typer")

from typer.testing import CliRunner

from livepreview.cli import app

runner = CliRunner()


def _listening(port: int, pid: int | None) -> list[SimpleNamespace]:
    return [SimpleNamespace(status=psutil.CONN_LISTEN, laddr=SimpleNamespace(ip="127.0.0.1", port=port), pid=pid)]


@pytest.fixture
def foreign_listener(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(psutil, "net_connections", lambda kind: _listening(3000, 9999))
    monkeypatch.setattr("livepreview.diagnostics.listeners._process_name", lambda pid: "python")


def test_cli_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "doctor" in result.output
    assert "ports" in result.output
    assert "kill" in result.output
    assert "config" in result.output
    assert "--debug" in result.output


def test_cli_version_flag_prints_package_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_config_init_and_show_json(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"

    init_result = runner.invoke(app, ["config", "init", "--path", str(config_path)])
    assert init_result.exit_code == 0
    assert config_path.exists()

    show_result = runner.invoke(app, ["config", "show", "--path", str(config_path), "--json"])
    assert show_result.exit_code == 0
    payload = json.loads(show_result.output)
    assert payload["config"]["port"] == 5500
    assert "pickers" in payload["supported_keys"]


def test_config_show_lists_unknown_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("port = 3000\nbogusKey = true\n", encoding="utf-8")

    result = runner.invoke(app, ["config", "show", "--path", str(config_path)])
    assert result.exit_code == 0
    assert "Unknown key: bogusKey" in result.output


def test_config_show_reports_actionable_error_for_missing_path(tmp_path: Path) -> None:
    result = runner.invoke(app, ["config", "show", "--path", str(tmp_path / "missing.toml")])
    assert result.exit_code == 2
    assert "Config show failed:" in result.output
    assert "livepreview config init" in result.output


def test_doctor_reports_foreign_port_owner(tmp_path: Path, foreign_listener: None) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("port = 3000\nbogusKey = true\n", encoding="utf-8")

    result = runner.invoke(app, ["doctor", "--path", str(config_path), "--pid", "4242"])

    assert "port 3000 is being used by another process `python` (PID: 9999)" in result.output
    assert "livepreview kill 9999" in result.output
    assert "`bogusKey` is not a config option" in result.output


def test_doctor_json_contains_port_stolen_verdict(tmp_path: Path, foreign_listener: None) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("port = 3000\npickers = []\n", encoding="utf-8")

    result = runner.invoke(app, ["doctor", "--path", str(config_path), "--pid", "4242", "--json"])

    payload = json.loads(result.output)
    kinds = [entry["verdict"]["kind"] for entry in payload["entries"] if entry["verdict"]]
    assert kinds == ["port_stolen"]
    assert payload["details"]["pid"] == "4242"


def test_doctor_skips_server_checks_without_port(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(kind: str) -> list[object]:
        raise AssertionError("port table must not be read")

    monkeypatch.setattr(psutil, "net_connections", fail)
    config_path = tmp_path / "config.toml"
    config_path.write_text("pickers = []\n", encoding="utf-8")

    result = runner.invoke(app, ["doctor", "--path", str(config_path), "--json"])

    payload = json.loads(result.output)
    assert "server" not in {entry["category"] for entry in payload["entries"]}


def test_doctor_reports_invalid_config_value_and_keeps_checking(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("port = 70000\npickers = []\n", encoding="utf-8")

    result = runner.invoke(app, ["doctor", "--path", str(config_path), "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.output)
    categories = {entry["category"] for entry in payload["entries"]}
    assert {"compatibility", "shell", "config"} <= categories
    config_errors = [
        entry for entry in payload["entries"] if entry["category"] == "config" and entry["severity"] == "error"
    ]
    assert len(config_errors) == 1
    assert "`port` has an invalid value" in config_errors[0]["message"]


def test_doctor_reports_unparseable_config(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("port = = 3\n", encoding="utf-8")

    result = runner.invoke(app, ["doctor", "--path", str(config_path)])
    assert result.exit_code == 2
    assert "Doctor failed:" in result.output


def test_doctor_without_pid_does_not_suggest_killing_listener(tmp_path: Path, foreign_listener: None) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("port = 3000\npickers = []\n", encoding="utf-8")

    result = runner.invoke(app, ["doctor", "--path", str(config_path), "--json"])

    payload = json.loads(result.output)
    verdicts = [entry["verdict"] for entry in payload["entries"] if entry["verdict"]]
    assert [verdict["kind"] for verdict in verdicts] == ["unknown"]
    assert "livepreview kill" not in result.output
    assert "--pid 9999" in result.output


def test_ports_lists_listeners_as_json(foreign_listener: None) -> None:
    result = runner.invoke(app, ["ports", "3000", "--json", "--pid", "9999"])

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"pid": 9999, "name": "python", "port": 3000, "is_self": True}]


def test_ports_reports_empty_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(psutil, "net_connections", lambda kind: [])

    result = runner.invoke(app, ["ports", "3000"])
    assert result.exit_code == 0
    assert "Nothing is listening on port 3000" in result.output


def test_ports_reports_lookup_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(kind: str) -> list[object]:
        raise OSError("no /proc")

    monkeypatch.setattr(psutil, "net_connections", broken)

    result = runner.invoke(app, ["ports", "3000"])
    assert result.exit_code == 2
    assert "Port lookup failed:" in result.output


def test_kill_refuses_current_process() -> None:
    result = runner.invoke(app, ["kill", str(os.getpid())])
    assert result.exit_code == 2
    assert "Refusing" in result.output


def test_kill_reports_missing_process(monkeypatch: pytest.MonkeyPatch) -> None:
    def no_such_process(pid: int) -> psutil.Process:
        raise psutil.NoSuchProcess(pid)

    monkeypatch.setattr(psutil, "Process", no_such_process)

    result = runner.invoke(app, ["kill", "999999"])
    assert result.exit_code == 2
    assert "No process with PID 999999" in result.output


def test_kill_terminates_child_process() -> None:
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    try:
        result = runner.invoke(app, ["kill", str(child.pid)])
        assert result.exit_code == 0
        assert f"(PID {child.pid})" in result.output
    finally:
        if child.poll() is None:
            child.kill()
        child.wait()
