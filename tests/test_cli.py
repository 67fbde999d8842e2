import json
from pathlib import Path

import pytest

import cli


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    for name in ("WORKBENCH_CONFIG", "WORKBENCH_CONNECT_TIMEOUT", "WORKBENCH_CLOSE_GRACE", "WORKBENCH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda level, console: None)


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "workbench-config.json"
    document = {
        "toolboxes": {
            "dev": {"description": "Development tools", "servers": {"mem": {"command": "memory-server"}}},
            "ops": {"servers": {"logs": {"command": "log-server"}}},
        }
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_check_prints_toolbox_summary(tmp_path: Path, capsys):
    path = _write_config(tmp_path)

    exit_code = cli.main(["--config", str(path), "--check"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "dev" in out
    assert "Development tools" in out
    assert "log-server" not in out
    assert "logs" in out


def test_invalid_config_exits_with_error(tmp_path: Path, capsys):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"toolboxes": {"dev": {"servers": {}}}}), encoding="utf-8")

    exit_code = cli.main(["--config", str(path)])

    assert exit_code == 1
    err = " ".join(capsys.readouterr().err.split())
    assert "Failed to start MCP workbench" in err
    assert "at least one MCP server" in err


def test_config_path_comes_from_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("WORKBENCH_CONFIG", str(_write_config(tmp_path)))

    assert cli.main(["--check"]) == 0


def test_main_serves_with_resolved_timeouts(tmp_path: Path, monkeypatch):
    path = _write_config(tmp_path)
    monkeypatch.setenv("WORKBENCH_CLOSE_GRACE", "2.5")
    served = []

    async def fake_serve(server):
        served.append(server)

    monkeypatch.setattr(cli, "serve", fake_serve)

    exit_code = cli.main(["--config", str(path), "--connect-timeout", "12"])

    assert exit_code == 0
    manager = served[0].manager
    assert manager.config.names() == ["dev", "ops"]
    assert manager._connect_timeout == 12
    assert manager._close_grace == 2.5


def test_resolve_runtime_ignores_non_positive_overrides(tmp_path: Path):
    args = cli.parse_args(["--connect-timeout", "0", "--log-level", "debug"])
    base = cli.RuntimeConfig(config_path=tmp_path / "x.json", connect_timeout=30.0, close_grace=5.0, log_level="INFO")

    runtime = cli.resolve_runtime(args, base)

    assert runtime.connect_timeout == 30.0
    assert runtime.config_path == tmp_path / "x.json"
    assert runtime.log_level == "DEBUG"
