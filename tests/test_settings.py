import json
from pathlib import Path

import pytest

from errors import ConfigError, EnvExpansionError
from session.settings import config_from_mapping, load_workbench_config


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_load_json_config_with_original_key_names(tmp_path: Path) -> None:
    document = {
        "toolboxes": {
            "dev": {
                "description": "Development tools",
                "mcpServers": {
                    "mem": {"command": "npx", "args": ["-y", "memory"], "toolFilters": ["store"]},
                    "fs": {"command": "fs-server", "env": {"ROOT": "/tmp"}},
                },
            }
        }
    }
    path = _write(tmp_path, "workbench.json", json.dumps(document))

    config = load_workbench_config(path)

    toolbox = config.get("dev")
    assert toolbox is not None
    assert toolbox.description == "Development tools"
    assert list(toolbox.servers) == ["mem", "fs"]
    mem = toolbox.servers["mem"]
    assert mem.command == "npx"
    assert mem.args == ("-y", "memory")
    assert mem.tool_filters == ("store",)
    assert toolbox.servers["fs"].env_dict() == {"ROOT": "/tmp"}
    assert config.source == path.resolve()


def test_load_toml_config(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "workbench.toml",
        """
[toolboxes.ops]
description = "Operations"
require_all_servers = true

[toolboxes.ops.servers.logs]
command = "log-server"
args = "--follow --json"
cwd = "servers/logs"
tool_filters = ["*"]
startup_timeout_seconds = 5
env = ["LEVEL=debug"]
""",
    )

    config = load_workbench_config(path)

    toolbox = config.toolboxes["ops"]
    assert toolbox.require_all_servers is True
    logs = toolbox.servers["logs"]
    assert logs.args == ("--follow", "--json")
    assert logs.cwd == (tmp_path / "servers" / "logs").resolve()
    assert logs.startup_timeout_seconds == 5.0
    assert logs.env == (("LEVEL", "debug"),)
    assert logs.allows("anything") is True


def test_environment_variables_expand_before_validation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WB_COMMAND", "memory-server")
    document = {"toolboxes": {"dev": {"servers": {"mem": {"command": "${WB_COMMAND}", "args": ["${WB_MODE:-fast}"]}}}}}
    path = _write(tmp_path, "workbench.json", json.dumps(document))

    config = load_workbench_config(path)

    mem = config.toolboxes["dev"].servers["mem"]
    assert mem.command == "memory-server"
    assert mem.args == ("fast",)


def test_missing_environment_variable_fails_fast(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WB_UNSET_TOKEN", raising=False)
    document = {"toolboxes": {"dev": {"servers": {"gh": {"command": "gh", "env": {"TOKEN": "${WB_UNSET_TOKEN}"}}}}}}
    path = _write(tmp_path, "workbench.json", json.dumps(document))

    with pytest.raises(EnvExpansionError) as excinfo:
        load_workbench_config(path)

    assert excinfo.value.variable == "WB_UNSET_TOKEN"
    assert excinfo.value.location == "config.toolboxes.dev.servers.gh.env.TOKEN"


def test_missing_file_and_bad_syntax_are_config_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_workbench_config(tmp_path / "absent.json")

    broken = _write(tmp_path, "broken.json", "{ not json")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_workbench_config(broken)

    broken_toml = _write(tmp_path, "broken.toml", "[toolboxes\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_workbench_config(broken_toml)


def test_empty_toolboxes_are_allowed():
    config = config_from_mapping({"toolboxes": {}})
    assert config.names() == []


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ({}, "must have a 'toolboxes' object"),
        ({"toolboxes": {"dev": {"servers": {}}}}, "at least one MCP server"),
        ({"toolboxes": {"dev": {"description": "x"}}}, "must have a 'servers' object"),
        ({"toolboxes": {"a__b": {"servers": {"s": {"command": "c"}}}}}, "must not contain '__'"),
        ({"toolboxes": {"dev": {"servers": {"my__srv": {"command": "c"}}}}}, "must not contain '__'"),
        ({"toolboxes": {" ": {"servers": {"s": {"command": "c"}}}}}, "must contain text"),
        ({"toolboxes": {"dev": {"servers": {"s": {}}}}}, "Server 's' in toolbox 'dev' must have a 'command'"),
        ({"toolboxes": {"dev": {"servers": {"s": {"command": "c", "args": 3}}}}}, "'args' must be an array"),
        ({"toolboxes": {"dev": {"servers": {"s": {"command": "c", "env": "X"}}}}}, "'env' must be an object"),
        ({"toolboxes": {"dev": {"servers": {"s": {"command": "c", "env": ["NOEQUALS"]}}}}}, "KEY=VALUE"),
        ({"toolboxes": {"dev": {"servers": {"s": {"command": "c", "tool_filters": "read"}}}}}, "tool_filters"),
        ({"toolboxes": {"dev": {"servers": {"s": {"command": "c", "transport": "sse"}}}}}, "not supported"),
        (
            {"toolboxes": {"dev": {"servers": {"s": {"command": "c", "startup_timeout_seconds": 0}}}}},
            "must be positive",
        ),
        ({"toolboxes": {"dev": {"require_all_servers": "yes", "servers": {"s": {"command": "c"}}}}}, "boolean"),
    ],
)
def test_validation_rejects_malformed_documents(document, message):
    with pytest.raises(ConfigError, match=message):
        config_from_mapping(document)


def test_tool_filters_allow_list():
    config = config_from_mapping(
        {"toolboxes": {"dev": {"servers": {"fs": {"command": "fs", "tool_filters": ["read", "list"]}}}}}
    )
    spec = config.toolboxes["dev"].servers["fs"]
    assert spec.allows("read") is True
    assert spec.allows("write") is False
