from pathlib import Path

import pytest

from config import (
    DEFAULT_CLOSE_GRACE,
    DEFAULT_CONFIG_PATH,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LOG_LEVEL,
    load_runtime_config,
)

_VARS = ("WORKBENCH_CONFIG", "WORKBENCH_CONNECT_TIMEOUT", "WORKBENCH_CLOSE_GRACE", "WORKBENCH_LOG_LEVEL")


def test_load_config_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)

    cfg = load_runtime_config()

    assert cfg.config_path == Path(DEFAULT_CONFIG_PATH)
    assert cfg.connect_timeout == DEFAULT_CONNECT_TIMEOUT
    assert cfg.close_grace == DEFAULT_CLOSE_GRACE
    assert cfg.log_level == DEFAULT_LOG_LEVEL


def test_load_config_honours_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKBENCH_CONFIG", "/etc/workbench.toml")
    monkeypatch.setenv("WORKBENCH_CONNECT_TIMEOUT", "12.5")
    monkeypatch.setenv("WORKBENCH_CLOSE_GRACE", "2")
    monkeypatch.setenv("WORKBENCH_LOG_LEVEL", "debug")

    cfg = load_runtime_config()

    assert cfg.config_path == Path("/etc/workbench.toml")
    assert cfg.connect_timeout == 12.5
    assert cfg.close_grace == 2.0
    assert cfg.log_level == "DEBUG"


def test_load_config_invalid_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKBENCH_CONFIG", " ")
    monkeypatch.setenv("WORKBENCH_CONNECT_TIMEOUT", "not-a-number")
    monkeypatch.setenv("WORKBENCH_CLOSE_GRACE", "-3")

    cfg = load_runtime_config()

    assert cfg.config_path == Path(DEFAULT_CONFIG_PATH)
    assert cfg.connect_timeout == DEFAULT_CONNECT_TIMEOUT
    assert cfg.close_grace == DEFAULT_CLOSE_GRACE
