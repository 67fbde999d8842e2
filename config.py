"""Process runtime settings read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CONFIG_PATH = "./workbench-config.json"
DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_CLOSE_GRACE = 5.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class RuntimeConfig:
    """Simple container for process-level workbench settings."""

    config_path: Path
    connect_timeout: float
    close_grace: float
    log_level: str


def _parse_positive_float(raw: Optional[str], fallback: float) -> float:
    """Return a positive float parsed from *raw*, or *fallback* on failure."""

    if raw is None:
        return fallback
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def load_runtime_config() -> RuntimeConfig:
    """Load workbench runtime settings from environment variables with safe fallbacks."""

    config_path = (os.getenv("WORKBENCH_CONFIG") or "").strip() or DEFAULT_CONFIG_PATH
    log_level = (os.getenv("WORKBENCH_LOG_LEVEL") or "").strip().upper() or DEFAULT_LOG_LEVEL
    return RuntimeConfig(
        config_path=Path(config_path).expanduser(),
        connect_timeout=_parse_positive_float(os.getenv("WORKBENCH_CONNECT_TIMEOUT"), DEFAULT_CONNECT_TIMEOUT),
        close_grace=_parse_positive_float(os.getenv("WORKBENCH_CLOSE_GRACE"), DEFAULT_CLOSE_GRACE),
        log_level=log_level,
    )


__all__ = [
    "DEFAULT_CLOSE_GRACE",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_LOG_LEVEL",
    "RuntimeConfig",
    "load_runtime_config",
]
