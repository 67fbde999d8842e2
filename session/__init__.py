"""Toolbox configuration and opened-toolbox state."""
from .env import expand_env_vars
from .settings import (
    ServerLaunchSpec,
    ToolboxConfig,
    WorkbenchConfig,
    config_from_mapping,
    load_workbench_config,
)
from .toolbox import OpenToolboxResult, ToolboxRegistry, ToolboxSession

__all__ = [
    "OpenToolboxResult",
    "ServerLaunchSpec",
    "ToolboxConfig",
    "ToolboxRegistry",
    "ToolboxSession",
    "WorkbenchConfig",
    "config_from_mapping",
    "expand_env_vars",
    "load_workbench_config",
]
