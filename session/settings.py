"""Toolbox configuration model and loader."""
from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from errors import ConfigError
from session.env import expand_env_vars
from tools.identifier import DELIMITER

WILDCARD_FILTER = "*"


@dataclass(frozen=True)
class ServerLaunchSpec:
    """Configuration for launching one downstream MCP server."""

    name: str
    command: str
    args: tuple[str, ...] = ()
    env: tuple[tuple[str, str], ...] = ()
    cwd: Optional[Path] = None
    tool_filters: Optional[tuple[str, ...]] = None
    startup_timeout_seconds: Optional[float] = None
    encoding: str = "utf-8"
    encoding_errors: str = "strict"

    def allows(self, tool_name: str) -> bool:
        """Return whether *tool_name* passes this server's allow-list."""

        if self.tool_filters is None or WILDCARD_FILTER in self.tool_filters:
            return True
        return tool_name in self.tool_filters

    def env_dict(self) -> Dict[str, str]:
        return {key: value for key, value in self.env}


@dataclass(frozen=True)
class ToolboxConfig:
    """A named group of downstream servers opened together."""

    name: str
    description: Optional[str] = None
    servers: Mapping[str, ServerLaunchSpec] = field(default_factory=dict)
    require_all_servers: bool = False


@dataclass(frozen=True)
class WorkbenchConfig:
    """Root configuration: toolboxes in declaration order."""

    toolboxes: Mapping[str, ToolboxConfig] = field(default_factory=dict)
    source: Optional[Path] = None

    def get(self, name: str) -> Optional[ToolboxConfig]:
        return self.toolboxes.get(name)

    def names(self) -> list[str]:
        return list(self.toolboxes)


def load_workbench_config(path: Path | str) -> WorkbenchConfig:
    """Load, expand and validate the configuration document at *path*."""

    chosen = Path(path).expanduser().resolve()
    raw = _loads(chosen)
    expanded = expand_env_vars(raw, "config")
    return config_from_mapping(expanded, base_dir=chosen.parent, source=chosen)


def _loads(path: Path) -> Mapping[str, Any]:
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file {path}: {exc}") from exc

    if path.suffix.lower() == ".toml":
        try:
            return tomllib.loads(data.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    try:
        loaded = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(loaded, Mapping):
        raise ConfigError("Configuration root must be an object")
    return loaded


def config_from_mapping(
    mapping: Mapping[str, Any],
    *,
    base_dir: Optional[Path] = None,
    source: Optional[Path] = None,
) -> WorkbenchConfig:
    """Build a validated ``WorkbenchConfig`` from an already-expanded mapping."""

    toolboxes_value = mapping.get("toolboxes")
    if not isinstance(toolboxes_value, Mapping):
        raise ConfigError("Configuration must have a 'toolboxes' object")

    toolboxes: Dict[str, ToolboxConfig] = {}
    for name, entry in toolboxes_value.items():
        toolbox_name = _validate_name(name, "Toolbox")
        if not isinstance(entry, Mapping):
            raise ConfigError(f"Toolbox '{toolbox_name}' must be an object")
        toolboxes[toolbox_name] = _parse_toolbox(toolbox_name, entry, base_dir)

    return WorkbenchConfig(toolboxes=toolboxes, source=source)


def _parse_toolbox(name: str, entry: Mapping[str, Any], base_dir: Optional[Path]) -> ToolboxConfig:
    description_raw = entry.get("description")
    if description_raw is not None and not isinstance(description_raw, str):
        raise ConfigError(f"Toolbox '{name}': 'description' must be a string")
    description = description_raw.strip() if description_raw else None

    servers_value = entry.get("servers", entry.get("mcpServers"))
    if not isinstance(servers_value, Mapping):
        raise ConfigError(f"Toolbox '{name}' must have a 'servers' object")
    if not servers_value:
        raise ConfigError(f"Toolbox '{name}' must have at least one MCP server")

    servers: Dict[str, ServerLaunchSpec] = {}
    for server_name, server_entry in servers_value.items():
        cleaned = _validate_name(server_name, f"Server in toolbox '{name}'")
        if not isinstance(server_entry, Mapping):
            raise ConfigError(f"Server '{cleaned}' in toolbox '{name}' must be an object")
        servers[cleaned] = _parse_server(name, cleaned, server_entry, base_dir)

    require_all = entry.get("require_all_servers", False)
    if not isinstance(require_all, bool):
        raise ConfigError(f"Toolbox '{name}': 'require_all_servers' must be a boolean")

    return ToolboxConfig(
        name=name,
        description=description,
        servers=servers,
        require_all_servers=require_all,
    )


def _parse_server(
    toolbox: str,
    name: str,
    entry: Mapping[str, Any],
    base_dir: Optional[Path],
) -> ServerLaunchSpec:
    where = f"Server '{name}' in toolbox '{toolbox}'"

    command_raw = entry.get("command")
    if not isinstance(command_raw, str) or not command_raw.strip():
        raise ConfigError(f"{where} must have a 'command' field")
    command = command_raw.strip()

    transport = entry.get("transport", "stdio")
    if transport != "stdio":
        raise ConfigError(f"{where}: transport '{transport}' is not supported; only 'stdio' is available")

    args_value = entry.get("args", ())
    if isinstance(args_value, (list, tuple)):
        args = tuple(str(item) for item in args_value)
    elif isinstance(args_value, str):
        args = tuple(args_value.split())
    else:
        raise ConfigError(f"{where}: 'args' must be an array")

    try:
        env = _coerce_env(entry.get("env"))
    except ValueError as exc:
        raise ConfigError(f"{where}: {exc}") from exc

    filters_value = entry.get("tool_filters", entry.get("toolFilters"))
    tool_filters: Optional[tuple[str, ...]]
    if filters_value is None:
        tool_filters = None
    elif isinstance(filters_value, (list, tuple)) and all(isinstance(item, str) for item in filters_value):
        tool_filters = tuple(filters_value)
    else:
        raise ConfigError(f"{where}: 'tool_filters' must be an array of tool names")

    cwd_value = entry.get("cwd")
    cwd_path: Optional[Path]
    if cwd_value is not None:
        cwd_path = Path(str(cwd_value)).expanduser()
        if not cwd_path.is_absolute() and base_dir is not None:
            cwd_path = (base_dir / cwd_path).resolve()
        else:
            cwd_path = cwd_path.resolve()
    else:
        cwd_path = None

    timeout_value = entry.get("startup_timeout_seconds")
    startup_timeout: Optional[float]
    if timeout_value is None:
        startup_timeout = None
    else:
        try:
            startup_timeout = float(timeout_value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{where}: 'startup_timeout_seconds' must be numeric") from exc
        if startup_timeout <= 0:
            raise ConfigError(f"{where}: 'startup_timeout_seconds' must be positive")

    return ServerLaunchSpec(
        name=name,
        command=command,
        args=args,
        env=env,
        cwd=cwd_path,
        tool_filters=tool_filters,
        startup_timeout_seconds=startup_timeout,
        encoding=str(entry.get("encoding", "utf-8")),
        encoding_errors=str(entry.get("encoding_errors", "strict")),
    )


def _validate_name(raw: Any, label: str) -> str:
    name = str(raw).strip()
    if not name:
        raise ConfigError(f"{label} name must contain text")
    if DELIMITER in name:
        raise ConfigError(f"{label} name '{name}' must not contain '{DELIMITER}'")
    return name


def _coerce_env(value: Any) -> tuple[tuple[str, str], ...]:
    if value is None:
        return ()
    if isinstance(value, Mapping):
        return tuple((str(k), str(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        pairs: list[tuple[str, str]] = []
        for item in value:
            if isinstance(item, Mapping):
                for key, val in item.items():
                    pairs.append((str(key), str(val)))
            elif isinstance(item, str):
                if "=" not in item:
                    raise ValueError("env entries provided as strings must be KEY=VALUE")
                key, _, val = item.partition("=")
                pairs.append((key.strip(), val.strip()))
            else:
                raise ValueError("env entries must be mappings or KEY=VALUE strings")
        return tuple(pairs)
    raise ValueError("'env' must be an object or sequence of KEY=VALUE strings")


__all__ = [
    "ServerLaunchSpec",
    "ToolboxConfig",
    "WILDCARD_FILTER",
    "WorkbenchConfig",
    "config_from_mapping",
    "load_workbench_config",
]
