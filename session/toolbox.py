"""Opened toolbox state and the registry that owns it."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from session.settings import ToolboxConfig
from tools.spec import ToolDescriptor

if TYPE_CHECKING:
    from tools.mcp_client import DownstreamConnection


@dataclass
class ToolboxSession:
    """Connections belonging to one opened toolbox, plus its tool catalog."""

    name: str
    config: ToolboxConfig
    connections: Dict[str, "DownstreamConnection"] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _catalog: Optional[List[ToolDescriptor]] = field(default=None, repr=False)

    @property
    def server_count(self) -> int:
        return len(self.connections)

    def catalog(self) -> List[ToolDescriptor]:
        """Return descriptors in server declaration order, then per-server tool order."""

        if self._catalog is None:
            self._catalog = [
                ToolDescriptor.from_mcp_tool(self.name, server, tool)
                for server, connection in self.connections.items()
                for tool in connection.tools
            ]
        return list(self._catalog)


@dataclass(frozen=True)
class OpenToolboxResult:
    toolbox: str
    description: Optional[str]
    servers_connected: int
    tools: List[ToolDescriptor]
    failed_servers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_session(cls, session: ToolboxSession) -> "OpenToolboxResult":
        return cls(
            toolbox=session.name,
            description=session.config.description,
            servers_connected=session.server_count,
            tools=session.catalog(),
            failed_servers=dict(session.failures),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "toolbox": self.toolbox,
            "description": self.description or "",
            "servers_connected": self.servers_connected,
            "tools": [tool.to_dict() for tool in self.tools],
        }
        if self.failed_servers:
            data["failed_servers"] = dict(self.failed_servers)
        return data


class ToolboxRegistry:
    """Mapping of toolbox name to open session, with one lock per name."""

    def __init__(self) -> None:
        self._sessions: Dict[str, ToolboxSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock_for(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[name] = lock
        return lock

    def get(self, name: str) -> Optional[ToolboxSession]:
        return self._sessions.get(name)

    def add(self, session: ToolboxSession) -> None:
        if session.name in self._sessions:
            raise KeyError(f"toolbox '{session.name}' is already registered")
        self._sessions[session.name] = session

    def pop(self, name: str) -> Optional[ToolboxSession]:
        return self._sessions.pop(name, None)

    def names(self) -> List[str]:
        return list(self._sessions)

    def __contains__(self, name: object) -> bool:
        return name in self._sessions

    def __iter__(self) -> Iterator[ToolboxSession]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["OpenToolboxResult", "ToolboxRegistry", "ToolboxSession"]
