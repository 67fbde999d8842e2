"""Toolbox lifecycle and call routing across downstream MCP servers."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from config import DEFAULT_CLOSE_GRACE, DEFAULT_CONNECT_TIMEOUT
from errors import (
    DownstreamConnectionError,
    DownstreamToolError,
    ServerNotFoundError,
    ToolboxNotFoundError,
    ToolboxNotOpenError,
    ToolNotFoundError,
)
from session.settings import ServerLaunchSpec, ToolboxConfig, WorkbenchConfig
from session.toolbox import OpenToolboxResult, ToolboxRegistry, ToolboxSession

from .identifier import ToolIdentifier
from .mcp_client import DownstreamConnection, DownstreamConnector, connect_stdio_server
from .tool_summary import summarize_tool_call

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Open toolboxes on demand and route calls to their downstream servers.

    Each toolbox session owns its own connections: two toolboxes declaring the
    same server name and launch spec still get separate processes.
    """

    def __init__(
        self,
        config: WorkbenchConfig,
        *,
        connector: DownstreamConnector = connect_stdio_server,
        registry: Optional[ToolboxRegistry] = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        close_grace: float = DEFAULT_CLOSE_GRACE,
    ) -> None:
        if connect_timeout <= 0 or close_grace <= 0:
            raise ValueError("connect_timeout and close_grace must be positive")
        self._config = config
        self._connector = connector
        self._registry = registry if registry is not None else ToolboxRegistry()
        self._connect_timeout = connect_timeout
        self._close_grace = close_grace

    @property
    def config(self) -> WorkbenchConfig:
        return self._config

    @property
    def registry(self) -> ToolboxRegistry:
        return self._registry

    def is_open(self, name: str) -> bool:
        return name in self._registry

    def open_toolboxes(self) -> List[str]:
        return self._registry.names()

    def get_session(self, name: str) -> Optional[ToolboxSession]:
        return self._registry.get(name)

    async def open_toolbox(self, name: str) -> OpenToolboxResult:
        """Connect every server of toolbox *name* once and return its catalog."""

        toolbox = self._config.get(name)
        if toolbox is None:
            raise ToolboxNotFoundError(name, self._config.names())

        async with self._registry.lock_for(name):
            existing = self._registry.get(name)
            if existing is not None:
                return OpenToolboxResult.from_session(existing)

            session = await self._connect_toolbox(toolbox)
            self._registry.add(session)

        logger.info(
            "Opened toolbox '%s': %d/%d servers connected, %d tools",
            name,
            session.server_count,
            len(toolbox.servers),
            len(session.catalog()),
        )
        return OpenToolboxResult.from_session(session)

    async def _connect_toolbox(self, toolbox: ToolboxConfig) -> ToolboxSession:
        connections: Dict[str, DownstreamConnection] = {}
        failures: Dict[str, str] = {}

        try:
            for server, spec in toolbox.servers.items():
                try:
                    connections[server] = await self._connect_server(server, spec)
                except asyncio.TimeoutError:
                    timeout = spec.startup_timeout_seconds or self._connect_timeout
                    failures[server] = f"timed out after {timeout:g}s"
                except Exception as exc:
                    failures[server] = str(exc) or type(exc).__name__
                if server in failures:
                    logger.error(
                        "Failed to connect to server '%s' in toolbox '%s': %s",
                        server,
                        toolbox.name,
                        failures[server],
                    )
        except BaseException:
            # Cancelled mid-open: nothing is registered, so release what was started.
            await self._close_connections(toolbox.name, connections)
            raise

        if failures and (toolbox.require_all_servers or not connections):
            await self._close_connections(toolbox.name, connections)
            raise DownstreamConnectionError(toolbox.name, failures)

        return ToolboxSession(
            name=toolbox.name,
            config=toolbox,
            connections=connections,
            failures=failures,
        )

    async def _connect_server(self, server: str, spec: ServerLaunchSpec) -> DownstreamConnection:
        timeout = spec.startup_timeout_seconds or self._connect_timeout
        return await asyncio.wait_for(self._establish(server, spec), timeout=timeout)

    async def _establish(self, server: str, spec: ServerLaunchSpec) -> DownstreamConnection:
        client = await self._connector(server, spec)
        try:
            response = await client.list_tools()
        except asyncio.CancelledError:
            terminate = getattr(client, "terminate", None)
            if terminate is not None:
                terminate()
            raise
        except Exception:
            await client.aclose()
            raise
        tools = list(response.tools)
        allowed = [tool for tool in tools if spec.allows(tool.name)]
        logger.info(
            "Connected to server '%s', found %d tools (%d after filters)",
            server,
            len(tools),
            len(allowed),
        )
        return DownstreamConnection(server=server, spec=spec, client=client, tools=allowed)

    def find_connection(self, identifier: ToolIdentifier) -> DownstreamConnection:
        """Resolve *identifier* to its connection or raise a routing error."""

        session = self._registry.get(identifier.toolbox)
        if session is None:
            raise ToolboxNotOpenError(identifier.toolbox, identifier.server, identifier.name)
        connection = session.connections.get(identifier.server)
        if connection is None:
            raise ServerNotFoundError(identifier.toolbox, identifier.server, identifier.name)
        if connection.find_tool(identifier.name) is None:
            raise ToolNotFoundError(identifier.toolbox, identifier.server, identifier.name)
        return connection

    async def route_call(self, identifier: ToolIdentifier, arguments: Mapping[str, Any]) -> Any:
        """Forward *arguments* to the tool named by *identifier* and return its result."""

        connection = self.find_connection(identifier)
        logger.debug("Routing %s", summarize_tool_call(identifier.encode(), dict(arguments)))
        try:
            result = await connection.call_tool(identifier.name, dict(arguments))
        except Exception as exc:
            error = getattr(exc, "error", None)
            raise DownstreamToolError(
                identifier.toolbox,
                identifier.server,
                identifier.name,
                str(exc) or type(exc).__name__,
                code=getattr(error, "code", None),
            ) from exc

        if result.isError:
            raise DownstreamToolError(
                identifier.toolbox,
                identifier.server,
                identifier.name,
                collect_text(result) or "tool reported an error",
                result=result,
            )
        return result

    async def close_toolbox(self, name: str) -> None:
        """Remove toolbox *name* from the registry and release its connections."""

        async with self._registry.lock_for(name):
            session = self._registry.pop(name)
        if session is None:
            raise ToolboxNotOpenError(name)
        await self._close_connections(name, session.connections)
        logger.info("Closed toolbox '%s'", name)

    async def shutdown(self) -> None:
        """Close every open toolbox; one toolbox failing never blocks the others."""

        for session in self._registry:
            try:
                await self.close_toolbox(session.name)
            except Exception as exc:
                logger.warning("Error closing toolbox '%s': %s", session.name, exc)

    async def _close_connections(self, toolbox: str, connections: Mapping[str, DownstreamConnection]) -> None:
        for server, connection in connections.items():
            try:
                await asyncio.wait_for(connection.aclose(), timeout=self._close_grace)
            except asyncio.TimeoutError:
                logger.warning(
                    "Server '%s' in toolbox '%s' did not exit within %.1fs; terminating",
                    server,
                    toolbox,
                    self._close_grace,
                )
                connection.terminate()
            except Exception as exc:
                logger.warning("Failed to disconnect from '%s' in toolbox '%s': %s", server, toolbox, exc)


def collect_text(result: Any) -> str:
    parts: list[str] = []
    for item in result.content:
        text = getattr(item, "text", None)
        if text:
            parts.append(text)
    return "\n".join(parts)


__all__ = ["ConnectionManager", "collect_text"]
