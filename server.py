"""Upstream MCP server exposing ``open_toolbox`` and ``use_tool``."""
from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from config import DEFAULT_CLOSE_GRACE, DEFAULT_CONNECT_TIMEOUT
from session.settings import WorkbenchConfig
from tools.connection_manager import ConnectionManager
from tools.handler import ToolInvocation, ToolOutput
from tools.handlers import build_meta_registry
from tools.instructions import build_instructions

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-workbench"
SERVER_VERSION = "0.1.0"


class WorkbenchServer:
    """Wires the meta-operations onto a protocol server."""

    def __init__(
        self,
        config: WorkbenchConfig,
        *,
        manager: Optional[ConnectionManager] = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        close_grace: float = DEFAULT_CLOSE_GRACE,
    ) -> None:
        self.config = config
        self.manager = manager or ConnectionManager(
            config,
            connect_timeout=connect_timeout,
            close_grace=close_grace,
        )
        self._registry = build_meta_registry(self.manager)
        self.instructions = build_instructions(config)
        self.server: Server = Server(SERVER_NAME, version=SERVER_VERSION, instructions=self.instructions)
        self._register_handlers()

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def _list_tools() -> List[types.Tool]:
            return self.list_meta_tools()

        # Inputs are validated by the handlers so errors come back as tool results.
        @self.server.call_tool(validate_input=False)
        async def _call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
            return await self.call_meta_tool(name, arguments)

    def list_meta_tools(self) -> List[types.Tool]:
        return [spec.to_mcp_tool() for spec in self._registry.specs()]

    async def call_meta_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        output = await self._registry.dispatch(ToolInvocation(tool_name=name, arguments=dict(arguments or {})))
        return to_call_tool_result(output)

    async def run_stdio(self) -> None:
        """Serve over stdin/stdout until the client disconnects, then close every toolbox."""

        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("MCP workbench server running via stdio")
                await self.server.run(read_stream, write_stream, self.server.create_initialization_options())
        finally:
            logger.info("Shutting down MCP workbench...")
            await self.manager.shutdown()


def to_call_tool_result(output: ToolOutput) -> types.CallToolResult:
    if isinstance(output.result, types.CallToolResult):
        return output.result
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=output.content)],
        isError=not output.success,
    )


async def serve(server: WorkbenchServer) -> None:
    """Run *server* on stdio, treating SIGTERM like an interrupt."""

    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    if task is not None:
        with suppress(NotImplementedError):
            loop.add_signal_handler(signal.SIGTERM, task.cancel)
    try:
        await server.run_stdio()
    except asyncio.CancelledError:
        logger.info("Shutdown requested")


__all__ = ["SERVER_NAME", "SERVER_VERSION", "WorkbenchServer", "serve", "to_call_tool_result"]
