"""Handler for the ``open_toolbox`` meta-operation."""
from __future__ import annotations

import json

from tools.connection_manager import ConnectionManager
from tools.handler import ToolInvocation, ToolOutput
from tools.schemas import parse_tool_input
from tools.spec import ToolSpec

OPEN_TOOLBOX_DESCRIPTION = """Open a toolbox and discover its available tools.

Connects to every MCP server configured in the toolbox, retrieves their tool
definitions, applies the configured tool filters and returns the complete
tool list with schemas. Opening an already-open toolbox returns the cached
catalog without reconnecting.

Args:
  - toolbox: Name of the toolbox to open (see the initialization instructions)

Returns JSON:
  {
    "toolbox": string,
    "description": string,
    "servers_connected": number,
    "tools": [{"name", "server", "toolbox", "identifier", "description", "inputSchema", "annotations"}],
    "failed_servers": {server: reason}   // only when some servers failed
  }

Call the tools with use_tool, passing {toolbox, server, name} from an entry."""


class OpenToolboxHandler:
    """Connect a configured toolbox and return its tool catalog."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def handle(self, invocation: ToolInvocation) -> ToolOutput:
        params = parse_tool_input("open_toolbox", invocation.arguments)
        result = await self._manager.open_toolbox(params.toolbox)
        return ToolOutput(
            content=json.dumps(result.to_dict(), indent=2),
            success=True,
            metadata={"servers_connected": result.servers_connected, "tool_count": len(result.tools)},
        )


def open_toolbox_spec(input_schema: dict) -> ToolSpec:
    return ToolSpec(
        name="open_toolbox",
        title="Open a Toolbox",
        description=OPEN_TOOLBOX_DESCRIPTION,
        input_schema=input_schema,
        annotations={
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    )


__all__ = ["OPEN_TOOLBOX_DESCRIPTION", "OpenToolboxHandler", "open_toolbox_spec"]
