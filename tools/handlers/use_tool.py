"""Handler for the ``use_tool`` meta-operation."""
from __future__ import annotations

from typing import Any

from mcp import types

from errors import DownstreamToolError
from tools.connection_manager import ConnectionManager, collect_text
from tools.handler import ToolInvocation, ToolOutput
from tools.schemas import parse_tool_input
from tools.spec import ToolSpec

USE_TOOL_DESCRIPTION = """Execute a tool from an opened toolbox.

Args:
  - tool: Structured identifier {"toolbox", "server", "name"} taken from an
    open_toolbox catalog entry, or its flat "identifier" string
  - arguments: Tool arguments as a JSON object (optional, defaults to {})

The request is forwarded to the downstream MCP server under the tool's
original name and its response is returned unchanged.

Example:
  {"tool": {"toolbox": "dev", "server": "filesystem", "name": "read_file"},
   "arguments": {"path": "/etc/hosts"}}

Errors name the toolbox, server and tool: toolbox not open, server not in
toolbox, tool not found, or a failure reported by the downstream tool."""


class UseToolHandler:
    """Route a call to the downstream server named by a tool identifier."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def handle(self, invocation: ToolInvocation) -> ToolOutput:
        params = parse_tool_input("use_tool", invocation.arguments)
        identifier = params.identifier()
        try:
            result = await self._manager.route_call(identifier, params.arguments)
        except DownstreamToolError as exc:
            if exc.result is None:
                raise
            return ToolOutput(
                content=exc.message,
                success=False,
                metadata={"error_type": exc.error_type.value, "error": type(exc).__name__},
                result=_annotate_error_result(exc),
            )
        return ToolOutput(content=collect_text(result), success=True, result=result)


def _annotate_error_result(exc: DownstreamToolError) -> Any:
    original = exc.result
    context = types.TextContent(
        type="text",
        text=f"Tool '{exc.name}' in server '{exc.server}' (toolbox '{exc.toolbox}') returned an error:",
    )
    if isinstance(original, types.CallToolResult):
        return original.model_copy(update={"content": [context, *original.content], "isError": True})
    return types.CallToolResult(
        content=[context, types.TextContent(type="text", text=collect_text(original))],
        isError=True,
    )


def use_tool_spec(input_schema: dict) -> ToolSpec:
    return ToolSpec(
        name="use_tool",
        title="Use a Tool from a Toolbox",
        description=USE_TOOL_DESCRIPTION,
        input_schema=input_schema,
        annotations={
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": False,
            "openWorldHint": True,
        },
    )


__all__ = ["USE_TOOL_DESCRIPTION", "UseToolHandler", "use_tool_spec"]
