"""Tool specification models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from mcp import types

from .identifier import ToolIdentifier


@dataclass(slots=True)
class ToolSpec:
    """Describes a meta-operation exposed to the upstream client."""

    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)
    title: Optional[str] = None
    annotations: Dict[str, Any] = field(default_factory=dict)

    def to_mcp_tool(self) -> types.Tool:
        """Return the protocol-level tool definition."""
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_schema,
            annotations=types.ToolAnnotations(**self.annotations) if self.annotations else None,
        )


@dataclass(frozen=True)
class ToolDescriptor:
    """One downstream tool as listed in an ``open_toolbox`` catalog."""

    identifier: ToolIdentifier
    description: str
    input_schema: Dict[str, Any]
    annotations: Optional[Dict[str, Any]] = None

    @classmethod
    def from_mcp_tool(cls, toolbox: str, server: str, tool: types.Tool) -> "ToolDescriptor":
        original = tool.description or ""
        prefix = f"[{toolbox}/{server}]"
        schema = tool.inputSchema or {"type": "object", "properties": {}}
        annotations = tool.annotations.model_dump(exclude_none=True) if tool.annotations is not None else None
        return cls(
            identifier=ToolIdentifier(toolbox, server, tool.name),
            description=f"{prefix} {original}" if original else prefix,
            input_schema=dict(schema),
            annotations=dict(annotations) if annotations else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.identifier.name,
            "server": self.identifier.server,
            "toolbox": self.identifier.toolbox,
            "identifier": self.identifier.encode(),
            "description": self.description,
            "inputSchema": self.input_schema,
        }
        if self.annotations:
            data["annotations"] = self.annotations
        return data


__all__ = ["ToolDescriptor", "ToolSpec"]
