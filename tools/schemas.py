"""Pydantic schemas for validated meta-operation inputs."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Type, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from errors import InvalidArgumentsError

from .identifier import ToolIdentifier


class ToolSchema(BaseModel):
    """Base class for all meta-operation schemas with strict validation."""

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OpenToolboxInput(ToolSchema):
    toolbox: str = Field(
        ...,
        min_length=1,
        description="Name of the toolbox to open (from the initialization instructions)",
    )


class ToolIdentifierInput(ToolSchema):
    toolbox: str = Field(..., min_length=1, description="Name of the opened toolbox")
    server: str = Field(..., min_length=1, description="Name of the MCP server providing the tool")
    name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("name", "tool"),
        description="Original tool name from the downstream server",
    )


class UseToolInput(ToolSchema):
    tool: Union[ToolIdentifierInput, str] = Field(
        ...,
        description="Structured identifier {toolbox, server, name} or the flat 'toolbox__server__name' string",
    )
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Arguments passed to the tool unchanged")

    def identifier(self) -> ToolIdentifier:
        if isinstance(self.tool, str):
            return ToolIdentifier.parse(self.tool)
        return ToolIdentifier(self.tool.toolbox, self.tool.server, self.tool.name)


_TOOL_SCHEMAS: Dict[str, Type[ToolSchema]] = {
    "open_toolbox": OpenToolboxInput,
    "use_tool": UseToolInput,
}


def parse_tool_input(tool_name: str, raw_input: Mapping[str, Any]) -> ToolSchema:
    """Validate *raw_input* for *tool_name*, raising ``InvalidArgumentsError``."""

    schema = _TOOL_SCHEMAS.get(tool_name)
    if schema is None:
        raise InvalidArgumentsError(f"no input schema registered for '{tool_name}'")
    try:
        return schema(**raw_input)
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ())) or "input"
            messages.append(f"{loc}: {err.get('msg', 'invalid value')}")
        raise InvalidArgumentsError(f"Invalid {tool_name} parameters: " + "; ".join(messages)) from exc


def input_schema_for(tool_name: str) -> Dict[str, Any]:
    return _TOOL_SCHEMAS[tool_name].model_json_schema()


__all__ = [
    "OpenToolboxInput",
    "ToolIdentifierInput",
    "ToolSchema",
    "UseToolInput",
    "input_schema_for",
    "parse_tool_input",
]
