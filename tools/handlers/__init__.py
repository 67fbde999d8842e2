"""Handlers for ``open_toolbox`` and ``use_tool``."""
from __future__ import annotations

from tools.connection_manager import ConnectionManager
from tools.registry import ToolRegistry
from tools.schemas import input_schema_for

from .open_toolbox import OpenToolboxHandler, open_toolbox_spec
from .use_tool import UseToolHandler, use_tool_spec


def build_meta_registry(manager: ConnectionManager) -> ToolRegistry:
    """Register both meta-operations against *manager*."""

    registry = ToolRegistry()
    registry.register(open_toolbox_spec(input_schema_for("open_toolbox")), OpenToolboxHandler(manager))
    registry.register(use_tool_spec(input_schema_for("use_tool")), UseToolHandler(manager))
    return registry


__all__ = ["OpenToolboxHandler", "UseToolHandler", "build_meta_registry"]
