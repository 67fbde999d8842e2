"""Tool routing layer for the workbench.

The connection manager and the handlers depend on ``session`` and are imported
from their own modules (``tools.connection_manager``, ``tools.handlers``).
"""

from .handler import ToolHandler, ToolInvocation, ToolOutput, execute_handler
from .identifier import DELIMITER, ToolIdentifier, decode_tool_identifier, encode_tool_identifier
from .registry import MetaOperation, ToolRegistry
from .schemas import OpenToolboxInput, ToolIdentifierInput, ToolSchema, UseToolInput, parse_tool_input
from .spec import ToolDescriptor, ToolSpec

__all__ = [
    "DELIMITER",
    "MetaOperation",
    "OpenToolboxInput",
    "ToolDescriptor",
    "ToolHandler",
    "ToolIdentifier",
    "ToolIdentifierInput",
    "ToolInvocation",
    "ToolOutput",
    "ToolRegistry",
    "ToolSchema",
    "ToolSpec",
    "UseToolInput",
    "decode_tool_identifier",
    "encode_tool_identifier",
    "execute_handler",
    "parse_tool_input",
]
