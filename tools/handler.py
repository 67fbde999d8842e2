"""Core meta-operation handler protocol and supporting data structures."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol

from errors import ErrorType, WorkbenchError

from .tool_summary import summarize_tool_call, truncate_text

logger = logging.getLogger(__name__)


@dataclass
class ToolInvocation:
    """Context for a single meta-operation call."""

    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolOutput:
    """Result of a meta-operation.

    ``result`` carries a protocol-level result to hand back verbatim (a
    downstream tool result); when it is ``None`` the server wraps ``content``
    as a single text block.
    """

    content: str
    success: bool
    metadata: Dict[str, Any] | None = None
    result: Any = None


class ToolHandler(Protocol):
    """Protocol describing meta-operation handler implementations."""

    async def handle(self, invocation: ToolInvocation) -> ToolOutput:
        ...


async def execute_handler(handler: ToolHandler, invocation: ToolInvocation) -> ToolOutput:
    """Execute a handler, converting every failure into an error output."""
    start = time.monotonic()
    request_summary = summarize_tool_call(invocation.tool_name, invocation.arguments)
    try:
        result = await handler.handle(invocation)
    except WorkbenchError as exc:
        result = ToolOutput(
            content=exc.message,
            success=False,
            metadata={"error_type": exc.error_type.value, "error": type(exc).__name__},
        )
    except Exception as exc:
        logger.exception("Unexpected failure in %s", request_summary)
        result = ToolOutput(
            content=f"tool execution failed: {exc}",
            success=False,
            metadata={"error_type": ErrorType.FATAL.value, "error": type(exc).__name__},
        )

    if not result.success:
        metadata = result.metadata or {}
        metadata.setdefault("error_type", ErrorType.RECOVERABLE.value)
        result.metadata = metadata

    duration_ms = int((time.monotonic() - start) * 1000)
    outcome = "ok" if result.success else truncate_text(result.content.split("\n", 1)[0], limit=160)
    logger.debug("%s -> %s [%dms]", request_summary, outcome, duration_ms)
    return result


__all__ = [
    "ToolHandler",
    "ToolInvocation",
    "ToolOutput",
    "execute_handler",
]
