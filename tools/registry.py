"""Registry of the meta-operations advertised by the upstream server."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .handler import ToolHandler, ToolInvocation, ToolOutput, execute_handler
from .spec import ToolSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetaOperation:
    """A meta-operation definition paired with the handler that serves it."""

    spec: ToolSpec
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.spec.name


class ToolRegistry:
    """Meta-operations by name, kept in registration order."""

    def __init__(self, operations: Iterable[MetaOperation] = ()) -> None:
        self._operations: Dict[str, MetaOperation] = {}
        for operation in operations:
            self.register(operation.spec, operation.handler)

    def register(self, spec: ToolSpec, handler: ToolHandler) -> None:
        if spec.name in self._operations:
            logger.warning("Replacing meta-operation '%s'", spec.name)
        self._operations[spec.name] = MetaOperation(spec, handler)

    def names(self) -> List[str]:
        return list(self._operations)

    def specs(self) -> List[ToolSpec]:
        return [operation.spec for operation in self._operations.values()]

    def get_handler(self, name: str) -> Optional[ToolHandler]:
        operation = self._operations.get(name)
        return operation.handler if operation is not None else None

    async def dispatch(self, invocation: ToolInvocation) -> ToolOutput:
        handler = self.get_handler(invocation.tool_name)
        if handler is None:
            return ToolOutput(
                content=f"Unknown tool '{invocation.tool_name}'. Available tools: {', '.join(self.names())}",
                success=False,
            )
        return await execute_handler(handler, invocation)


__all__ = ["MetaOperation", "ToolRegistry"]
