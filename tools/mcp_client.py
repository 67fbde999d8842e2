"""Live connections to downstream MCP servers over stdio."""
from __future__ import annotations

import asyncio
import logging
import os
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from mcp.client.session import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client

from session.settings import ServerLaunchSpec

logger = logging.getLogger(__name__)


class DownstreamClient(Protocol):
    """Operations the workbench needs from a downstream client handle."""

    async def list_tools(self) -> Any:
        ...

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        ...

    async def aclose(self) -> None:
        ...


DownstreamConnector = Callable[[str, ServerLaunchSpec], Awaitable[DownstreamClient]]


@dataclass
class DownstreamConnection:
    """One live downstream server owned by exactly one toolbox session."""

    server: str
    spec: ServerLaunchSpec
    client: DownstreamClient
    tools: List[Any] = field(default_factory=list)
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def find_tool(self, name: str) -> Optional[Any]:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        return await self.client.call_tool(name, arguments)

    async def aclose(self) -> None:
        await self.client.aclose()

    def terminate(self) -> None:
        """Forcefully stop the underlying process without waiting for it."""

        terminate = getattr(self.client, "terminate", None)
        if terminate is not None:
            terminate()


class StdioDownstreamClient:
    """Client handle whose stdio process and session live in a dedicated task.

    The transport context managers must be entered and exited by the same
    task, so a background task owns them for the connection's whole lifetime
    and ``aclose`` only signals it to unwind.
    """

    def __init__(self, name: str, parameters: StdioServerParameters) -> None:
        self.name = name
        self._parameters = parameters
        self._session: Optional[ClientSession] = None
        self._error: Optional[BaseException] = None
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name=f"downstream:{self.name}")
        try:
            await self._ready.wait()
        except asyncio.CancelledError:
            self._task.cancel()
            raise
        if self._session is None:
            error = self._error or RuntimeError("server exited during startup")
            raise error

    async def _run(self) -> None:
        try:
            async with AsyncExitStack() as stack:
                read_stream, write_stream = await stack.enter_async_context(stdio_client(self._parameters))
                session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
                await session.initialize()
                self._session = session
                self._ready.set()
                await self._closing.wait()
        except Exception as exc:
            self._error = exc
            logger.debug("Downstream server '%s' stopped: %s", self.name, exc)
        finally:
            self._session = None
            self._ready.set()

    def _require_session(self) -> ClientSession:
        if self._session is None:
            reason = f": {self._error}" if self._error else ""
            raise RuntimeError(f"connection to server '{self.name}' is closed{reason}")
        return self._session

    async def list_tools(self) -> Any:
        return await self._require_session().list_tools()

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        return await self._require_session().call_tool(name, arguments)

    async def aclose(self) -> None:
        self._closing.set()
        if self._task is not None:
            await asyncio.shield(self._task)

    def terminate(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()


def build_stdio_parameters(spec: ServerLaunchSpec) -> StdioServerParameters:
    env = dict(os.environ)
    env.update(spec.env_dict())
    return StdioServerParameters(
        command=spec.command,
        args=list(spec.args),
        env=env,
        cwd=str(spec.cwd) if spec.cwd else None,
        encoding=spec.encoding,
        encoding_error_handler=spec.encoding_errors,
    )


async def connect_stdio_server(server: str, spec: ServerLaunchSpec) -> StdioDownstreamClient:
    """Launch the configured server, complete the handshake and return its handle."""

    logger.info(
        "Connecting to server '%s': command=%s args=%s env=%s",
        server,
        spec.command,
        list(spec.args),
        ", ".join(key for key, _ in spec.env) or "(none)",
    )
    client = StdioDownstreamClient(server, build_stdio_parameters(spec))
    await client.start()
    return client


__all__ = [
    "DownstreamClient",
    "DownstreamConnection",
    "DownstreamConnector",
    "StdioDownstreamClient",
    "build_stdio_parameters",
    "connect_stdio_server",
]
